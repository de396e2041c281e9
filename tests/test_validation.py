from datetime import datetime

import pytest

from botilyx.errors import InvalidDuration, InvalidFrequency, ValidationError
from botilyx.helpers import parse_datetime
from botilyx.utils.validation import as_bool, require_fields, validate_dosing


def test_valid_dosing_is_coerced_to_int():
    assert validate_dosing("8", "7") == (8, 7)
    assert validate_dosing(12, 0) == (12, 0)
    assert validate_dosing(24.0, 3) == (24, 3)


@pytest.mark.parametrize("frequency", [0, -8, "0", "abc", None, 1.5, True])
def test_invalid_frequency(frequency):
    with pytest.raises(InvalidFrequency) as exc:
        validate_dosing(frequency, 5)
    assert exc.value.field == "frequency_hours"
    assert exc.value.status_code == 422


@pytest.mark.parametrize("duration", [-1, "-3", "two", None])
def test_invalid_duration(duration):
    with pytest.raises(InvalidDuration) as exc:
        validate_dosing(8, duration)
    assert exc.value.field == "duration_days"


def test_frequency_checked_before_duration():
    with pytest.raises(InvalidFrequency):
        validate_dosing(0, -1)


def test_errors_share_base_class():
    assert issubclass(InvalidFrequency, ValidationError)
    assert issubclass(InvalidDuration, ValidationError)


def test_require_fields_lists_missing():
    with pytest.raises(ValidationError) as exc:
        require_fields({"name": "x", "patient": ""}, ["name", "patient", "medications"])
    assert "patient" in exc.value.message
    assert "medications" in exc.value.message


def test_as_bool_rejects_strings():
    assert as_bool(True, "push") is True
    with pytest.raises(ValidationError):
        as_bool("true", "push")


class TestParseDatetime:

    def test_naive_value_taken_as_utc(self):
        assert parse_datetime("2024-01-01T08:00:00") == datetime(2024, 1, 1, 8, 0)

    def test_zulu_suffix(self):
        assert parse_datetime("2024-01-01T08:00:00Z") == datetime(2024, 1, 1, 8, 0)

    def test_offset_converted_to_utc(self):
        assert parse_datetime("2024-01-01T05:00:00-03:00") == datetime(2024, 1, 1, 8, 0)

    def test_empty(self):
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_datetime("next tuesday")
