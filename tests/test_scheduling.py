"""
Dose count, dose timestamps and reminder records.
"""
import math
from datetime import datetime, timedelta

import pytest

from botilyx.utils.scheduling import (
    CHANNEL_OFFSETS,
    CHANNELS,
    build_reminder_notifications,
    compute_dose_count,
    generate_dose_timestamps,
)

START = datetime(2024, 1, 1, 8, 0, 0)
ALL_ON = {"push": True, "email": True, "browser": True, "sound": True}
ALL_OFF = {"push": False, "email": False, "browser": False, "sound": False}


class TestDoseCount:

    def test_every_eight_hours_for_one_day(self):
        assert compute_dose_count(1, 8) == 3

    def test_every_eight_hours_for_a_week(self):
        assert compute_dose_count(7, 8) == 21

    def test_partial_final_interval_rounds_up(self):
        # 24h / 5h = 4.8 -> a fifth dose still falls inside the window
        assert compute_dose_count(1, 5) == 5

    def test_zero_duration_is_empty(self):
        assert compute_dose_count(0, 8) == 0

    @pytest.mark.parametrize("duration_days,frequency_hours", [
        (1, 1), (1, 7), (2, 36), (3, 48), (10, 24), (30, 13), (5, 100),
    ])
    def test_matches_ceiling_formula(self, duration_days, frequency_hours):
        expected = math.ceil(duration_days * 24 / frequency_hours)
        assert compute_dose_count(duration_days, frequency_hours) == expected


class TestDoseTimestamps:

    def test_twice_daily_for_one_day(self):
        assert generate_dose_timestamps(START, 1, 12) == [
            datetime(2024, 1, 1, 8, 0, 0),
            datetime(2024, 1, 1, 20, 0, 0),
        ]

    def test_zero_duration_returns_empty_list(self):
        assert generate_dose_timestamps(START, 0, 8) == []

    @pytest.mark.parametrize("duration_days,frequency_hours", [(1, 8), (7, 8), (3, 5), (14, 24)])
    def test_length_first_element_and_spacing(self, duration_days, frequency_hours):
        doses = generate_dose_timestamps(START, duration_days, frequency_hours)

        assert len(doses) == compute_dose_count(duration_days, frequency_hours)
        assert doses[0] == START
        for earlier, later in zip(doses, doses[1:]):
            assert later > earlier
            assert later - earlier == timedelta(hours=frequency_hours)

    def test_returns_materialized_list(self):
        doses = generate_dose_timestamps(START, 1, 8)
        assert isinstance(doses, list)
        assert doses == generate_dose_timestamps(START, 1, 8)


class TestReminderNotifications:

    def test_two_channels_two_doses(self):
        doses = [datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 20)]
        prefs = {"push": True, "email": False, "browser": True, "sound": False}

        records = build_reminder_notifications("t-1", prefs, doses)

        assert records == [
            {"treatment_id": "t-1", "scheduled_date": datetime(2024, 1, 1, 7, 30), "sent": False, "type": "push"},
            {"treatment_id": "t-1", "scheduled_date": datetime(2024, 1, 1, 7, 45), "sent": False, "type": "browser"},
            {"treatment_id": "t-1", "scheduled_date": datetime(2024, 1, 1, 19, 30), "sent": False, "type": "push"},
            {"treatment_id": "t-1", "scheduled_date": datetime(2024, 1, 1, 19, 45), "sent": False, "type": "browser"},
        ]

    def test_channel_offsets(self):
        assert CHANNEL_OFFSETS == {
            "push": timedelta(minutes=30),
            "email": timedelta(minutes=60),
            "browser": timedelta(minutes=15),
            "sound": timedelta(minutes=5),
        }

    def test_all_channels_order_and_offsets(self):
        dose = datetime(2024, 3, 10, 12, 0)
        records = build_reminder_notifications(7, ALL_ON, [dose])

        assert [r["type"] for r in records] == list(CHANNELS)
        for record in records:
            assert record["scheduled_date"] == dose - CHANNEL_OFFSETS[record["type"]]
            assert record["scheduled_date"] < dose
            assert record["sent"] is False
            assert record["treatment_id"] == 7

    def test_count_is_doses_times_enabled_channels(self):
        doses = generate_dose_timestamps(START, 7, 8)
        prefs = {"push": True, "email": True, "browser": False, "sound": True}

        records = build_reminder_notifications(1, prefs, doses)

        assert len(records) == len(doses) * 3

    def test_all_channels_disabled(self):
        doses = generate_dose_timestamps(START, 7, 8)
        assert build_reminder_notifications(1, ALL_OFF, doses) == []

    def test_missing_preferences_mean_no_reminders(self):
        assert build_reminder_notifications(1, None, [START]) == []

    def test_empty_dose_list(self):
        assert build_reminder_notifications(1, ALL_ON, []) == []

    def test_accepts_objects_with_channel_attributes(self):
        class Prefs:
            push = False
            email = True
            browser = False
            sound = False

        records = build_reminder_notifications(1, Prefs(), [START])

        assert len(records) == 1
        assert records[0]["type"] == "email"
        assert records[0]["scheduled_date"] == START - timedelta(hours=1)

    def test_zero_duration_pipeline(self):
        doses = generate_dose_timestamps(START, 0, 8)
        assert compute_dose_count(0, 8) == 0
        assert build_reminder_notifications(1, ALL_ON, doses) == []
