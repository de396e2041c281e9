# botilyx/utils/scheduling.py
"""
Dose and reminder scheduling.

All functions here are pure: no database access, no clock reads, no
timezone handling. Callers pass instants already normalized to naive UTC
(see helpers.parse_datetime) and persist whatever comes back.
"""
import math
from datetime import timedelta

CHANNELS = ("push", "email", "browser", "sound")

# Lead time of each reminder channel before the dose it announces.
CHANNEL_OFFSETS = {
    "push": timedelta(minutes=30),
    "email": timedelta(minutes=60),
    "browser": timedelta(minutes=15),
    "sound": timedelta(minutes=5),
}


def compute_dose_count(duration_days: int, frequency_hours: int) -> int:
    """Number of doses of one medication over the whole treatment period."""
    return math.ceil(duration_days * 24 / frequency_hours)


def generate_dose_timestamps(start_date, duration_days: int, frequency_hours: int) -> list:
    """
    Absolute dose instants, starting with start_date itself.

    [start, start + f, start + 2f, ...] with compute_dose_count() entries.
    """
    step = timedelta(hours=frequency_hours)
    count = compute_dose_count(duration_days, frequency_hours)
    return [start_date + i * step for i in range(count)]


def _channel_enabled(preferences, channel) -> bool:
    if preferences is None:
        return False
    if isinstance(preferences, dict):
        return bool(preferences.get(channel, False))
    return bool(getattr(preferences, channel, False))


def build_reminder_notifications(treatment_id, preferences, dose_timestamps) -> list:
    """
    One unsent reminder per dose and enabled channel.

    `preferences` may be a NotificationPreferences row, a plain dict of the
    four channel flags, or None (nothing enabled). Output is grouped by dose,
    then channel in CHANNELS order.
    """
    enabled = [c for c in CHANNELS if _channel_enabled(preferences, c)]
    notifications = []
    for dose in dose_timestamps:
        for channel in enabled:
            notifications.append({
                "treatment_id": treatment_id,
                "scheduled_date": dose - CHANNEL_OFFSETS[channel],
                "sent": False,
                "type": channel,
            })
    return notifications
