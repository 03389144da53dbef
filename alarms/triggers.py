from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Tuple

from .models import AlarmRecord


def python_weekday_to_alarm_day(weekday: int) -> int:
    """Map ``date.weekday()`` (Monday = 0) onto the alarm convention (Sunday = 0)."""
    return (weekday + 1) % 7


def trigger_components(record: AlarmRecord) -> Tuple[int, int]:
    return record.time.hour, record.time.minute


def next_fire_time(hour: int, minute: int, weekdays: Iterable[int], after: datetime) -> datetime:
    """Earliest moment strictly after ``after`` matching hour:minute.

    An empty ``weekdays`` matches any day. The result keeps ``after``'s tzinfo.
    """

    allowed = set(weekdays)
    for delta in range(0, 8):
        candidate_date = after.date() + timedelta(days=delta)
        if allowed and python_weekday_to_alarm_day(candidate_date.weekday()) not in allowed:
            continue
        candidate = datetime(
            year=candidate_date.year,
            month=candidate_date.month,
            day=candidate_date.day,
            hour=hour,
            minute=minute,
            tzinfo=after.tzinfo,
        )
        if candidate > after:
            return candidate
    # Unreachable for valid weekdays: a full week always contains a match.
    raise ValueError(f"No matching weekday in {sorted(allowed)}")
