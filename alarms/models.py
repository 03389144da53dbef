from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, time
from typing import Iterable, Union

# 0 = Sunday ... 6 = Saturday
WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
ALL_DAYS = frozenset(range(7))

TimeLike = Union[time, datetime, str]


def new_alarm_id() -> str:
    return uuid.uuid4().hex


def coerce_time(value: TimeLike) -> time:
    """Normalize a time-of-day input, dropping any date and sub-minute parts."""

    if isinstance(value, datetime):
        value = value.time()
    elif isinstance(value, str):
        try:
            value = datetime.strptime(value.strip(), "%H:%M").time()
        except ValueError as exc:
            raise ValueError(f"Alarm time must look like HH:MM, got {value!r}") from exc
    if not isinstance(value, time):
        raise ValueError(f"Unsupported alarm time value: {value!r}")
    return time(hour=value.hour, minute=value.minute)


def coerce_days(days: Iterable[int]) -> frozenset:
    result = frozenset(int(d) for d in days)
    invalid = sorted(d for d in result if d not in ALL_DAYS)
    if invalid:
        raise ValueError(f"Repeat days must be within 0..6 (0 = Sunday), got {invalid}")
    return result


@dataclass(frozen=True)
class AlarmRecord:
    time: time
    is_enabled: bool = True
    label: str = ""
    repeat_days: frozenset = frozenset()
    id: str = field(default_factory=new_alarm_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", coerce_time(self.time))
        object.__setattr__(self, "repeat_days", coerce_days(self.repeat_days))
        object.__setattr__(self, "label", self.label or "")
        if not self.id:
            object.__setattr__(self, "id", new_alarm_id())

    @classmethod
    def create(
        cls,
        at: TimeLike,
        label: str = "",
        repeat_days: Iterable[int] = (),
        is_enabled: bool = True,
    ) -> "AlarmRecord":
        return cls(time=at, is_enabled=is_enabled, label=label, repeat_days=frozenset(repeat_days))

    @property
    def time_string(self) -> str:
        return self.time.strftime("%I:%M %p")

    @property
    def repeats(self) -> bool:
        return bool(self.repeat_days)

    @property
    def repeat_summary(self) -> str:
        if not self.repeat_days:
            return ""
        if self.repeat_days == ALL_DAYS:
            return "Every day"
        return ", ".join(WEEKDAY_NAMES[d] for d in sorted(self.repeat_days))

    def toggled(self) -> "AlarmRecord":
        return replace(self, is_enabled=not self.is_enabled)

    def with_id(self, alarm_id: str) -> "AlarmRecord":
        return replace(self, id=alarm_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "time": self.time.strftime("%H:%M"),
            "is_enabled": self.is_enabled,
            "label": self.label,
            "repeat_days": sorted(self.repeat_days),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AlarmRecord":
        raw_time = data.get("time")
        alarm_id = data.get("id")
        if not raw_time or not alarm_id:
            raise ValueError("Alarm payload missing id/time fields")
        is_enabled = data.get("is_enabled", True)
        if not isinstance(is_enabled, bool):
            raise ValueError(f"Alarm is_enabled must be true/false, got {is_enabled!r}")
        return cls(
            id=str(alarm_id),
            time=str(raw_time),
            is_enabled=is_enabled,
            label=str(data.get("label") or ""),
            repeat_days=frozenset(data.get("repeat_days") or ()),
        )
