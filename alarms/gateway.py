from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from .models import AlarmRecord
from .triggers import trigger_components

if TYPE_CHECKING:  # pragma: no cover
    from .notification_center import LocalNotificationCenter

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Alarm"
DEFAULT_BODY = "Time to wake up"


class RepeatPolicy(str, Enum):
    # Any repeat day makes the trigger fire every day at hour:minute.
    DAILY = "daily"
    # Repeating triggers fire only on the selected weekdays.
    WEEKDAYS = "weekdays"

    @classmethod
    def parse(cls, value: str) -> "RepeatPolicy":
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown repeat policy {value!r}; expected one of: {choices}") from exc


@dataclass(frozen=True)
class NotificationRequest:
    identifier: str
    title: str
    body: str
    hour: int
    minute: int
    repeats: bool
    weekdays: frozenset = frozenset()


class NotificationGateway(Protocol):
    def schedule(self, record: AlarmRecord) -> None: ...

    def cancel(self, alarm_id: str) -> None: ...


def build_request(
    record: AlarmRecord,
    title: str = DEFAULT_TITLE,
    default_body: str = DEFAULT_BODY,
    repeat_policy: RepeatPolicy = RepeatPolicy.DAILY,
) -> NotificationRequest:
    hour, minute = trigger_components(record)
    weekdays = record.repeat_days if repeat_policy is RepeatPolicy.WEEKDAYS else frozenset()
    return NotificationRequest(
        identifier=record.id,
        title=title,
        body=record.label or default_body,
        hour=hour,
        minute=minute,
        repeats=record.repeats,
        weekdays=weekdays,
    )


class LocalNotificationGateway:
    """Maps alarm records onto pending requests of a LocalNotificationCenter."""

    def __init__(
        self,
        center: "LocalNotificationCenter",
        title: str = DEFAULT_TITLE,
        default_body: str = DEFAULT_BODY,
        repeat_policy: RepeatPolicy = RepeatPolicy.DAILY,
    ):
        self.center = center
        self.title = title
        self.default_body = default_body
        self.repeat_policy = repeat_policy

    def schedule(self, record: AlarmRecord) -> None:
        request = build_request(record, self.title, self.default_body, self.repeat_policy)
        self.center.add(request)
        logger.debug(
            "Scheduled trigger %s at %02d:%02d (repeats=%s)",
            request.identifier,
            request.hour,
            request.minute,
            request.repeats,
        )

    def cancel(self, alarm_id: str) -> None:
        self.center.remove_pending([alarm_id])
