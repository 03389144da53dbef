from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def local_timezone() -> tzinfo:
    return datetime.now().astimezone().tzinfo  # type: ignore[return-value]


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Zone for trigger computation; falls back to the system zone."""
    if not name:
        return local_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        local_tz = local_timezone()
        logger.warning(
            "Failed to load timezone %s (%s), using system zone %s",
            name,
            exc,
            getattr(local_tz, "key", local_tz),
        )
        return local_tz


def now_in_tz(tz: Optional[tzinfo]) -> datetime:
    if tz:
        return datetime.now(tz)
    return datetime.now().astimezone()
