from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

DAY_WORDS = {
    "sun": 0,
    "sunday": 0,
    "mon": 1,
    "monday": 1,
    "tue": 2,
    "tues": 2,
    "tuesday": 2,
    "wed": 3,
    "wednesday": 3,
    "thu": 4,
    "thur": 4,
    "thurs": 4,
    "thursday": 4,
    "fri": 5,
    "friday": 5,
    "sat": 6,
    "saturday": 6,
    "周日": 0,
    "周一": 1,
    "周二": 2,
    "周三": 3,
    "周四": 4,
    "周五": 5,
    "周六": 6,
}

DAY_GROUPS = {
    "daily": frozenset(range(7)),
    "everyday": frozenset(range(7)),
    "weekdays": frozenset({1, 2, 3, 4, 5}),
    "weekends": frozenset({0, 6}),
}

ADD_WORDS = ("add", "new", "set")
LIST_WORDS = ("list", "ls", "show")
TOGGLE_WORDS = ("toggle", "switch")
DELETE_WORDS = ("delete", "del", "remove", "rm")
STOP_WORDS = ("stop", "dismiss")
HELP_WORDS = ("help", "?")
QUIT_WORDS = ("quit", "exit", "q")

TIME_RE = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?\s*(am|pm)?$", re.IGNORECASE)


@dataclass
class AlarmCommand:
    action: str
    hour: Optional[int] = None
    minute: Optional[int] = None
    repeat_days: frozenset = field(default_factory=frozenset)
    label: str = ""
    index: Optional[int] = None
    error: Optional[str] = None
    raw_text: str = ""


def parse_alarm_command(text: str) -> Optional[AlarmCommand]:
    """Parse one console line into a structured alarm command.

    Returns ``None`` for empty input and an ``unknown`` command carrying an
    error message when the line cannot be understood.
    """

    cleaned = text.strip()
    if not cleaned:
        return None
    verb, _, rest = cleaned.partition(" ")
    verb = verb.lower()
    rest = rest.strip()

    if verb in LIST_WORDS:
        return AlarmCommand(action="list", raw_text=cleaned)
    if verb in STOP_WORDS:
        return AlarmCommand(action="stop", raw_text=cleaned)
    if verb in HELP_WORDS:
        return AlarmCommand(action="help", raw_text=cleaned)
    if verb in QUIT_WORDS:
        return AlarmCommand(action="quit", raw_text=cleaned)

    if verb in TOGGLE_WORDS or verb in DELETE_WORDS:
        action = "toggle" if verb in TOGGLE_WORDS else "delete"
        index = _extract_index(rest)
        if index is None:
            return _unknown(cleaned, f"Which alarm? Use '{verb} <number>' from the list.")
        return AlarmCommand(action=action, index=index, raw_text=cleaned)

    if verb in ADD_WORDS:
        return _parse_add(rest, cleaned)

    return _unknown(cleaned, f"Unknown command {verb!r}. Type 'help' for the list of commands.")


def _parse_add(rest: str, cleaned: str) -> AlarmCommand:
    tokens = rest.split()
    parsed_time, consumed = _extract_time(tokens)
    if parsed_time is None:
        return _unknown(cleaned, "Could not understand the time, use HH:MM (e.g. 'add 7:30 am').")
    hour, minute = parsed_time

    days, label_tokens = _extract_days(tokens[consumed:])
    return AlarmCommand(
        action="add",
        hour=hour,
        minute=minute,
        repeat_days=days,
        label=" ".join(label_tokens),
        raw_text=cleaned,
    )


def _extract_time(tokens: List[str]) -> Tuple[Optional[Tuple[int, int]], int]:
    if not tokens:
        return None, 0
    consumed = 1
    candidate = tokens[0]
    if len(tokens) > 1 and tokens[1].lower() in ("am", "pm"):
        candidate = f"{candidate} {tokens[1]}"
        consumed = 2
    match = TIME_RE.match(candidate)
    if not match:
        return None, 0
    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    hour = _adjust_hour(hour, (match.group(3) or "").lower() or None)
    if hour is None or not 0 <= minute <= 59:
        return None, 0
    return (hour, minute), consumed


def _adjust_hour(hour: int, meridiem: Optional[str]) -> Optional[int]:
    if meridiem is None:
        return hour if 0 <= hour <= 23 else None
    if not 1 <= hour <= 12:
        return None
    if meridiem == "am":
        return 0 if hour == 12 else hour
    return hour if hour == 12 else hour + 12


def _extract_days(tokens: List[str]) -> Tuple[frozenset, List[str]]:
    days = set()
    index = 0
    # Day words lead the remainder; everything after them is the label.
    while index < len(tokens):
        word = tokens[index].lower().strip(",")
        if word in DAY_GROUPS:
            days |= DAY_GROUPS[word]
        elif word in DAY_WORDS:
            days.add(DAY_WORDS[word])
        else:
            break
        index += 1
    return frozenset(days), tokens[index:]


def _extract_index(text: str) -> Optional[int]:
    match = re.match(r"#?(\d+)$", text.strip())
    if match:
        return int(match.group(1))
    return None


def _unknown(cleaned: str, error: str) -> AlarmCommand:
    return AlarmCommand(action="unknown", error=error, raw_text=cleaned)
