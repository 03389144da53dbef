from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .models import AlarmRecord
from .parser import AlarmCommand, parse_alarm_command
from .sounds import AlarmSoundPlayer
from .store import AlarmStore

logger = logging.getLogger(__name__)

HELP_TEXT = "\n".join(
    [
        "Commands:",
        "  add HH:MM [am|pm] [days...] [label]   e.g. add 7:30 am mon fri Gym",
        "      days: sun..sat, daily, weekdays, weekends, 周日..周六",
        "  list                                  show alarms",
        "  toggle N                              enable/disable alarm N",
        "  delete N                              remove alarm N",
        "  stop                                  silence a ringing alarm",
        "  quit",
    ]
)


@dataclass
class CommandResult:
    handled: bool
    response_text: Optional[str] = None
    action: Optional[str] = None
    quit: bool = False


class CommandRouter:
    def __init__(self, store: AlarmStore, sound_player: Optional[AlarmSoundPlayer] = None):
        self.store = store
        self.sound_player = sound_player

    def handle_text(self, text: str) -> Optional[CommandResult]:
        parsed = parse_alarm_command(text)
        if not parsed:
            return None
        logger.debug("Alarm command parsed: %s", parsed)
        return self.handle_command(parsed)

    def handle_command(self, parsed: AlarmCommand) -> CommandResult:
        if parsed.action == "unknown":
            return CommandResult(handled=False, response_text=parsed.error, action=parsed.action)

        if parsed.action == "help":
            return CommandResult(handled=True, response_text=HELP_TEXT, action="help")

        if parsed.action == "quit":
            return CommandResult(handled=True, response_text="Bye.", action="quit", quit=True)

        if parsed.action == "list":
            return CommandResult(handled=True, response_text=self.render_list(), action="list")

        if parsed.action == "add":
            record = AlarmRecord.create(
                at=f"{parsed.hour:02d}:{parsed.minute:02d}",
                label=parsed.label,
                repeat_days=parsed.repeat_days,
            )
            record = self.store.add(record)
            resp = f"Alarm set for {record.time_string}"
            if record.repeat_summary:
                resp += f" ({record.repeat_summary})"
            return CommandResult(handled=True, response_text=resp + ".", action="add")

        if parsed.action in ("toggle", "delete"):
            target = self._by_index(parsed.index)
            if target is None:
                return CommandResult(
                    handled=True,
                    response_text=f"No alarm number {parsed.index}.",
                    action=parsed.action,
                )
            if parsed.action == "toggle":
                updated = self.store.toggle(target.id)
                state = "on" if updated and updated.is_enabled else "off"
                resp = f"Alarm {target.time_string} turned {state}."
            else:
                self.store.delete(target.id)
                resp = f"Removed alarm {target.time_string}."
            return CommandResult(handled=True, response_text=resp, action=parsed.action)

        if parsed.action == "stop":
            if self.sound_player and self.sound_player.is_playing:
                self.sound_player.stop_loop()
                resp = "Alarm stopped."
            else:
                resp = "Nothing is ringing."
            return CommandResult(handled=True, response_text=resp, action="stop")

        return CommandResult(handled=False, action=parsed.action)

    def render_list(self) -> str:
        alarms = self.store.list()
        if not alarms:
            return "No alarms yet."
        return "\n".join(format_alarm_row(idx, alarm) for idx, alarm in enumerate(alarms, start=1))

    def _by_index(self, index: Optional[int]) -> Optional[AlarmRecord]:
        alarms = self.store.list()
        if index is None or index < 1 or index > len(alarms):
            return None
        return alarms[index - 1]


def format_alarm_row(index: int, alarm: AlarmRecord) -> str:
    state = "on" if alarm.is_enabled else "off"
    row = f"{index}) {alarm.time_string} [{state}]"
    if alarm.label:
        row += f" {alarm.label}"
    if alarm.repeat_summary:
        row += f" - {alarm.repeat_summary}"
    return row
