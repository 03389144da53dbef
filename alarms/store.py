from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Callable, List, Optional, Tuple

from .gateway import NotificationGateway
from .models import AlarmRecord, new_alarm_id
from .storage import load_records, save_records

logger = logging.getLogger(__name__)

ADDED = "added"
TOGGLED = "toggled"
DELETED = "deleted"
RESTORED = "restored"


@dataclass(frozen=True)
class AlarmChange:
    kind: str
    record: Optional[AlarmRecord] = None


Listener = Callable[[AlarmChange], None]


class AlarmStore:
    """Owns the ordered alarm list and keeps gateway triggers in sync with it.

    Every mutation is total: lookups of unknown ids are silent no-ops and
    gateway failures are logged without rolling the list change back.
    """

    def __init__(self, gateway: NotificationGateway, storage_path: Optional[Path] = None):
        self.gateway = gateway
        self.storage_path = storage_path

        self._alarms: List[AlarmRecord] = []
        self._listeners: List[Listener] = []
        self._lock = Lock()

    def restore(self) -> List[AlarmRecord]:
        if not self.storage_path:
            return []
        records = load_records(self.storage_path)
        with self._lock:
            self._alarms = []
            for record in records:
                if self._find_index(record.id) is not None:
                    logger.warning("Dropping duplicate stored alarm id %s", record.id)
                    continue
                self._alarms.append(record)
                if record.is_enabled:
                    self._schedule(record)
            restored = list(self._alarms)
        logger.info("Loaded %s alarms from %s", len(restored), self.storage_path)
        self._emit(AlarmChange(RESTORED))
        return restored

    def add(self, record: AlarmRecord) -> AlarmRecord:
        with self._lock:
            if self._find_index(record.id) is not None:
                fresh_id = new_alarm_id()
                logger.warning("Alarm id %s already in use; assigned %s", record.id, fresh_id)
                record = record.with_id(fresh_id)
            self._alarms.append(record)
            self._persist()
            self._schedule(record)
        logger.info("Alarm added %s at %s (label=%r)", record.id, record.time_string, record.label)
        self._emit(AlarmChange(ADDED, record))
        return record

    def toggle(self, alarm_id: str) -> Optional[AlarmRecord]:
        with self._lock:
            index = self._find_index(alarm_id)
            if index is None:
                logger.debug("Toggle ignored, no alarm %s", alarm_id)
                return None
            record = self._alarms[index].toggled()
            self._alarms[index] = record
            self._persist()
            if record.is_enabled:
                self._schedule(record)
            else:
                self._cancel(record.id)
        logger.info("Alarm %s %s", record.id, "enabled" if record.is_enabled else "disabled")
        self._emit(AlarmChange(TOGGLED, record))
        return record

    def delete(self, alarm_id: str) -> Optional[AlarmRecord]:
        with self._lock:
            index = self._find_index(alarm_id)
            if index is None:
                logger.debug("Delete ignored, no alarm %s", alarm_id)
                return None
            record = self._alarms.pop(index)
            self._persist()
            self._cancel(record.id)
        logger.info("Alarm deleted %s", record.id)
        self._emit(AlarmChange(DELETED, record))
        return record

    def list(self) -> Tuple[AlarmRecord, ...]:
        with self._lock:
            return tuple(self._alarms)

    def get(self, alarm_id: str) -> Optional[AlarmRecord]:
        with self._lock:
            index = self._find_index(alarm_id)
            return self._alarms[index] if index is not None else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _find_index(self, alarm_id: str) -> Optional[int]:
        for index, record in enumerate(self._alarms):
            if record.id == alarm_id:
                return index
        return None

    def _schedule(self, record: AlarmRecord) -> None:
        try:
            self.gateway.schedule(record)
        except Exception:
            logger.error("Failed to schedule notification for alarm %s", record.id, exc_info=True)

    def _cancel(self, alarm_id: str) -> None:
        try:
            self.gateway.cancel(alarm_id)
        except Exception:
            logger.error("Failed to cancel notification for alarm %s", alarm_id, exc_info=True)

    def _persist(self) -> None:
        if not self.storage_path:
            return
        try:
            save_records(self.storage_path, self._alarms)
        except OSError as exc:
            logger.error("Failed to save alarms to %s: %s", self.storage_path, exc)

    def _emit(self, change: AlarmChange) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:  # pragma: no cover - callback safety
                logger.error("Alarm change listener failed", exc_info=True)
