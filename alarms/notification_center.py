from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from threading import Event, Lock, Thread
from typing import Callable, Dict, Iterable, List, Optional

from .gateway import NotificationRequest
from .triggers import next_fire_time

logger = logging.getLogger(__name__)


@dataclass
class PendingNotification:
    request: NotificationRequest
    fire_at: datetime


class LocalNotificationCenter:
    """In-process registry of pending time-based alerts.

    Requests are keyed by identifier; adding a request with a known identifier
    replaces the earlier one. A background loop delivers due requests to
    ``on_deliver``. Deliveries are skipped while authorization is not granted.
    """

    def __init__(
        self,
        on_deliver: Optional[Callable[[NotificationRequest], None]] = None,
        check_interval: float = 0.8,
        timezone=None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.on_deliver = on_deliver
        self.check_interval = max(0.2, check_interval)
        self.tzinfo = timezone or datetime.now().astimezone().tzinfo
        self._clock = clock or (lambda: datetime.now(self.tzinfo))

        self._pending: Dict[str, PendingNotification] = {}
        self._authorized: Optional[bool] = None
        self._lock = Lock()
        self._stop_event = Event()
        self._thread: Optional[Thread] = None

    def request_authorization(self, granted: bool = True) -> bool:
        with self._lock:
            if self._authorized is not None:
                logger.debug("Notification authorization already resolved (granted=%s)", self._authorized)
                return self._authorized
            self._authorized = bool(granted)
        if granted:
            logger.info("Notification permission granted")
        else:
            logger.warning("Notification permission denied; alarms will not be delivered")
        return bool(granted)

    @property
    def authorized(self) -> bool:
        with self._lock:
            return bool(self._authorized)

    def add(self, request: NotificationRequest) -> None:
        now = self._clock()
        fire_at = next_fire_time(request.hour, request.minute, request.weekdays, now)
        with self._lock:
            replaced = request.identifier in self._pending
            self._pending[request.identifier] = PendingNotification(request=request, fire_at=fire_at)
        logger.info(
            "Pending notification %s for %s (repeats=%s%s)",
            request.identifier,
            fire_at.isoformat(),
            request.repeats,
            ", replaced" if replaced else "",
        )

    def remove_pending(self, identifiers: Iterable[str]) -> None:
        with self._lock:
            for identifier in identifiers:
                if self._pending.pop(identifier, None) is not None:
                    logger.info("Removed pending notification %s", identifier)

    def pending_requests(self) -> List[NotificationRequest]:
        with self._lock:
            return [p.request for p in self._pending.values()]

    def next_fire_at(self, identifier: str) -> Optional[datetime]:
        with self._lock:
            pending = self._pending.get(identifier)
            return pending.fire_at if pending else None

    def fire_due(self, now: Optional[datetime] = None) -> List[NotificationRequest]:
        now = now or self._clock()
        due: List[NotificationRequest] = []
        with self._lock:
            for identifier, pending in list(self._pending.items()):
                if pending.fire_at > now:
                    continue
                due.append(pending.request)
                if pending.request.repeats:
                    req = pending.request
                    pending.fire_at = next_fire_time(req.hour, req.minute, req.weekdays, now)
                else:
                    del self._pending[identifier]
            authorized = bool(self._authorized)
        for request in due:
            self._deliver(request, authorized)
        return due

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = Thread(target=self._loop, name="alarm-notifications", daemon=True)
        self._thread.start()
        logger.info("Notification center started (interval=%.1fs)", self.check_interval)

    def shutdown(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2)
        self._thread = None

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.fire_due()
            except Exception:  # pragma: no cover - loop safety
                logger.error("Notification check failed", exc_info=True)
            self._stop_event.wait(self.check_interval)

    def _deliver(self, request: NotificationRequest, authorized: bool) -> None:
        if not authorized:
            logger.warning("Skipping notification %s: permission not granted", request.identifier)
            return
        logger.info("Delivering notification %s: %s - %s", request.identifier, request.title, request.body)
        if self.on_deliver:
            try:
                self.on_deliver(request)
            except Exception:  # pragma: no cover - callback safety
                logger.error("on_deliver callback failed", exc_info=True)
