"""In-process event bus for ledger notifications."""

import logging
from collections import deque
from threading import Lock
from typing import Callable, Deque, List, Optional

from vault_ledger.models import EventType, LedgerEvent

logger = logging.getLogger(__name__)
events_logger = logging.getLogger("events")

Subscriber = Callable[[LedgerEvent], None]


class EventBus:
    """
    Records emitted events and fans them out to subscribers.

    Every event is also written to the "events" logger as one line.
    """

    def __init__(self, history_size: Optional[int] = None):
        """
        Initialize the bus.

        Args:
            history_size: Keep at most this many events (None = unbounded)
        """
        self._history: Deque[LedgerEvent] = deque(maxlen=history_size)
        self._subscribers: List[Subscriber] = []
        self._lock = Lock()

    def subscribe(self, callback: Subscriber) -> None:
        self._subscribers.append(callback)

    def emit(self, event: LedgerEvent) -> None:
        with self._lock:
            self._history.append(event)
        events_logger.info(event.to_log_line())
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.exception(f"Event subscriber failed on {event.event_type.value}: {e}")

    def history(self, event_type: Optional[EventType] = None) -> List[LedgerEvent]:
        """Emitted events, oldest first, optionally filtered by type."""
        with self._lock:
            events = list(self._history)
        if event_type is None:
            return events
        return [e for e in events if e.event_type == event_type]

    def clear(self) -> None:
        with self._lock:
            self._history.clear()
