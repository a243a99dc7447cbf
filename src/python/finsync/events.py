"""Broadcast of forced-logout events to every interested consumer."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidationEvent:
    """A request was rejected as unauthorized and the session must end."""
    reason: str
    method: str | None = None
    path: str | None = None


Listener = Callable[[InvalidationEvent], None]


class InvalidationBus:
    """Explicit subscribe/publish channel for session invalidation.

    Listeners are called synchronously, in subscription order, on the thread
    that publishes. A failing listener is logged and does not stop delivery
    to the others.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: InvalidationEvent) -> None:
        with self._lock:
            listeners = list(self._listeners)
        logger.info("Session invalidated (%s); notifying %d listener(s)", event.reason, len(listeners))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Invalidation listener %r failed", listener)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
