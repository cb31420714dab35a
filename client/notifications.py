"""
Operator notifications emitted by the storage façade.

A UI subscribes and renders them (toasts, status bar...). Without
subscribers they still end up in the log.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 5.0


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    duration: Optional[float] = DEFAULT_DURATION  # seconds; None = stays until dismissed

    @property
    def persistent(self) -> bool:
        return self.duration is None


Listener = Callable[[Notification], None]


class Notifier:
    """Fan-out of notifications to subscribed listeners."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(
        self,
        message: str,
        level: NotificationLevel = NotificationLevel.INFO,
        duration: Optional[float] = DEFAULT_DURATION,
    ) -> Notification:
        notification = Notification(message=message, level=level, duration=duration)
        logger.log(_LOG_LEVELS[level], f"[Notify] {level.value}: {message}")

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                # Logged and skipped; remaining listeners still run
                logger.exception("[Notify] Listener failed")

        return notification
