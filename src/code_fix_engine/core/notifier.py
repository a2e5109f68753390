"""User-facing notifications raised while preparing and applying fixes.

The engine reports outcomes ("no fixes found", "batch rejected", "applied 3
fixes") through a notifier passed in by the caller instead of a global toast
channel. A front end supplies its own implementation; the engine only needs
``notify``.
"""

import logging
from enum import Enum
from typing import Protocol


class NotificationLevel(str, Enum):
    """Severity of a user-facing notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self) -> str:
        """Return string representation of level."""
        return self.value


class Notifier(Protocol):
    """Receives user-facing notifications."""

    def notify(self, level: NotificationLevel, message: str) -> None:
        """Deliver one notification."""
        ...


_LOGGING_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LoggingNotifier:
    """Forwards notifications to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize with the logger to write to (module logger by default)."""
        self.logger = logger or logging.getLogger(__name__)

    def notify(self, level: NotificationLevel, message: str) -> None:
        self.logger.log(_LOGGING_LEVELS[NotificationLevel(level)], message)


class NullNotifier:
    """Discards every notification."""

    def notify(self, level: NotificationLevel, message: str) -> None:
        return None


class RecordingNotifier:
    """Keeps notifications in memory, in the order they were sent."""

    def __init__(self) -> None:
        self.notifications: list[tuple[NotificationLevel, str]] = []

    def notify(self, level: NotificationLevel, message: str) -> None:
        self.notifications.append((NotificationLevel(level), message))

    def messages(self, level: NotificationLevel | None = None) -> list[str]:
        """Return recorded messages, optionally only those of one level."""
        return [text for lvl, text in self.notifications if level is None or lvl is level]

    def clear(self) -> None:
        self.notifications.clear()
