"""
User-visible notices.

The engine reports the outcome of user actions (and transport failures)
as short notices, the equivalent of toast messages. Whatever front end is
attached subscribes to the channel and decides how to show them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

logger = logging.getLogger("notifsync.notices")


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


_LOG_LEVELS = {
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str


NoticeHandler = Callable[[Notice], None]


class NoticeChannel:
    """Fan-out of notices to subscribed handlers."""

    def __init__(self):
        self._handlers: list[NoticeHandler] = []

    def subscribe(self, handler: NoticeHandler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            A callable that removes the handler
        """
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, notice: Notice) -> None:
        """Log a notice and hand it to every handler."""
        logger.log(_LOG_LEVELS[notice.level], notice.message)
        for handler in list(self._handlers):
            try:
                handler(notice)
            except Exception as e:
                logger.error(f"Notice handler failed: {e}", exc_info=True)

    def info(self, message: str) -> None:
        self.publish(Notice(NoticeLevel.INFO, message))

    def success(self, message: str) -> None:
        self.publish(Notice(NoticeLevel.SUCCESS, message))

    def error(self, message: str) -> None:
        self.publish(Notice(NoticeLevel.ERROR, message))
