"""
Notification sinks for user-facing messages.

The cart and checkout code only depend on the ``Notifier`` protocol
(success / error / info, fire-and-forget). Hosts plug in their own toast
layer; two adapters ship here:

- LoggingNotifier: writes messages to the log (CLI and scripts)
- QueueNotifier: buffers messages for a UI loop to drain
"""

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Protocol

from storefront.logging import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    def success(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...

    def info(self, text: str) -> None: ...


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    text: str


class LoggingNotifier:
    """Routes notifications to a logger."""

    def __init__(self, name: str = "storefront.notify"):
        self._logger = get_logger(name)

    def success(self, text: str) -> None:
        self._logger.info(f"[success] {text}")

    def error(self, text: str) -> None:
        self._logger.error(f"[error] {text}")

    def info(self, text: str) -> None:
        self._logger.info(f"[info] {text}")


class QueueNotifier:
    """
    Buffers notifications until the presentation layer drains them.

    Oldest messages are dropped once ``maxlen`` is reached.
    """

    def __init__(self, maxlen: int = 100):
        self._queue: Deque[Notification] = deque(maxlen=maxlen)

    def _push(self, level: NotificationLevel, text: str) -> None:
        self._queue.append(Notification(level, text))
        logger.debug(f"Queued {level.value} notification")

    def success(self, text: str) -> None:
        self._push(NotificationLevel.SUCCESS, text)

    def error(self, text: str) -> None:
        self._push(NotificationLevel.ERROR, text)

    def info(self, text: str) -> None:
        self._push(NotificationLevel.INFO, text)

    def pending(self) -> List[Notification]:
        return list(self._queue)

    def drain(self) -> List[Notification]:
        """Return and clear all buffered notifications."""
        items = list(self._queue)
        self._queue.clear()
        return items

    def __len__(self) -> int:
        return len(self._queue)
