"""User-facing notifications (toasts) emitted by the account controllers."""
import itertools
import logging
from abc import ABC, abstractmethod
from typing import Literal

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """A structured message for display. Never carries raw error text."""
    title: str
    description: str = ""
    variant: Literal["success", "error", "info"] = "info"


def success(title: str, description: str = "") -> Notification:
    return Notification(title=title, description=description, variant="success")


def failure(title: str, description: str = "") -> Notification:
    return Notification(title=title, description=description, variant="error")


class NotificationSink(ABC):
    """Receives notifications. Fire-and-forget."""

    @abstractmethod
    def push(self, notification: Notification) -> None:
        ...


class MemoryNotificationSink(NotificationSink):
    """Keeps a stack of pending notifications, like a toast container."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._pending: dict[int, Notification] = {}

    def push(self, notification: Notification) -> int:
        toast_id = next(self._ids)
        self._pending[toast_id] = notification
        logger.debug("Notification %d: %s (%s)", toast_id, notification.title, notification.variant)
        return toast_id

    def dismiss(self, toast_id: int) -> None:
        self._pending.pop(toast_id, None)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending.values())

    def drain(self) -> list[Notification]:
        """Return and clear every pending notification, oldest first."""
        items = list(self._pending.values())
        self._pending.clear()
        return items
