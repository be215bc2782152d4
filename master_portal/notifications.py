"""Transient success/error notifications with auto-dismiss timers."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    visible: bool = False
    message: str = ""
    kind: NotificationKind = NotificationKind.ERROR


HIDDEN = Notification()


class Notifier:
    """Holds at most one live notification.

    Showing a new notification cancels the pending auto-hide timer of the
    previous one (cancel-and-replace). Timers run on the running asyncio
    loop; outside a loop the notification stays until dismissed.
    """

    def __init__(self, success_delay: float = 3.0, error_delay: float = 5.0) -> None:
        self.success_delay = success_delay
        self.error_delay = error_delay
        self._current = HIDDEN
        self._timer: asyncio.TimerHandle | None = None
        self._listeners: list[Callable[[Notification], None]] = []

    @property
    def current(self) -> Notification:
        return self._current

    def subscribe(self, listener: Callable[[Notification], None]) -> None:
        """Call listener with every state change."""
        self._listeners.append(listener)

    def success(self, message: str) -> None:
        self._show(NotificationKind.SUCCESS, message, self.success_delay)

    def error(self, message: str) -> None:
        self._show(NotificationKind.ERROR, message, self.error_delay)

    def dismiss(self) -> None:
        self._cancel_timer()
        if self._current.visible:
            logger.debug("Notification dismissed", message=self._current.message)
            self._set(HIDDEN)

    def _show(self, kind: NotificationKind, message: str, delay: float) -> None:
        self._cancel_timer()
        logger.debug("Showing notification", kind=kind.value, message=message, delay=delay)
        self._set(Notification(visible=True, message=message, kind=kind))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(delay, self._expire)

    def _expire(self) -> None:
        self._timer = None
        self._set(HIDDEN)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set(self, notification: Notification) -> None:
        self._current = notification
        for listener in self._listeners:
            listener(notification)
