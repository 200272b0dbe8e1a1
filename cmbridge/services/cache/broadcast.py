"""
Change broadcast.

Zero-argument notifications: subscribers learn that something changed and
pull the new state themselves.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable

from ...core.di import resolve_or_default
from ...core.interfaces.logger import ILogger
from ..logging import NullLogger

Subscriber = Callable[[], None]


class ChangeBroadcast:
    """
    Synchronous publish/subscribe without payload.

    A subscriber that raises is logged and does not prevent the others from
    being notified.
    """

    def __init__(self, logger: ILogger | None = None) -> None:
        self._subscribers: dict[int, Subscriber] = {}
        self._handles = itertools.count(1)
        self._lock = threading.Lock()
        self._logger = logger or resolve_or_default(ILogger, NullLogger)

    def subscribe(self, callback: Subscriber) -> int:
        """
        Register a callback.

        Returns:
            Handle to pass to :meth:`unsubscribe`
        """
        with self._lock:
            handle = next(self._handles)
            self._subscribers[handle] = callback
        return handle

    def unsubscribe(self, handle: int) -> bool:
        """Returns False if the handle was not subscribed."""
        with self._lock:
            return self._subscribers.pop(handle, None) is not None

    def publish(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers.values())
        for subscriber in subscribers:
            try:
                subscriber()
            except Exception as e:
                self._logger.error("Change subscriber failed: %s", e, exc_info=True)

    def __len__(self) -> int:
        return len(self._subscribers)
