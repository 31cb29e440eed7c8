"""A thread-safe FIFO queue that can be closed and stolen from at the tail."""

from __future__ import annotations

import queue
import threading
from collections import deque
from typing import Any, Optional


class QueueClosed(Exception):
    """Raised to a waiting consumer once the queue has been closed."""


class ConcurrentQueue:
    """FIFO queue for producer and consumer threads.

    Consumers take from the head; try_steal takes the most recent item from
    the tail. Empty takes raise queue.Empty.
    """

    def __init__(self) -> None:
        self._items: deque[Any] = deque()
        self._cond = threading.Condition()
        self._stopped = False

    def push(self, value: Any) -> None:
        with self._cond:
            self._items.append(value)
            self._cond.notify()

    def try_pop(self) -> Any:
        """Take the oldest item without waiting."""
        with self._cond:
            if not self._items:
                raise queue.Empty
            return self._items.popleft()

    def wait_and_pop(self, timeout: Optional[float] = None) -> Any:
        """Wait for an item; QueueClosed once exited, queue.Empty on timeout."""
        with self._cond:
            ready = self._cond.wait_for(lambda: bool(self._items) or self._stopped, timeout)
            if not ready:
                raise queue.Empty
            if self._stopped:
                raise QueueClosed
            return self._items.popleft()

    def try_steal(self) -> Any:
        """Take the newest item without waiting."""
        with self._cond:
            if not self._items:
                raise queue.Empty
            return self._items.pop()

    def empty(self) -> bool:
        with self._cond:
            return not self._items

    def exit(self) -> None:
        """Close the queue and wake every waiting consumer."""
        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)