"""Fan-out of connection events to weakly held handlers."""

from __future__ import annotations

import threading
import weakref
from typing import Any


def _reference(handler: Any) -> weakref.ref:
    if isinstance(handler, weakref.ref):
        if handler() is None:
            raise RuntimeError("handler is expired")
        return handler
    return weakref.ref(handler)


class EventDispatcher:
    """Calls registered handlers on close, connect and data-ready events.

    Handlers are held weakly: one that has been collected is dropped on the
    next event of its kind.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._close: list[weakref.ref] = []
        self._connect: list[weakref.ref] = []
        self._data_ready: list[weakref.ref] = []

    def add_close_handler(self, handler: Any) -> None:
        ref = _reference(handler)
        with self._lock:
            self._close.append(ref)

    def add_connect_handler(self, handler: Any) -> None:
        ref = _reference(handler)
        with self._lock:
            self._connect.append(ref)

    def add_data_ready_handler(self, handler: Any) -> None:
        ref = _reference(handler)
        with self._lock:
            self._data_ready.append(ref)

    def _live(self, refs: list[weakref.ref]) -> list[Any]:
        with self._lock:
            pairs = [(ref, ref()) for ref in refs]
            refs[:] = [ref for ref, obj in pairs if obj is not None]
            return [obj for _, obj in pairs if obj is not None]

    def on_closed(self, sender: Any) -> None:
        for handler in self._live(self._close):
            handler.on_closed(sender)

    def on_connected(self, sender: Any) -> None:
        for handler in self._live(self._connect):
            handler.on_connected(sender)

    def on_data_ready(self, sender: Any, payload: bytes) -> None:
        for handler in self._live(self._data_ready):
            handler.on_data_ready(sender, payload)