"""A JSON-RPC client that keeps a record of every call awaiting its answer."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Optional

from .jrpcproto import InvalidMessageError, JsonRpcRequest, JsonRpcResponse
from .network import BaseClient
from .packet import PacketTooLargeError, decode, encode

_log = logging.getLogger(__name__)

DoneCallback = Callable[[Any], None]


@dataclass
class CallRecord:
    """A request sent with an id, and the response once it arrives."""

    request: Optional[JsonRpcRequest] = None
    response: Optional[JsonRpcResponse] = None
    timestamp: float = field(default_factory=time.time)
    _finished: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False, compare=False
    )

    def is_done(self) -> bool:
        return self.response is not None

    def is_error(self) -> bool:
        return self.request is None or self.response is None

    def _wait(self, timeout: float) -> bool:
        """Block until the response has been handled or the timeout passes."""
        return self._finished.wait(timeout)


class RpcClient(BaseClient):
    """Sends requests over one connection and matches responses to them by id."""

    def __init__(self) -> None:
        super().__init__()
        self._records_lock = threading.Lock()
        self._records: dict[str, tuple[CallRecord, DoneCallback]] = {}
        self.events.add_data_ready_handler(self)

    def call_return_procedure(self, request: JsonRpcRequest, callback: DoneCallback) -> bool:
        """Record and send a call; False when a call with the same id is pending."""
        payload = encode(request.to_json_str())
        request_id = request.id
        with self._records_lock:
            if request_id in self._records:
                return False
            self._records[request_id] = (CallRecord(request=request), callback)
        try:
            self.send(payload)
        except PacketTooLargeError:
            self.remove_call_record(request_id)
            raise
        return True

    def call_notify_procedure(self, request: JsonRpcRequest) -> bool:
        """Send a notification; nothing is recorded since no answer comes."""
        self.send(encode(request.to_json_str()))
        return True

    def get_call_record(self, request_id: str) -> CallRecord:
        """The record for an id, or an empty record when there is none."""
        with self._records_lock:
            entry = self._records.get(request_id)
        return entry[0] if entry is not None else CallRecord()

    def clear_call_records(self) -> None:
        with self._records_lock:
            self._records.clear()

    def remove_call_record(self, request_id: str) -> None:
        with self._records_lock:
            self._records.pop(request_id, None)

    def on_data_ready(self, sender: Any, payload: bytes) -> None:
        """Attach a received response to its record and run the call's callback."""
        try:
            response = JsonRpcResponse.from_json_str(decode(payload))
        except (UnicodeDecodeError, InvalidMessageError):
            _log.debug("ignoring a packet that is not a JSON-RPC response")
            return
        with self._records_lock:
            entry = self._records.get(response.id)
            if entry is None:
                return
            record, callback = entry
            record.response = response
        try:
            callback(response.result)
        finally:
            record._finished.set()