"""Blocking and future-returning helpers for making remote calls."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from .jrpcproto import JsonRpcRequest
from .rpcclient import CallRecord, DoneCallback, RpcClient

VERSION = "2.0"

_pool = ThreadPoolExecutor(thread_name_prefix="rpc-client-call")


def _resolved(value: Any) -> Future:
    future: Future = Future()
    future.set_result(value)
    return future


def _call_and_wait(
    client: RpcClient, request: JsonRpcRequest, callback: DoneCallback, timeout_ms: int
) -> CallRecord:
    if not client.call_return_procedure(request, callback):
        return CallRecord()
    record = client.get_call_record(request.id)
    record._wait(max(timeout_ms, 0) / 1000)
    return record


class RpcClientStub:
    """Holds one connection and makes calls over it."""

    def __init__(self) -> None:
        self._client = RpcClient()
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self, host: str, port: int) -> bool:
        """Connect once; False when already connected or the connection fails."""
        if self._connected:
            return False
        self._connected = self._client.connect(host, port)
        return self._connected

    def disconnect(self) -> None:
        self._client.disconnect()
        self._connected = False

    def _return_call(
        self, request: JsonRpcRequest, callback: DoneCallback, timeout_ms: int
    ) -> CallRecord:
        record = _call_and_wait(self._client, request, callback, timeout_ms)
        if record.is_done() and not record.is_error():
            self._client.remove_call_record(request.id)
        return record

    def return_call(
        self,
        request_id: str,
        method_name: str,
        params: Mapping[str, Any],
        callback: DoneCallback,
        timeout_ms: int,
    ) -> CallRecord:
        """Call and wait up to timeout_ms for the answer; an empty record when not connected."""
        if not self._connected:
            return CallRecord()
        request = JsonRpcRequest.call(VERSION, method_name, params, request_id)
        return self._return_call(request, callback, timeout_ms)

    def async_return_call(
        self,
        request_id: str,
        method_name: str,
        params: Mapping[str, Any],
        callback: DoneCallback,
        timeout_ms: int,
    ) -> Future:
        """Like return_call, but run in the background; the future holds the record."""
        request = JsonRpcRequest.call(VERSION, method_name, params, request_id)
        if not self._connected:
            return _resolved(CallRecord())
        return _pool.submit(self._return_call, request, callback, timeout_ms)

    def notify_call(self, method_name: str, params: Mapping[str, Any]) -> bool:
        """Send a notification; False when not connected."""
        if not self._connected:
            return False
        request = JsonRpcRequest.notification(VERSION, method_name, params)
        return self._client.call_notify_procedure(request)

    def async_notify_call(self, method_name: str, params: Mapping[str, Any]) -> Future:
        request = JsonRpcRequest.notification(VERSION, method_name, params)
        if not self._connected:
            return _resolved(False)
        return _pool.submit(self._client.call_notify_procedure, request)

    def __enter__(self) -> "RpcClientStub":
        return self

    def __exit__(self, *exc_info) -> None:
        if self._connected:
            self.disconnect()


def _once_return(
    client: RpcClient, request: JsonRpcRequest, callback: DoneCallback, timeout_ms: int
) -> CallRecord:
    try:
        return _call_and_wait(client, request, callback, timeout_ms)
    finally:
        client.disconnect()


def _once_notify(client: RpcClient, request: JsonRpcRequest) -> bool:
    try:
        return client.call_notify_procedure(request)
    finally:
        client.disconnect()


def return_call_once(
    host: str,
    port: int,
    request_id: str,
    method_name: str,
    params: Mapping[str, Any],
    callback: DoneCallback,
    timeout_ms: int,
) -> CallRecord:
    """Connect, call, wait up to timeout_ms and disconnect."""
    request = JsonRpcRequest.call(VERSION, method_name, params, request_id)
    client = RpcClient()
    if not client.connect(host, port):
        return CallRecord()
    return _once_return(client, request, callback, timeout_ms)


def async_return_call_once(
    host: str,
    port: int,
    request_id: str,
    method_name: str,
    params: Mapping[str, Any],
    callback: DoneCallback,
    timeout_ms: int,
) -> Future:
    """Connect now, then call and wait in the background."""
    request = JsonRpcRequest.call(VERSION, method_name, params, request_id)
    client = RpcClient()
    if not client.connect(host, port):
        return _resolved(CallRecord())
    return _pool.submit(_once_return, client, request, callback, timeout_ms)


def notify_call_once(host: str, port: int, method_name: str, params: Mapping[str, Any]) -> bool:
    """Connect, send a notification and disconnect."""
    request = JsonRpcRequest.notification(VERSION, method_name, params)
    client = RpcClient()
    if not client.connect(host, port):
        return False
    return _once_notify(client, request)


def async_notify_call_once(
    host: str, port: int, method_name: str, params: Mapping[str, Any]
) -> Future:
    request = JsonRpcRequest.notification(VERSION, method_name, params)
    client = RpcClient()
    if not client.connect(host, port):
        return _resolved(False)
    return _pool.submit(_once_notify, client, request)