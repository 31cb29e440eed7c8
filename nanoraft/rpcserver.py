"""A JSON-RPC server over framed TCP sessions, and a stub to register procedures."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .jrpcproto import ErrorCode, InvalidMessageError, JsonRpcError, JsonRpcRequest
from .network import BaseServer
from .packet import PacketTooLargeError, decode, encode
from .procedure import NotifyProcedure, ReturnProcedure, ValueType
from .rpcexception import RpcException
from .service import RpcService

_log = logging.getLogger(__name__)


def _styled(value: Any) -> str:
    return json.dumps(value, indent=3) + "\n"


class RpcServer(BaseServer):
    """Decodes requests from sessions and runs the named procedures in a pool."""

    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        super().__init__(port, host)
        self._service = RpcService()
        self._executor = ThreadPoolExecutor(thread_name_prefix="rpc-worker")
        self.events.add_data_ready_handler(self)

    def add_return_procedure(self, method_name: str, procedure: ReturnProcedure) -> None:
        self._service.add_return(method_name, procedure)

    def add_notify_procedure(self, method_name: str, procedure: NotifyProcedure) -> None:
        self._service.add_notify(method_name, procedure)

    def on_data_ready(self, sender: Any, payload: bytes) -> None:
        """Handle one received request; unparsable ones are answered with an error."""
        try:
            try:
                request = JsonRpcRequest.from_json_str(decode(payload))
            except (UnicodeDecodeError, InvalidMessageError) as exc:
                raise RpcException.from_error_code(ErrorCode.PARSE_ERROR) from exc
            if request.is_return_call():
                self._submit(self._handle_return, sender, request)
            else:
                self._submit(self._handle_notify, request)
        except RpcException as exc:
            self._send_error(sender, exc)

    def _submit(self, func: Callable[..., None], *args: Any) -> None:
        try:
            self._executor.submit(func, *args)
        except RuntimeError:
            _log.debug("request dropped: server is shutting down")

    def _handle_return(self, sender: Any, request: JsonRpcRequest) -> None:
        def done(response: Any) -> None:
            try:
                sender.send(encode(_styled(response)))
            except PacketTooLargeError:
                self._send_error(sender, RpcException.from_error_code(ErrorCode.PARSE_ERROR))

        try:
            self._service.call_return(request.method, request.to_json(), done)
        except RpcException as exc:
            _log.debug("return call %r failed: %s", request.method, exc)

    def _handle_notify(self, request: JsonRpcRequest) -> None:
        try:
            self._service.call_notify(request.method, request.to_json())
        except RpcException as exc:
            _log.debug("notify call %r failed: %s", request.method, exc)

    def _send_error(self, sender: Any, exc: RpcException) -> None:
        error = JsonRpcError.from_int(exc.code)
        try:
            sender.send(encode(error.message))
        except PacketTooLargeError:
            _log.debug("error reply could not be encoded")

    def stop(self) -> None:
        super().stop()
        self._executor.shutdown(wait=False)


class RpcServerStub:
    """Registers plain functions as procedures and runs the server."""

    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        self.server = RpcServer(port, host)

    @property
    def port(self) -> int:
        return self.server.port

    def register_return(
        self,
        method_name: str,
        param_types: Mapping[str, ValueType | int],
        func: Callable[[Any, Callable[[Any], None]], None],
    ) -> None:
        self.server.add_return_procedure(method_name, ReturnProcedure(func, param_types))

    def register_notify(
        self,
        method_name: str,
        param_types: Mapping[str, ValueType | int],
        func: Callable[[Any], None],
    ) -> None:
        self.server.add_notify_procedure(method_name, NotifyProcedure(func, param_types))

    def run(self) -> None:
        """Serve until stopped or interrupted."""
        self.server.serve_forever()

    def start(self) -> None:
        """Serve in the background."""
        self.server.start()

    def stop(self) -> None:
        self.server.stop()

    def __enter__(self) -> "RpcServerStub":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()