"""A table of procedures callable by method name."""

from __future__ import annotations

from typing import Any

from .jrpcproto import ErrorCode
from .procedure import DoneCallback, NotifyProcedure, ReturnProcedure
from .rpcexception import RpcException


class RpcService:
    """Holds return and notify procedures and calls them by name."""

    def __init__(self) -> None:
        self._returns: dict[str, ReturnProcedure | None] = {}
        self._notifies: dict[str, NotifyProcedure | None] = {}

    def add_return(self, method_name: str, procedure: ReturnProcedure | None) -> None:
        if method_name in self._returns:
            raise ValueError(f"return procedure {method_name!r} is already registered")
        self._returns[method_name] = procedure

    def add_notify(self, method_name: str, procedure: NotifyProcedure | None) -> None:
        if method_name in self._notifies:
            raise ValueError(f"notify procedure {method_name!r} is already registered")
        self._notifies[method_name] = procedure

    def call_return(self, method_name: str, request: Any, done: DoneCallback) -> None:
        if method_name not in self._returns:
            raise RpcException.from_error_code(ErrorCode.METHOD_NOT_FOUND)
        procedure = self._returns[method_name]
        if procedure is None:
            raise RpcException.from_error_code(ErrorCode.INTERNAL_ERROR)
        procedure.invoke(request, done)

    def call_notify(self, method_name: str, request: Any) -> None:
        if method_name not in self._notifies:
            raise RpcException.from_error_code(ErrorCode.METHOD_NOT_FOUND)
        procedure = self._notifies[method_name]
        if procedure is None:
            raise RpcException.from_error_code(ErrorCode.INTERNAL_ERROR)
        procedure.invoke(request)

    def has_return(self, method_name: str) -> bool:
        return method_name in self._returns

    def has_notify(self, method_name: str) -> bool:
        return method_name in self._notifies