"""Registered remote procedures and the checks their parameters must pass."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import IntEnum
from typing import Any

from .jrpcproto import ErrorCode
from .rpcexception import RpcException

_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1
_UINT_MAX = 2**64 - 1


class ValueType(IntEnum):
    """The kinds of JSON value a parameter may be declared as."""

    NULL = 0
    INT = 1
    UINT = 2
    REAL = 3
    STRING = 4
    BOOLEAN = 5
    ARRAY = 6
    OBJECT = 7


def value_type(value: Any) -> ValueType:
    """Return the JSON kind of a decoded value."""
    if value is None:
        return ValueType.NULL
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, int):
        if _INT_MIN <= value <= _INT_MAX:
            return ValueType.INT
        if _INT_MAX < value <= _UINT_MAX:
            return ValueType.UINT
        return ValueType.REAL
    if isinstance(value, float):
        return ValueType.REAL
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, Mapping):
        return ValueType.OBJECT
    if isinstance(value, (list, tuple)):
        return ValueType.ARRAY
    raise TypeError(f"{type(value).__name__} is not a JSON value")


DoneCallback = Callable[[Any], None]


class Procedure:
    """A callable reachable by name, with the parameters it accepts."""

    def __init__(
        self,
        callback: Callable[..., Any],
        param_types: Mapping[str, ValueType | int] | None = None,
    ) -> None:
        self._callback = callback
        self.param_types: dict[str, ValueType] = {
            name: ValueType(kind) for name, kind in (param_types or {}).items()
        }

    def _params_match(self, request: Any) -> bool:
        if not isinstance(request, Mapping) or "params" not in request:
            return False
        params = request["params"]
        if isinstance(params, Mapping):
            items = params.items()
        elif isinstance(params, (list, tuple)):
            items = ((str(index), item) for index, item in enumerate(params))
        else:
            items = ()
        for key, value in items:
            expected = self.param_types.get(key)
            if expected is None:
                return False
            try:
                actual = value_type(value)
            except TypeError:
                return False
            if actual is not expected:
                return False
        return True

    def validate(self, request: Any) -> None:
        """Raise RpcException with InvalidParams unless every given parameter is declared with its type."""
        if not self._params_match(request):
            raise RpcException.from_error_code(ErrorCode.INVALID_PARAMS)


class ReturnProcedure(Procedure):
    """A procedure whose result is handed to a completion callback."""

    def invoke(self, request: Any, done: DoneCallback) -> None:
        self.validate(request)
        self._callback(request, done)


class NotifyProcedure(Procedure):
    """A procedure that answers nothing."""

    def invoke(self, request: Any) -> None:
        self.validate(request)
        self._callback(request)