"""JSON-RPC 2.0 request, response and error objects."""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from enum import IntEnum
from typing import Any


class InvalidMessageError(ValueError):
    """Raised when text or data is not a well-formed JSON-RPC message."""


class ErrorCode(IntEnum):
    """Error codes defined by JSON-RPC 2.0."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


_MESSAGES = {
    ErrorCode.PARSE_ERROR: "ParseError",
    ErrorCode.INVALID_REQUEST: "InvalidRequest",
    ErrorCode.METHOD_NOT_FOUND: "MethodNotFound",
    ErrorCode.INVALID_PARAMS: "InvalidParams",
    ErrorCode.INTERNAL_ERROR: "InternalError",
}

# Order used when an error is chosen by a small index rather than its code.
_BY_INDEX = (
    ErrorCode.PARSE_ERROR,
    ErrorCode.INVALID_REQUEST,
    ErrorCode.METHOD_NOT_FOUND,
    ErrorCode.INVALID_PARAMS,
    ErrorCode.INTERNAL_ERROR,
)


def _as_string(value: Any) -> str:
    """Convert a scalar JSON value to a string the lenient way."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise TypeError(f"JSON value of type {type(value).__name__} is not convertible to string")


def _dumps(data: dict) -> str:
    return json.dumps(data, indent="\t")


def _parse(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise InvalidMessageError(f"cannot parse JSON: {exc}") from exc


class JsonRpcError:
    """The error member of a JSON-RPC response."""

    def __init__(self, code: int) -> None:
        self._data = {"code": int(code), "message": self.message_for(code)}

    @classmethod
    def from_int(cls, code: int) -> "JsonRpcError":
        """Pick an error by its index 0..4; anything else is an internal error."""
        if 0 <= code < len(_BY_INDEX):
            return cls(_BY_INDEX[code])
        return cls(ErrorCode.INTERNAL_ERROR)

    @classmethod
    def empty(cls) -> "JsonRpcError":
        return cls(ErrorCode.INTERNAL_ERROR)

    @staticmethod
    def message_for(code: int) -> str:
        try:
            return _MESSAGES[ErrorCode(int(code))]
        except ValueError:
            return "Unknown error"

    def to_json(self) -> dict:
        return copy.deepcopy(self._data)

    def to_json_str(self) -> str:
        return _dumps(self._data)

    @property
    def code(self) -> int:
        if "code" in self._data:
            return int(self._data["code"])
        return -1

    @property
    def message(self) -> str:
        return _as_string(self._data.get("message"))

    def __repr__(self) -> str:
        return f"JsonRpcError(code={self.code}, message={self.message!r})"


def request_fields_valid(data: Any) -> bool:
    """True when data has string jsonrpc and method and an object params."""
    if not isinstance(data, Mapping):
        return False
    if not isinstance(data.get("jsonrpc"), str):
        return False
    if not isinstance(data.get("method"), str):
        return False
    return isinstance(data.get("params"), Mapping)


def response_fields_valid(data: Any) -> bool:
    """True when data has jsonrpc and id and exactly one of result and error."""
    if not isinstance(data, Mapping):
        return False
    if "jsonrpc" not in data or "id" not in data:
        return False
    return ("error" in data) != ("result" in data)


class JsonRpcRequest:
    """A JSON-RPC request: a call when it has an id, a notification otherwise."""

    def __init__(self, data: Any) -> None:
        self._data: dict = copy.deepcopy(dict(data)) if request_fields_valid(data) else {}

    @classmethod
    def call(cls, version: str, method: str, params: Mapping, request_id: str) -> "JsonRpcRequest":
        return cls({"jsonrpc": version, "method": method, "params": dict(params), "id": request_id})

    @classmethod
    def notification(cls, version: str, method: str, params: Mapping) -> "JsonRpcRequest":
        return cls({"jsonrpc": version, "method": method, "params": dict(params)})

    @classmethod
    def from_json(cls, data: Any) -> "JsonRpcRequest":
        if not request_fields_valid(data):
            raise InvalidMessageError("missing or invalid jsonrpc, method or params")
        return cls(data)

    @classmethod
    def from_json_str(cls, text: str) -> "JsonRpcRequest":
        return cls.from_json(_parse(text))

    @classmethod
    def empty(cls) -> "JsonRpcRequest":
        return cls({})

    def to_json(self) -> dict:
        return copy.deepcopy(self._data)

    def to_json_str(self) -> str:
        return _dumps(self._data)

    @property
    def method(self) -> str:
        return _as_string(self._data.get("method"))

    @property
    def id(self) -> str:
        return _as_string(self._data.get("id"))

    @property
    def params(self) -> Any:
        return copy.deepcopy(self._data.get("params"))

    @property
    def version(self) -> str:
        return _as_string(self._data.get("jsonrpc"))

    def param(self, key: str) -> Any:
        params = self._data.get("params")
        if isinstance(params, Mapping) and key in params:
            return copy.deepcopy(params[key])
        return None

    def is_notification(self) -> bool:
        return "id" not in self._data

    def is_return_call(self) -> bool:
        return "id" in self._data

    def __repr__(self) -> str:
        return f"JsonRpcRequest({self._data!r})"


class JsonRpcResponse:
    """A JSON-RPC response carrying either a result or an error."""

    def __init__(self, data: Any) -> None:
        self._data: dict = copy.deepcopy(dict(data)) if response_fields_valid(data) else {}

    @classmethod
    def success(cls, version: str, request_id: str, result: Any) -> "JsonRpcResponse":
        return cls({"jsonrpc": version, "result": result, "id": request_id})

    @classmethod
    def failure(cls, version: str, error: JsonRpcError) -> "JsonRpcResponse":
        return cls({"jsonrpc": version, "error": error.to_json(), "id": ""})

    @classmethod
    def from_json(cls, data: Any) -> "JsonRpcResponse":
        if not response_fields_valid(data):
            raise InvalidMessageError("missing jsonrpc or id, or not exactly one of result and error")
        return cls(data)

    @classmethod
    def from_json_str(cls, text: str) -> "JsonRpcResponse":
        return cls.from_json(_parse(text))

    @classmethod
    def from_request(cls, request: Any, result: Any) -> "JsonRpcResponse":
        """Answer the given request data with a result."""
        if not request_fields_valid(request):
            raise InvalidMessageError("request is not a valid JSON-RPC request")
        return cls.success(_as_string(request["jsonrpc"]), _as_string(request.get("id")), result)

    @classmethod
    def empty(cls) -> "JsonRpcResponse":
        return cls({})

    def to_json(self) -> dict:
        return copy.deepcopy(self._data)

    def to_json_str(self) -> str:
        return _dumps(self._data)

    @property
    def id(self) -> str:
        return _as_string(self._data.get("id"))

    @property
    def result(self) -> Any:
        return copy.deepcopy(self._data.get("result"))

    @property
    def error(self) -> JsonRpcError:
        if "error" in self._data:
            error = self._data["error"]
            code = error.get("code", 0) if isinstance(error, Mapping) else 0
            return JsonRpcError(int(code or 0))
        return JsonRpcError.empty()

    def is_error(self) -> bool:
        return "error" in self._data

    def __repr__(self) -> str:
        return f"JsonRpcResponse({self._data!r})"