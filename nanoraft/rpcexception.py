"""Exception raised while serving a remote procedure call."""

from __future__ import annotations

from .jrpcproto import JsonRpcError


class RpcException(Exception):
    """A failure with a JSON-RPC error code and a detail message."""

    def __init__(self, code: int, detail: str) -> None:
        super().__init__(detail)
        self.code = int(code)
        self.detail = detail

    @classmethod
    def from_error_code(cls, code: int) -> "RpcException":
        """Build the exception for a standard error code, named as the protocol names it."""
        return cls(int(code), JsonRpcError.message_for(code))

    def __str__(self) -> str:
        return self.detail