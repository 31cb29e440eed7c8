"""Example procedures, a server offering them, and a command to serve or call them."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Callable

from .jrpcproto import JsonRpcResponse
from .procedure import ValueType
from .rpcclientstub import notify_call_once, return_call_once
from .rpcserver import RpcServerStub

_log = logging.getLogger(__name__)

DEFAULT_PORT = 9800
HELLO_METHOD = "helloworldMethod"
SUBTRACT_METHOD = "substractMethod"
NOTIFY_METHOD = "helloNotifyMethod"


def hello_world_service(request: Any, done: Callable[[Any], None]) -> None:
    """Answer with a greeting for the name parameter."""
    result = f"Hello, {request['params']['name']}!"
    print(f"helloworldReturnService: {json.dumps(result)}")
    done(JsonRpcResponse.from_request(request, result).to_json())


def subtract_service(request: Any, done: Callable[[Any], None]) -> None:
    """Answer with minuend minus subtrahend."""
    params = request["params"]
    result = int(params["minuend"]) - int(params["subtrahend"])
    done(JsonRpcResponse.from_request(request, result).to_json())


def hello_notify_service(request: Any) -> None:
    """Accept a notification; nothing is answered."""
    _log.debug("notification received: %r", request.get("params"))


def build_server(port: int = DEFAULT_PORT, host: str = "0.0.0.0") -> RpcServerStub:
    """A server stub with the example procedures registered."""
    stub = RpcServerStub(port, host)
    stub.register_return(HELLO_METHOD, {"name": ValueType.STRING}, hello_world_service)
    stub.register_return(
        SUBTRACT_METHOD,
        {"subtrahend": ValueType.INT, "minuend": ValueType.INT},
        subtract_service,
    )
    stub.register_notify(NOTIFY_METHOD, {"notify": ValueType.STRING}, hello_notify_service)
    return stub


def _print_response(result: Any) -> None:
    print(json.dumps(result, indent=3))


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nanoraft-demo", description=__doc__)
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--timeout-ms", type=int, default=3000)
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("serve", help="serve the example procedures")
    hello = commands.add_parser("hello", help="call the greeting procedure")
    hello.add_argument("name")
    subtract = commands.add_parser("subtract", help="call the subtraction procedure")
    subtract.add_argument("minuend", type=int)
    subtract.add_argument("subtrahend", type=int)
    notify = commands.add_parser("notify", help="send a notification")
    notify.add_argument("text")
    parser.set_defaults(command="serve")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    if args.command == "serve":
        stub = build_server(args.port, args.host or "0.0.0.0")
        print(f"serving on port {stub.port}; press Ctrl-C to stop")
        stub.run()
        return 0

    host = args.host or "127.0.0.1"
    if args.command == "notify":
        sent = notify_call_once(host, args.port, NOTIFY_METHOD, {"notify": args.text})
        print(f"notify success : {sent}")
        return 0 if sent else 1

    if args.command == "hello":
        method, params = HELLO_METHOD, {"name": args.name}
    else:
        method = SUBTRACT_METHOD
        params = {"subtrahend": args.subtrahend, "minuend": args.minuend}
    record = return_call_once(host, args.port, "1", method, params, _print_response, args.timeout_ms)
    if record.is_error():
        print("no response received", file=sys.stderr)
        return 1
    print(_as_text(record.response.result))
    return 0


if __name__ == "__main__":
    sys.exit(main())