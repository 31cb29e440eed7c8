import socket

import pytest

from nanoraft.demo import (
    build_server,
    hello_notify_service,
    hello_world_service,
    main,
    subtract_service,
)


def _request(method, params):
    return {"jsonrpc": "2.0", "method": method, "params": params, "id": "1"}


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_hello_world_service_answers_greeting():
    answers = []
    hello_world_service(_request("helloworldMethod", {"name": "World"}), answers.append)
    assert answers[0]["result"] == "Hello, World!"
    assert answers[0]["id"] == "1"
    assert answers[0]["jsonrpc"] == "2.0"


@pytest.mark.parametrize("value", [0, 42, -23])
def test_subtract_service_invariants(value):
    same, zero = [], []
    subtract_service(_request("substractMethod", {"minuend": value, "subtrahend": value}), same.append)
    subtract_service(_request("substractMethod", {"minuend": value, "subtrahend": 0}), zero.append)
    assert same[0]["result"] == 0
    assert zero[0]["result"] == value


def test_hello_notify_service_returns_nothing():
    assert hello_notify_service(_request("helloNotifyMethod", {"notify": "World"})) is None


@pytest.fixture
def server():
    stub = build_server(0, "127.0.0.1")
    stub.start()
    try:
        yield stub
    finally:
        stub.stop()


def test_main_hello(server, capsys):
    code = main(["--host", "127.0.0.1", "--port", str(server.port), "hello", "World"])
    assert code == 0
    assert "Hello, World!" in capsys.readouterr().out


def test_main_subtract(server, capsys):
    code = main(["--host", "127.0.0.1", "--port", str(server.port), "subtract", "42", "0"])
    assert code == 0
    assert capsys.readouterr().out.splitlines()[-1] == "42"


def test_main_notify(server, capsys):
    code = main(["--host", "127.0.0.1", "--port", str(server.port), "notify", "World"])
    assert code == 0
    assert "notify success : True" in capsys.readouterr().out


def test_main_without_server_fails(capsys):
    port = _free_port()
    code = main(["--host", "127.0.0.1", "--port", str(port), "--timeout-ms", "100", "hello", "World"])
    assert code == 1
    assert "no response" in capsys.readouterr().err