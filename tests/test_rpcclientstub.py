import socket
import threading

import pytest

from nanoraft.jrpcproto import JsonRpcResponse
from nanoraft.procedure import ValueType
from nanoraft.rpcclientstub import (
    RpcClientStub,
    async_notify_call_once,
    async_return_call_once,
    notify_call_once,
    return_call_once,
)
from nanoraft.rpcserver import RpcServerStub


def _free_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def server():
    notified = []
    got = threading.Event()

    def echo(request, done):
        done(JsonRpcResponse.from_request(request, request["params"]["x"]).to_json())

    def note(request):
        notified.append(request["params"]["text"])
        got.set()

    stub = RpcServerStub(0, "127.0.0.1")
    stub.register_return("echo", {"x": ValueType.INT}, echo)
    stub.register_notify("note", {"text": ValueType.STRING}, note)
    stub.start()
    try:
        yield stub, notified, got
    finally:
        stub.stop()


def test_calls_when_not_connected():
    stub = RpcClientStub()
    assert stub.return_call("1", "echo", {"x": 1}, lambda r: None, 10).is_error()
    assert stub.notify_call("note", {"text": "a"}) is False
    assert stub.async_return_call("1", "echo", {"x": 1}, lambda r: None, 10).result(1).is_error()
    assert stub.async_notify_call("note", {"text": "a"}).result(1) is False


def test_return_call(server):
    srv, _, _ = server
    results = []
    with RpcClientStub() as stub:
        assert stub.connect("127.0.0.1", srv.port)
        assert stub.connect("127.0.0.1", srv.port) is False
        record = stub.return_call("1", "echo", {"x": 5}, results.append, 3000)
        assert record.is_done() and not record.is_error()
        assert record.response.result == 5
        assert results == [5]
        # a finished call is forgotten, so its id may be used again
        again = stub.return_call("1", "echo", {"x": 6}, results.append, 3000)
        assert again.response.result == 6


def test_async_return_call(server):
    srv, _, _ = server
    with RpcClientStub() as stub:
        stub.connect("127.0.0.1", srv.port)
        future = stub.async_return_call("2", "echo", {"x": 7}, lambda r: None, 3000)
        assert future.result(5).response.result == 7


def test_notify_call(server):
    srv, notified, got = server
    with RpcClientStub() as stub:
        stub.connect("127.0.0.1", srv.port)
        assert stub.notify_call("note", {"text": "hi"}) is True
        assert got.wait(5)
    assert notified == ["hi"]


def test_async_notify_call(server):
    srv, notified, got = server
    with RpcClientStub() as stub:
        stub.connect("127.0.0.1", srv.port)
        assert stub.async_notify_call("note", {"text": "later"}).result(5) is True
        assert got.wait(5)
    assert notified == ["later"]


def test_disconnect_clears_connection(server):
    srv, _, _ = server
    stub = RpcClientStub()
    stub.connect("127.0.0.1", srv.port)
    stub.disconnect()
    assert stub.connected is False
    assert stub.notify_call("note", {"text": "x"}) is False


def test_return_call_once(server):
    srv, _, _ = server
    record = return_call_once("127.0.0.1", srv.port, "1", "echo", {"x": 11}, lambda r: None, 3000)
    assert record.response.result == 11


def test_async_return_call_once(server):
    srv, _, _ = server
    future = async_return_call_once("127.0.0.1", srv.port, "1", "echo", {"x": 12}, lambda r: None, 3000)
    assert future.result(5).response.result == 12


def test_once_calls_to_closed_port():
    port = _free_port()
    assert return_call_once("127.0.0.1", port, "1", "echo", {"x": 1}, lambda r: None, 100).is_error()
    assert notify_call_once("127.0.0.1", port, "note", {"text": "a"}) is False
    assert async_notify_call_once("127.0.0.1", port, "note", {"text": "a"}).result(1) is False
    future = async_return_call_once("127.0.0.1", port, "1", "echo", {"x": 1}, lambda r: None, 100)
    assert future.result(1).is_error()