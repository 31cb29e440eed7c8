import pytest

from nanoraft.jrpcproto import ErrorCode
from nanoraft.procedure import NotifyProcedure, ReturnProcedure, ValueType, value_type
from nanoraft.rpcexception import RpcException


@pytest.mark.parametrize(
    "value, kind",
    [
        (None, ValueType.NULL),
        (True, ValueType.BOOLEAN),
        (7, ValueType.INT),
        (2**63, ValueType.UINT),
        (1.5, ValueType.REAL),
        ("text", ValueType.STRING),
        ([1, 2], ValueType.ARRAY),
        ({"a": 1}, ValueType.OBJECT),
    ],
)
def test_value_type(value, kind):
    assert value_type(value) is kind


def test_value_type_rejects_non_json():
    with pytest.raises(TypeError):
        value_type(object())


def _request(params):
    return {"jsonrpc": "2.0", "method": "m", "params": params, "id": "1"}


def test_return_procedure_invokes_callback_with_request_and_done():
    seen = []

    def service(request, done):
        done("Hello, " + request["params"]["name"] + "!")

    proc = ReturnProcedure(service, {"name": ValueType.STRING})
    proc.invoke(_request({"name": "World"}), seen.append)
    assert seen == ["Hello, World!"]


def test_undeclared_parameter_is_invalid():
    proc = ReturnProcedure(lambda r, d: d(None), {"name": ValueType.STRING})
    with pytest.raises(RpcException) as info:
        proc.invoke(_request({"other": "x"}), lambda r: None)
    assert info.value.code == ErrorCode.INVALID_PARAMS
    assert info.value.detail == "InvalidParams"


def test_wrong_type_is_invalid():
    proc = ReturnProcedure(lambda r, d: d(None), {"minuend": ValueType.INT})
    with pytest.raises(RpcException):
        proc.validate(_request({"minuend": "42"}))


def test_bool_does_not_pass_as_int():
    proc = NotifyProcedure(lambda r: None, {"flag": ValueType.INT})
    with pytest.raises(RpcException):
        proc.invoke(_request({"flag": True}))


def test_missing_params_member_is_invalid():
    proc = NotifyProcedure(lambda r: None, {})
    with pytest.raises(RpcException):
        proc.invoke({"jsonrpc": "2.0", "method": "m"})


def test_absent_declared_parameter_is_accepted():
    calls = []
    proc = NotifyProcedure(calls.append, {"a": ValueType.INT, "b": ValueType.INT})
    request = _request({"a": 1})
    proc.invoke(request)
    assert calls == [request]


def test_param_types_accept_plain_ints():
    proc = NotifyProcedure(lambda r: None, {"notify": 4})
    assert proc.param_types == {"notify": ValueType.STRING}