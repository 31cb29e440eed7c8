import pytest

from nanoraft.jrpcproto import ErrorCode
from nanoraft.procedure import NotifyProcedure, ReturnProcedure, ValueType
from nanoraft.rpcexception import RpcException
from nanoraft.service import RpcService


def _request(params):
    return {"jsonrpc": "2.0", "method": "substractMethod", "params": params, "id": "1"}


def _subtract(request, done):
    done(request["params"]["minuend"] - request["params"]["subtrahend"])


@pytest.fixture
def service():
    svc = RpcService()
    svc.add_return(
        "substractMethod",
        ReturnProcedure(_subtract, {"subtrahend": ValueType.INT, "minuend": ValueType.INT}),
    )
    return svc


def test_call_return_delivers_result(service):
    results = []
    service.call_return("substractMethod", _request({"subtrahend": 23, "minuend": 42}), results.append)
    assert results == [19]


def test_unknown_method_is_not_found(service):
    with pytest.raises(RpcException) as info:
        service.call_return("nope", _request({}), lambda r: None)
    assert info.value.code == ErrorCode.METHOD_NOT_FOUND
    with pytest.raises(RpcException) as info:
        service.call_notify("nope", _request({}))
    assert info.value.code == ErrorCode.METHOD_NOT_FOUND


def test_empty_entry_is_internal_error():
    svc = RpcService()
    svc.add_notify("broken", None)
    with pytest.raises(RpcException) as info:
        svc.call_notify("broken", _request({}))
    assert info.value.code == ErrorCode.INTERNAL_ERROR


def test_duplicate_registration_is_refused(service):
    with pytest.raises(ValueError):
        service.add_return("substractMethod", ReturnProcedure(_subtract))


def test_has_checks_each_table(service):
    calls = []
    service.add_notify("helloNotifyMethod", NotifyProcedure(calls.append, {"notify": ValueType.STRING}))
    assert service.has_return("substractMethod")
    assert not service.has_notify("substractMethod")
    assert service.has_notify("helloNotifyMethod")
    request = _request({"notify": "World"})
    service.call_notify("helloNotifyMethod", request)
    assert calls == [request]


def test_invalid_params_propagate(service):
    with pytest.raises(RpcException) as info:
        service.call_return("substractMethod", _request({"minuend": "x"}), lambda r: None)
    assert info.value.code == ErrorCode.INVALID_PARAMS