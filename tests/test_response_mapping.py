from telephone.core.exceptions import (
    FunctionNotFound,
    InvocationError,
    NamespaceNotFound,
    RequestFormatError,
    ValidationError,
)
from telephone.models.response import error_response, status_for, success_response


def test_lookup_failures_are_not_found():
    assert status_for(NamespaceNotFound("ns")) == 404
    assert status_for(FunctionNotFound("ns", "fn")) == 404


def test_validation_failures_are_client_errors():
    assert status_for(ValidationError("bad", namespace="ns", function_name="fn")) == 400
    assert status_for(RequestFormatError("bad body")) == 400


def test_invocation_failures_are_server_errors():
    err = InvocationError("ns", "fn", RuntimeError("This is a test error"))
    status, body = error_response(err)
    assert status == 500
    assert body == {"error": {"type": "InvocationError", "message": "This is a test error"}}
    assert status_for(RuntimeError("unexpected")) == 500


def test_success_response():
    assert success_response({"result": 12}) == (200, {"result": 12})
