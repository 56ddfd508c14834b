import asyncio
from unittest.mock import AsyncMock

import pytest

import rpc_fixtures
from telephone.core.exceptions import (
    FunctionNotFound,
    InvocationError,
    NamespaceNotFound,
    RegistryError,
    RequestFormatError,
    ValidationError,
)
from telephone.core.contracts import FunctionEntry, ParamInfo
from telephone.core.wire import UNDEFINED_SUBSTITUTION
from telephone.dispatcher import RequestDispatcher, handle_route
from telephone.models.dispatcher_config import DispatcherConfig
from telephone.models.request import RpcRequest
from telephone.registry import RegistryBuilder

NS = "src/lib/tele/e2e.telephone.ts"


def _registry():
    builder = RegistryBuilder()
    builder.register(NS, "hello", rpc_fixtures.hello, [("name", "string")])
    builder.register(NS, "add", rpc_fixtures.add, [("a", "number"), ("b", "number")])
    builder.register(NS, "errorFunction", rpc_fixtures.error_function)
    builder.register(NS, "functionWithNoArgs", rpc_fixtures.function_with_no_args)
    builder.register(NS, "functionWithOptionalArg", rpc_fixtures.function_with_optional_arg, [("name?", "string")])
    builder.register(NS, "processObject", rpc_fixtures.process_object, [("data", "{ name: string; age: number }")])
    builder.register(
        NS,
        "processMixed",
        rpc_fixtures.process_mixed,
        [("data", "{ user: { name: string }; roles: string[] }")],
    )
    builder.register(NS, "whoami", rpc_fixtures.whoami, [("delay", "number")])
    builder.register(NS, "multiply", rpc_fixtures.sync_multiply, [("a", "number"), ("b", "number")])
    builder.register(NS, "contextUser", rpc_fixtures.sync_context_user)
    return builder.freeze()


def _call(function_name, args, **kwargs):
    body = {"filePath": NS, "functionName": function_name, "args": args}
    return asyncio.run(handle_route(_registry(), body, **kwargs))


def test_add_returns_result_envelope():
    assert _call("add", [5, 7]) == {"result": 12}


def test_hello_and_no_args():
    assert _call("hello", ["Tester"]) == {"result": "Hello, Tester!"}
    assert _call("functionWithNoArgs", []) == {"result": "No arguments here!"}


def test_optional_argument_omitted_and_supplied():
    assert _call("functionWithOptionalArg", []) == {"result": "Hello, world!"}
    assert _call("functionWithOptionalArg", ["User"]) == {"result": "Hello, User!"}


def test_object_arguments():
    out = _call("processObject", [{"name": "Ann", "age": 30}])
    assert out == {"result": "Received object for Ann who is 30 years old."}
    out = _call("processMixed", [{"user": {"name": "Bob"}, "roles": ["admin", "dev"]}])
    assert out == {"result": "User Bob has roles: admin, dev."}


def test_unknown_namespace():
    with pytest.raises(NamespaceNotFound, match='RPC namespace "nope" not found'):
        asyncio.run(handle_route(_registry(), {"filePath": "nope", "functionName": "add", "args": []}))


def test_unknown_function():
    with pytest.raises(FunctionNotFound, match=f'RPC function "{NS}:nonExistentFunction" not found'):
        _call("nonExistentFunction", [])


def test_non_callable_entry_is_function_not_found():
    registry = {NS: {"broken": FunctionEntry(fn=rpc_fixtures.not_a_function)}}  # type: ignore[arg-type]
    with pytest.raises(FunctionNotFound):
        asyncio.run(handle_route(registry, RpcRequest(namespace=NS, function_name="broken")))


def test_validation_failure_prevents_invocation():
    fn = AsyncMock(return_value="never")
    registry = {NS: {"hello": FunctionEntry(fn=fn, params=(ParamInfo("name", "string"),))}}
    with pytest.raises(ValidationError, match="expected type 'string' but got 'number'"):
        asyncio.run(handle_route(registry, {"filePath": NS, "functionName": "hello", "args": [123]}))
    fn.assert_not_called()


def test_arity_failure():
    with pytest.raises(ValidationError, match="Expected 2 arguments, but got 1"):
        _call("add", [1])


def test_invocation_error_carries_original_message():
    with pytest.raises(InvocationError) as exc_info:
        _call("errorFunction", [])
    err = exc_info.value
    assert str(err) == "This is a test error"
    assert isinstance(err.cause, ValueError)
    assert err.__cause__ is err.cause
    assert err.qualified_name == f"{NS}:errorFunction"
    assert not err.is_client_error


def test_sync_callables_are_supported():
    assert _call("multiply", [3, 4]) == {"result": 12}
    threaded = DispatcherConfig(run_sync_in_thread=True)
    assert _call("multiply", [3, 4], config=threaded) == {"result": 12}
    assert _call("contextUser", [], context={"user": "t"}, config=threaded) == {"result": "t"}


def test_context_visible_to_invoked_function():
    assert _call("contextUser", [], context={"user": "alice"}) == {"result": "alice"}
    assert _call("contextUser", []) == {"result": None}


def test_undefined_placeholder_is_decoded():
    assert _call("functionWithOptionalArg", [UNDEFINED_SUBSTITUTION]) == {"result": "Hello, world!"}


def test_undefined_property_counts_as_missing():
    with pytest.raises(ValidationError, match="Missing property 'age' in argument 'data'"):
        _call("processObject", [{"name": "Ann", "age": UNDEFINED_SUBSTITUTION}])


def test_malformed_request_body():
    with pytest.raises(RequestFormatError):
        asyncio.run(handle_route(_registry(), {"functionName": "add", "args": [1, 2]}))


@pytest.mark.parametrize("body", [[1, 2], "abc", None, 42])
def test_non_object_body_is_request_format_error(body):
    with pytest.raises(RequestFormatError, match="expected an object"):
        asyncio.run(handle_route(_registry(), body))


def test_optional_object_member_over_the_wire():
    builder = RegistryBuilder()
    builder.register("ns", "echo", AsyncMock(return_value="ok"), [("data", "{ id: number; label?: string }")])
    registry = builder.freeze()
    body = {"filePath": "ns", "functionName": "echo", "args": [{"id": 1, "label": UNDEFINED_SUBSTITUTION}]}
    assert asyncio.run(handle_route(registry, body)) == {"result": "ok"}
    with pytest.raises(ValidationError, match="Missing property 'id'"):
        asyncio.run(handle_route(registry, {**body, "args": [{"label": "x"}]}))


def test_plain_dict_param_without_name_is_registry_error():
    registry = {"math": {"add": {"fn": rpc_fixtures.add, "params": [{"type": "number"}]}}}
    with pytest.raises(RegistryError, match="math:add"):
        asyncio.run(handle_route(registry, {"filePath": "math", "functionName": "add", "args": [1]}))


def test_plain_dict_registry_entries():
    registry = {
        "math": {
            "add": {
                "fn": rpc_fixtures.add,
                "params": [
                    {"name": "a", "type": "number", "optional": False},
                    {"name": "b", "type": "number", "optional": False},
                ],
            }
        }
    }
    out = asyncio.run(handle_route(registry, {"filePath": "math", "functionName": "add", "args": [2, 3]}))
    assert out == {"result": 5}


@pytest.mark.asyncio
async def test_concurrent_dispatches_see_only_their_own_context():
    dispatcher = RequestDispatcher(_registry())
    slow = RpcRequest(namespace=NS, function_name="whoami", args=[0.05], context={"user": "slow"})
    fast = RpcRequest(namespace=NS, function_name="whoami", args=[0.0], context={"user": "fast"})

    results = await asyncio.gather(dispatcher.handle(slow), dispatcher.handle(fast))
    assert results == [{"result": "slow"}, {"result": "fast"}]


def test_handle_sync():
    dispatcher = RequestDispatcher(_registry())
    assert dispatcher.handle_sync({"filePath": NS, "functionName": "add", "args": [1, 2]}) == {"result": 3}
    assert dispatcher.resolve(NS, "add").max_args == 2


def test_null_policy_from_config():
    strict = DispatcherConfig(allow_null=False)
    assert _call("hello", [None]) == {"result": "Hello, None!"}
    with pytest.raises(ValidationError, match="but got 'null'"):
        _call("hello", [None], config=strict)
