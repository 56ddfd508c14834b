from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from telephone.core.context import with_context_async
from telephone.core.contracts import FunctionEntry, Registry
from telephone.core.exceptions import (
    FunctionNotFound,
    InvocationError,
    NamespaceNotFound,
    RequestFormatError,
    TelephoneError,
)
from telephone.core.logger import call_id_scope, get_logger
from telephone.core.wire import decode_args, materialize_args
from telephone.models.dispatcher_config import DispatcherConfig
from telephone.models.request import RpcRequest
from telephone.schema.validator import validate_args

log = get_logger(__name__)

RequestLike = Union[RpcRequest, Mapping[str, Any]]


def _is_async_callable(fn: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None))


def _coerce_request(request: RequestLike, context: Any) -> RpcRequest:
    if isinstance(request, RpcRequest):
        return request
    if not isinstance(request, Mapping):
        raise RequestFormatError(
            f"Malformed RPC request body: expected an object, got {type(request).__name__}"
        )
    try:
        return RpcRequest.from_wire(dict(request), context)
    except PydanticValidationError as exc:
        raise RequestFormatError(f"Malformed RPC request body: {exc.error_count()} error(s)", cause=exc) from exc


def resolve_entry(registry: Registry, namespace: str, function_name: str) -> FunctionEntry:
    """Look up ``namespace:function_name``; raise NamespaceNotFound / FunctionNotFound."""
    functions = registry.get(namespace)
    if functions is None:
        raise NamespaceNotFound(namespace)
    entry = functions.get(function_name)
    if isinstance(entry, Mapping):
        entry = FunctionEntry.from_mapping(entry, namespace=namespace, function_name=function_name)
    if entry is None or not callable(getattr(entry, "fn", None)):
        raise FunctionNotFound(namespace, function_name)
    return entry


async def _invoke(entry: FunctionEntry, args: list, context: Any, config: DispatcherConfig) -> Any:
    if config.run_sync_in_thread and not _is_async_callable(entry.fn):
        # to_thread copies the current contextvars, so the scope must be entered first
        return await with_context_async(context, asyncio.to_thread, entry.fn, *args)
    return await with_context_async(context, entry.fn, *args)


async def handle_route(
    registry: Registry,
    request: RequestLike,
    *,
    context: Any = None,
    config: Optional[DispatcherConfig] = None,
) -> Dict[str, Any]:
    """
    Resolve, validate and invoke one RPC call.

    Args:
        registry: namespace -> function name -> FunctionEntry.
        request: An RpcRequest, or the raw wire body
                 ``{"filePath": ..., "functionName": ..., "args": [...]}``.
        context: Ambient context for a raw wire body. An RpcRequest carries
                 its own ``context``.
        config: Dispatcher behaviour; defaults to DispatcherConfig().

    Returns:
        ``{"result": <returned value>}``

    Raises:
        NamespaceNotFound, FunctionNotFound, ValidationError: before invocation.
        InvocationError: the function raised; message is the original one.
    """
    config = config or DispatcherConfig()
    with call_id_scope():
        req = _coerce_request(request, context)
        try:
            entry = resolve_entry(registry, req.namespace, req.function_name)
            args = decode_args(req.args)
            validate_args(
                req.namespace,
                req.function_name,
                args,
                entry.params,
                allow_null=config.allow_null,
            )
        except TelephoneError as exc:
            log.warning(f"Rejected RPC call {req.qualified_name}: {exc}")
            raise

        log.debug(f"Invoking {req.qualified_name} with {len(args)} argument(s)")
        try:
            result = await _invoke(entry, materialize_args(args), req.context, config)
        except Exception as exc:
            log.error(f"RPC function {req.qualified_name} raised: {exc}", exc_info=True)
            raise InvocationError(req.namespace, req.function_name, exc) from exc

        log.debug(f"Completed {req.qualified_name}")
        return {"result": result}


class RequestDispatcher:
    """
    Dispatches RPC requests against one immutable registry.

    Example:
        >>> dispatcher = RequestDispatcher(registry)
        >>> await dispatcher.handle({"filePath": "math", "functionName": "add", "args": [5, 7]})
        {'result': 12}
    """

    def __init__(self, registry: Registry, config: Optional[DispatcherConfig] = None):
        self.registry = registry
        self.config = config or DispatcherConfig()

    def resolve(self, namespace: str, function_name: str) -> FunctionEntry:
        return resolve_entry(self.registry, namespace, function_name)

    async def handle(self, request: RequestLike, *, context: Any = None) -> Dict[str, Any]:
        return await handle_route(self.registry, request, context=context, config=self.config)

    def handle_sync(self, request: RequestLike, *, context: Any = None) -> Dict[str, Any]:
        """Run one dispatch to completion from synchronous code (no running loop)."""
        return asyncio.run(self.handle(request, context=context))
