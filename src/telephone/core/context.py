"""Ambient request context for functions invoked through the dispatcher.

The context lives in a ``contextvars.ContextVar``. Every asyncio task runs in
its own copy of the current context, so concurrently pending dispatches never
observe each other's value, even on a single event loop thread.
"""

from __future__ import annotations

import contextvars
import inspect
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Optional, TypeVar, Union

from telephone.core.exceptions import ContextNotFoundError

T = TypeVar("T")

_NO_SCOPE = object()

_RPC_CONTEXT: contextvars.ContextVar[Any] = contextvars.ContextVar("rpc_context", default=_NO_SCOPE)


@contextmanager
def context_scope(context: Any) -> Iterator[Any]:
    """Make ``context`` ambient for the body of the ``with`` block."""
    token = _RPC_CONTEXT.set(context)
    try:
        yield context
    finally:
        _RPC_CONTEXT.reset(token)


def with_context(context: Any, body: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a synchronous ``body`` with ``context`` ambient.

    For coroutine functions use :func:`with_context_async`; calling one here
    would only create the coroutine, which then runs outside the scope.
    """
    with context_scope(context):
        return body(*args, **kwargs)


async def with_context_async(
    context: Any,
    body: Callable[..., Union[Awaitable[T], T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run ``body`` with ``context`` ambient across all of its suspension points.

    ``body`` may be a coroutine function or a plain callable; an awaitable
    result is awaited inside the scope. Tasks spawned by ``body`` copy the
    current context and therefore inherit ``context``.
    """
    with context_scope(context):
        result = body(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result


def get_context() -> Any:
    """Return the ambient context; raise outside of any context scope."""
    context = _RPC_CONTEXT.get()
    if context is _NO_SCOPE:
        raise ContextNotFoundError()
    return context


def get_context_or_null() -> Optional[Any]:
    """Return the ambient context, or ``None`` outside of any context scope."""
    context = _RPC_CONTEXT.get()
    if context is _NO_SCOPE:
        return None
    return context


def in_context_scope() -> bool:
    return _RPC_CONTEXT.get() is not _NO_SCOPE
