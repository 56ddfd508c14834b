"""telephone.

Typed RPC contract layer.

Compiles declared parameter type text into structural schemas, validates
untyped wire arguments against them and invokes the target function with a
request-scoped ambient context.
"""

from telephone.core.context import get_context, get_context_or_null, with_context, with_context_async
from telephone.core.contracts import FunctionEntry, ParamInfo
from telephone.core.exceptions import (
    FunctionNotFound,
    InvocationError,
    NamespaceNotFound,
    TelephoneError,
    ValidationError,
)
from telephone.dispatcher import RequestDispatcher, handle_route
from telephone.registry import RegistryBuilder
from telephone.schema.parser import parse_type_annotation
from telephone.schema.validator import validate_args

__version__ = "0.1.0"

__all__ = [
    "FunctionEntry",
    "FunctionNotFound",
    "InvocationError",
    "NamespaceNotFound",
    "ParamInfo",
    "RegistryBuilder",
    "RequestDispatcher",
    "TelephoneError",
    "ValidationError",
    "get_context",
    "get_context_or_null",
    "handle_route",
    "parse_type_annotation",
    "validate_args",
    "with_context",
    "with_context_async",
]
