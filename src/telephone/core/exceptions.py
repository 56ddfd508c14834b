"""
Custom exception classes for the telephone RPC layer.

Provides structured error handling with one exception per failure kind of a
dispatch. Lookup and validation failures are raised before the target
function runs; ``InvocationError`` is the only post-invocation failure.
"""

from typing import Any, Optional


class TelephoneError(Exception):
    """Base exception class for all telephone exceptions."""

    #: True when the failure was detected before the target function ran.
    is_client_error: bool = False

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class NamespaceNotFound(TelephoneError):
    """Raised when the request's namespace has no registry entry."""

    is_client_error = True

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f'RPC namespace "{namespace}" not found.')


class FunctionNotFound(TelephoneError):
    """Raised when a function is absent or not callable within a namespace."""

    is_client_error = True

    def __init__(self, namespace: str, function_name: str):
        self.namespace = namespace
        self.function_name = function_name
        super().__init__(
            f'RPC function "{namespace}:{function_name}" not found or is not a function.'
        )


class ValidationError(TelephoneError):
    """
    Raised when wire arguments do not satisfy the declared parameters.

    Covers arity mismatches, required arguments that were not supplied,
    missing structural fields and primitive/array type mismatches.

    Example:
        >>> raise ValidationError(
        ...     "Argument 'a' expected type 'string' but got 'number'.",
        ...     namespace="users",
        ...     function_name="rename",
        ...     path="a",
        ... )
    """

    is_client_error = True

    def __init__(
        self,
        reason: str,
        *,
        namespace: Optional[str] = None,
        function_name: Optional[str] = None,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.reason = reason
        self.namespace = namespace
        self.function_name = function_name
        self.path = path
        if namespace is not None and function_name is not None:
            message = f'RPC call to "{namespace}:{function_name}": {reason}'
        else:
            message = reason
        super().__init__(message, cause)


class RequestFormatError(ValidationError):
    """Raised when the request body itself is malformed."""

    pass


class InvocationError(TelephoneError):
    """
    Raised when the resolved function raised during execution.

    The message is the original exception's message, unchanged, so callers
    see exactly what the function reported. The original exception is kept in
    ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, namespace: str, function_name: str, cause: BaseException):
        self.namespace = namespace
        self.function_name = function_name
        super().__init__(str(cause), cause)

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}:{self.function_name}"


class ContextNotFoundError(TelephoneError):
    """Raised by get_context() outside of any context scope."""

    def __init__(self, message: str = "Internal error: Couldn't find RPC context"):
        super().__init__(message)


class RegistryError(TelephoneError):
    """Raised when a registry cannot be built as requested."""

    pass


def describe(exc: BaseException) -> dict[str, Any]:
    """Return a small serializable description of an exception."""
    return {"type": type(exc).__name__, "message": str(exc)}
