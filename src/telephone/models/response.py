"""Map dispatcher outcomes to transport status codes and JSON bodies.

Pre-invocation failures are the caller's fault (4xx); a failure raised by
the invoked function is a server error (500).
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from telephone.core.exceptions import (
    FunctionNotFound,
    NamespaceNotFound,
    TelephoneError,
    describe,
)

Response = Tuple[int, Dict[str, Any]]


def status_for(exc: BaseException) -> int:
    if isinstance(exc, (NamespaceNotFound, FunctionNotFound)):
        return 404
    if isinstance(exc, TelephoneError) and exc.is_client_error:
        return 400
    return 500


def success_response(envelope: Dict[str, Any]) -> Response:
    return 200, {"result": envelope.get("result")}


def error_response(exc: BaseException) -> Response:
    return status_for(exc), {"error": describe(exc)}
