from __future__ import annotations

from typing import Any, List, Sequence

# Must match the placeholder emitted by the client stub for an `undefined` argument.
UNDEFINED_SUBSTITUTION = "__TELEPHONE__UNDEFINED__alphaBetaGama_check123__"


class _Undefined:
    """Marker for a value that is absent on the wire (as opposed to null)."""

    _instance = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED = _Undefined()


def is_absent(value: Any) -> bool:
    return value is None or value is UNDEFINED


def _decode(value: Any) -> Any:
    if isinstance(value, str) and value == UNDEFINED_SUBSTITUTION:
        return UNDEFINED
    if isinstance(value, list):
        return [_decode(item) for item in value]
    if isinstance(value, dict):
        # An undefined property disappears from the object, like JSON.parse with a reviver
        decoded = {k: _decode(v) for k, v in value.items()}
        return {k: v for k, v in decoded.items() if v is not UNDEFINED}
    return value


def decode_args(args: Sequence[Any]) -> List[Any]:
    """Replace the undefined placeholder with UNDEFINED throughout the wire args.

    List items become UNDEFINED (positions are preserved); object properties
    holding the placeholder are dropped.
    """
    return [_decode(arg) for arg in args]


def _encode(value: Any) -> Any:
    if value is UNDEFINED:
        return UNDEFINED_SUBSTITUTION
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items() if v is not UNDEFINED}
    return value


def encode_args(args: Sequence[Any]) -> List[Any]:
    """Inverse of decode_args, for callers building wire payloads."""
    return [_encode(arg) for arg in args]


def type_tag(value: Any) -> str:
    """Wire type tag of a decoded JSON value, used in validation messages."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _materialize(value: Any) -> Any:
    if value is UNDEFINED:
        return None
    if isinstance(value, list):
        return [_materialize(item) for item in value]
    if isinstance(value, dict):
        return {k: _materialize(v) for k, v in value.items()}
    return value


def materialize_args(args: Sequence[Any]) -> List[Any]:
    """Prepare decoded args for a Python call.

    Trailing absent arguments are dropped so the function's own defaults
    apply; any other UNDEFINED becomes None.
    """
    end = len(args)
    while end and args[end - 1] is UNDEFINED:
        end -= 1
    return [_materialize(arg) for arg in args[:end]]
