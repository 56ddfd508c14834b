"""Check wire arguments against declared parameter schemas.

Only primitives (``string``, ``number``, ``boolean``), arrays (``T[]``) and
structural object shapes are enforced. Any other type text (unions,
generics, user-defined names) cannot be verified at runtime and passes.

``None`` and ``UNDEFINED`` always pass by default: null handling is left to
the invoked function. Pass ``allow_null=False`` to reject them wherever a
concrete type is declared.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from telephone.core.contracts import ObjectShape, ParamInfo, TypeSchema
from telephone.core.exceptions import ValidationError
from telephone.core.wire import is_absent, type_tag

ANY_TYPE = "any"
ARRAY_SUFFIX = "[]"

_PRIMITIVE_TAGS = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
}


class ArgumentValidator:
    """Validates the arguments of one call to ``namespace:function_name``."""

    def __init__(self, namespace: str, function_name: str, *, allow_null: bool = True):
        self.namespace = namespace
        self.function_name = function_name
        self.allow_null = allow_null

    def _fail(self, reason: str, path: str) -> ValidationError:
        return ValidationError(
            reason,
            namespace=self.namespace,
            function_name=self.function_name,
            path=path,
        )

    def _mismatch(self, expected: TypeSchema, value: Any, path: str) -> ValidationError:
        expected_text = "object" if isinstance(expected, Mapping) else expected
        return self._fail(
            f"Argument '{path}' expected type '{expected_text}' but got '{type_tag(value)}'.",
            path,
        )

    def validate_value(self, schema: TypeSchema, value: Any, path: str) -> None:
        if schema == ANY_TYPE:
            return
        if is_absent(value):
            if self.allow_null:
                return
            raise self._mismatch(schema, value, path)

        if isinstance(schema, Mapping):
            if not isinstance(value, Mapping):
                raise self._mismatch(schema, value, path)
            for key, field_schema in schema.items():
                if key not in value:
                    if isinstance(schema, ObjectShape) and schema.is_optional(key):
                        continue
                    raise self._fail(f"Missing property '{key}' in argument '{path}'.", path)
                self.validate_value(field_schema, value[key], f"{path}.{key}")
            return

        if schema.endswith(ARRAY_SUFFIX):
            if not isinstance(value, (list, tuple)):
                raise self._mismatch(schema, value, path)
            item_schema = schema[: -len(ARRAY_SUFFIX)]
            for index, item in enumerate(value):
                self.validate_value(item_schema, item, f"{path}[{index}]")
            return

        expected_tag = _PRIMITIVE_TAGS.get(schema)
        if expected_tag is not None and type_tag(value) != expected_tag:
            raise self._mismatch(schema, value, path)

    def check_arity(self, args: Sequence[Any], params: Sequence[ParamInfo]) -> None:
        min_args = sum(1 for p in params if not p.optional)
        max_args = len(params)
        if min_args <= len(args) <= max_args:
            return
        expected = str(max_args) if min_args == max_args else f"{min_args}-{max_args}"
        raise self._fail(f"Expected {expected} arguments, but got {len(args)}.", "")

    def validate(self, args: Sequence[Any], params: Sequence[ParamInfo]) -> None:
        self.check_arity(args, params)
        for index, param in enumerate(params):
            if index >= len(args):
                if param.optional:
                    continue
                raise self._fail(
                    f"Argument for '{param.name}' is required but not provided.", param.name
                )
            arg = args[index]
            if param.optional and is_absent(arg):
                continue
            self.validate_value(param.type, arg, param.name)


def validate_args(
    namespace: str,
    function_name: str,
    args: Sequence[Any],
    params: Sequence[ParamInfo],
    *,
    allow_null: bool = True,
) -> None:
    """Raise ValidationError for the first argument that violates ``params``."""
    ArgumentValidator(namespace, function_name, allow_null=allow_null).validate(args, params)


def validate_type(
    schema: TypeSchema,
    value: Any,
    *,
    namespace: str = "-",
    function_name: str = "-",
    path: str = "value",
    allow_null: bool = True,
) -> None:
    """Validate a single value against a schema."""
    ArgumentValidator(namespace, function_name, allow_null=allow_null).validate_value(schema, value, path)
