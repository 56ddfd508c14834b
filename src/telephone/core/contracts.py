from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Tuple, Union

from telephone.core.exceptions import RegistryError


class ObjectShape(dict):
    """Field name -> nested schema, remembering which fields were declared ``name?:``.

    Compares equal to a plain dict with the same fields.
    """

    def __init__(self, *args: Any, optional: Iterable[str] = (), **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.optional: FrozenSet[str] = frozenset(optional)

    def is_optional(self, key: str) -> bool:
        return key in self.optional

    def __repr__(self) -> str:
        if not self.optional:
            return super().__repr__()
        return f"ObjectShape({super().__repr__()}, optional={sorted(self.optional)!r})"


# A structural shape (field name -> nested schema) or opaque type text
TypeSchema = Union[Dict[str, "TypeSchema"], str]

# namespace -> function name -> FunctionEntry
Registry = Mapping[str, Mapping[str, "FunctionEntry"]]


@dataclass(frozen=True)
class ParamInfo:
    """One declared parameter of an exported function."""
    name: str
    type: TypeSchema = "any"
    optional: bool = False


@dataclass(frozen=True)
class FunctionEntry:
    """A callable together with its ordered parameter schemas."""
    fn: Callable[..., Any]
    params: Tuple[ParamInfo, ...] = field(default_factory=tuple)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, namespace: str = "-", function_name: str = "-") -> "FunctionEntry":
        """Accept the plain ``{"fn": ..., "params": [{"name", "type", "optional"}]}`` form."""
        params = []
        for p in data.get("params", ()):
            if isinstance(p, ParamInfo):
                params.append(p)
                continue
            if not isinstance(p, Mapping) or not p.get("name"):
                raise RegistryError(
                    f"Invalid parameter {p!r} for {namespace}:{function_name}: expected a mapping with a 'name'"
                )
            params.append(ParamInfo(
                name=p["name"], type=p.get("type", "any"), optional=bool(p.get("optional", False))
            ))
        return cls(fn=data.get("fn"), params=tuple(params))  # type: ignore[arg-type]

    @property
    def min_args(self) -> int:
        return sum(1 for p in self.params if not p.optional)

    @property
    def max_args(self) -> int:
        return len(self.params)

    def __repr__(self) -> str:
        name = getattr(self.fn, "__qualname__", type(self.fn).__name__)
        params = ", ".join(f"{p.name}{'?' if p.optional else ''}" for p in self.params)
        return f"FunctionEntry({name}({params}))"
