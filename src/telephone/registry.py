from __future__ import annotations

from types import MappingProxyType, ModuleType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from telephone.core.contracts import FunctionEntry, ParamInfo, Registry
from telephone.core.exceptions import RegistryError
from telephone.schema.parser import parse_param

# ParamInfo, "name", (name, type_text) or (name, type_text, optional)
ParamDecl = Union[ParamInfo, str, Tuple[str, str], Tuple[str, str, bool]]

FnT = Callable[..., Any]


def to_param(decl: ParamDecl) -> ParamInfo:
    if isinstance(decl, ParamInfo):
        return decl
    if isinstance(decl, str):
        return parse_param(decl)
    if len(decl) == 2:
        name, type_text = decl  # type: ignore[misc]
        return parse_param(name, type_text)
    if len(decl) == 3:
        name, type_text, optional = decl  # type: ignore[misc]
        return parse_param(name, type_text, bool(optional))
    raise RegistryError(f"Invalid parameter declaration: {decl!r}")


class RegistryBuilder:
    """Collects exported functions, then freezes them into a read-only Registry.

    Example:
        >>> builder = RegistryBuilder()
        >>> @builder.export("math", ("a", "number"), ("b", "number"))
        ... async def add(a, b):
        ...     return a + b
        >>> registry = builder.freeze()
        >>> registry["math"]["add"].params[0].type
        'number'
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[str, FunctionEntry]] = {}
        self._frozen: Optional[Registry] = None

    @property
    def is_frozen(self) -> bool:
        return self._frozen is not None

    def register(
        self,
        namespace: str,
        name: str,
        fn: FnT,
        params: Iterable[ParamDecl] = (),
        *,
        overwrite: bool = False,
    ) -> FunctionEntry:
        if self._frozen is not None:
            raise RegistryError(
                f"Cannot register {namespace!r}:{name!r}: registry is frozen"
            )
        if not callable(fn):
            raise RegistryError(f"Cannot register {namespace!r}:{name!r}: {fn!r} is not callable")
        functions = self._entries.setdefault(namespace, {})
        if not overwrite and name in functions:
            raise RegistryError(
                f"Function already registered for namespace={namespace!r}, name={name!r}: {functions[name]!r}"
            )
        entry = FunctionEntry(fn=fn, params=tuple(to_param(p) for p in params))
        functions[name] = entry
        return entry

    def export(
        self,
        namespace: str,
        *params: ParamDecl,
        name: Optional[str] = None,
        overwrite: bool = False,
    ) -> Callable[[FnT], FnT]:
        def decorator(fn: FnT) -> FnT:
            self.register(namespace, name or fn.__name__, fn, params, overwrite=overwrite)
            return fn

        return decorator

    def from_module(
        self,
        namespace: str,
        module: ModuleType,
        declarations: Mapping[str, Sequence[ParamDecl]],
        *,
        overwrite: bool = False,
    ) -> None:
        """Register every declared function of ``module`` under ``namespace``."""
        for name, params in declarations.items():
            fn = getattr(module, name, None)
            if fn is None:
                raise RegistryError(
                    f"Module {module.__name__!r} has no attribute {name!r} for namespace {namespace!r}"
                )
            self.register(namespace, name, fn, params, overwrite=overwrite)

    def freeze(self) -> Registry:
        """Return the immutable registry. Further registration is refused."""
        if self._frozen is None:
            self._frozen = MappingProxyType(
                {ns: MappingProxyType(dict(fns)) for ns, fns in self._entries.items()}
            )
        return self._frozen


def build_registry(functions: Mapping[str, Mapping[str, Tuple[FnT, Sequence[ParamDecl]]]]) -> Registry:
    """Build a frozen registry from ``{namespace: {name: (fn, params)}}``."""
    builder = RegistryBuilder()
    for namespace, entries in functions.items():
        for name, (fn, params) in entries.items():
            builder.register(namespace, name, fn, params)
    return builder.freeze()
