import pytest

import rpc_fixtures
from telephone.core.contracts import ParamInfo
from telephone.core.exceptions import RegistryError
from telephone.registry import RegistryBuilder, build_registry


def test_register_compiles_type_texts():
    builder = RegistryBuilder()
    entry = builder.register(
        "users",
        "update",
        rpc_fixtures.process_object,
        [("data", "{ name: string; age: number }"), ("note?", "string"), ("flag", "boolean", True)],
    )
    assert entry.params == (
        ParamInfo("data", {"name": "string", "age": "number"}, False),
        ParamInfo("note", "string", True),
        ParamInfo("flag", "boolean", True),
    )
    assert entry.min_args == 1
    assert entry.max_args == 3


def test_export_decorator_uses_function_name():
    builder = RegistryBuilder()

    @builder.export("math", ("a", "number"), ("b", "number"))
    async def add(a, b):
        return a + b

    registry = builder.freeze()
    assert registry["math"]["add"].fn is add


def test_duplicate_registration_raises():
    builder = RegistryBuilder()
    builder.register("math", "add", rpc_fixtures.add)
    with pytest.raises(RegistryError, match="already registered"):
        builder.register("math", "add", rpc_fixtures.add)
    builder.register("math", "add", rpc_fixtures.sync_multiply, overwrite=True)
    assert builder.freeze()["math"]["add"].fn is rpc_fixtures.sync_multiply


def test_frozen_registry_is_read_only():
    builder = RegistryBuilder()
    builder.register("math", "add", rpc_fixtures.add)
    registry = builder.freeze()
    assert builder.is_frozen
    assert builder.freeze() is registry

    with pytest.raises(RegistryError, match="frozen"):
        builder.register("math", "sub", rpc_fixtures.add)
    with pytest.raises(TypeError):
        registry["other"] = {}  # type: ignore[index]
    with pytest.raises(TypeError):
        registry["math"]["sub"] = registry["math"]["add"]  # type: ignore[index]


def test_non_callable_is_rejected():
    with pytest.raises(RegistryError, match="not callable"):
        RegistryBuilder().register("x", "y", rpc_fixtures.not_a_function)


def test_from_module_and_missing_attribute():
    builder = RegistryBuilder()
    builder.from_module("fx", rpc_fixtures, {"hello": [("name", "string")], "add": ["a", "b"]})
    registry = builder.freeze()
    assert sorted(registry["fx"]) == ["add", "hello"]
    assert registry["fx"]["add"].params[0].type == "any"

    with pytest.raises(RegistryError, match="no attribute 'missing'"):
        RegistryBuilder().from_module("fx", rpc_fixtures, {"missing": []})


def test_build_registry_helper():
    registry = build_registry({"math": {"add": (rpc_fixtures.add, [("a", "number"), ("b", "number")])}})
    assert [p.name for p in registry["math"]["add"].params] == ["a", "b"]
