"""Tests for the Convertible protocol, adapters, and registry."""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from enum import IntEnum
from types import MappingProxyType
from typing import Any

import pytest
from pydantic import BaseModel

from dson.builtins import (
    BoolConvertible,
    IntConvertible,
    MappingConvertible,
    ModelConvertible,
    SequenceConvertible,
)
from dson.convertible import (
    CONVERTIBLE_REGISTRY,
    Convertible,
    ConvertibleAdapter,
    ProtocolAdapter,
    get_convertible,
    implements_convertible,
    is_convertible,
    register_convertible,
)
from dson.domain.host import HostString
from dson.errors import ConvertibleFailed


class Celsius:
    """Convertible via the protocol: built from a host string like ``"21C"``."""

    def __init__(self, degrees: float) -> None:
        self.degrees = degrees

    @classmethod
    def construct(cls, value: Any) -> Celsius:
        if isinstance(value, HostString) and value.value.endswith("C"):
            return cls(float(value.value[:-1]))
        raise ConvertibleFailed(type(value), cls)

    def serialize(self) -> str:
        return f"{self.degrees:g}C"


class Opaque:
    pass


class Colour(IntEnum):
    RED = 1


class Settings(BaseModel):
    name: str


class Fahrenheit:
    def __init__(self, degrees: float) -> None:
        self.degrees = degrees


class FahrenheitConvertible(ConvertibleAdapter):
    def construct(self, value: Any, target: Any, converter: Any) -> Fahrenheit:
        if isinstance(value, int | float):
            return Fahrenheit(float(value))
        raise self.declined(value, target)

    def serialize(self, value: Any, converter: Any) -> Any:
        return value.degrees


class TestCapabilityQuery:
    def test_protocol_class_is_convertible(self) -> None:
        assert implements_convertible(Celsius)
        assert isinstance(Celsius(1.0), Convertible)
        adapter = get_convertible(Celsius)
        assert isinstance(adapter, ProtocolAdapter)
        assert adapter.cls is Celsius

    def test_plain_class_is_not_convertible(self) -> None:
        assert not implements_convertible(Opaque)
        assert get_convertible(Opaque) is None
        assert not is_convertible(Opaque)

    def test_builtins_resolve_from_registry(self) -> None:
        assert isinstance(get_convertible(bool), BoolConvertible)
        assert isinstance(get_convertible(list[int]), SequenceConvertible)
        assert isinstance(get_convertible(Sequence[int]), SequenceConvertible)
        assert isinstance(get_convertible(dict[str, int]), MappingConvertible)

    def test_subclasses_inherit_adapter(self) -> None:
        assert isinstance(get_convertible(Colour), IntConvertible)

    def test_bool_resolves_before_int(self) -> None:
        assert isinstance(get_convertible(bool), BoolConvertible)

    def test_virtual_subclasses_resolve_through_abcs(self) -> None:
        assert isinstance(get_convertible(deque), SequenceConvertible)
        assert isinstance(get_convertible(MappingProxyType), MappingConvertible)

    def test_text_never_resolves_to_sequence(self) -> None:
        assert get_convertible(bytes) is None
        assert get_convertible(bytearray) is None

    def test_pydantic_model_uses_model_adapter(self) -> None:
        assert not implements_convertible(Settings)
        assert isinstance(get_convertible(Settings), ModelConvertible)

    def test_non_types_are_not_convertible(self) -> None:
        assert get_convertible(42) is None
        assert get_convertible("list") is None


class TestProtocolAdapter:
    def test_delegates_construct_and_serialize(self) -> None:
        adapter = ProtocolAdapter(Celsius)
        built = adapter.construct(HostString("21C"), Celsius, None)  # type: ignore[arg-type]
        assert built.degrees == 21.0
        assert adapter.serialize(built, None) == "21C"  # type: ignore[arg-type]

    def test_declined_source_raises(self) -> None:
        with pytest.raises(ConvertibleFailed):
            ProtocolAdapter(Celsius).construct(3, Celsius, None)  # type: ignore[arg-type]


@pytest.mark.usefixtures("restore_registry")
class TestRegisterConvertible:
    def test_register_new_type(self) -> None:
        adapter = FahrenheitConvertible()
        register_convertible(Fahrenheit, adapter)
        assert CONVERTIBLE_REGISTRY[Fahrenheit] is adapter
        assert get_convertible(Fahrenheit) is adapter

    def test_duplicate_requires_replace(self) -> None:
        register_convertible(Fahrenheit, FahrenheitConvertible())
        with pytest.raises(ValueError, match="already has a Convertible adapter"):
            register_convertible(Fahrenheit, FahrenheitConvertible())

    def test_replace_overrides(self) -> None:
        replacement = FahrenheitConvertible()
        register_convertible(Fahrenheit, FahrenheitConvertible())
        register_convertible(Fahrenheit, replacement, replace=True)
        assert get_convertible(Fahrenheit) is replacement

    def test_builtin_is_protected(self) -> None:
        with pytest.raises(ValueError):
            register_convertible(bool, FahrenheitConvertible())

    def test_rejects_object(self) -> None:
        with pytest.raises(ValueError):
            register_convertible(object, FahrenheitConvertible())

    def test_rejects_non_class(self) -> None:
        with pytest.raises(TypeError):
            register_convertible("Fahrenheit", FahrenheitConvertible())  # type: ignore[arg-type]

    def test_rejects_non_adapter(self) -> None:
        with pytest.raises(TypeError):
            register_convertible(Fahrenheit, object())  # type: ignore[arg-type]
