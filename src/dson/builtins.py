"""Built-in Convertible adapters.

Scalars unwrap their host-bridged counterpart; containers accept both
host-bridged and native containers and recurse into the converter for
every element, failing on the first element that cannot be converted.

Registered into :data:`~dson.convertible.CONVERTIBLE_REGISTRY` at import.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from typing import TYPE_CHECKING, Any, get_args, get_origin

from pydantic import BaseModel, ValidationError

from dson.convertible import ConvertibleAdapter, register_convertible
from dson.domain.host import (
    HostArray,
    HostBool,
    HostMapping,
    HostNull,
    HostNumber,
    HostOpaque,
    HostString,
    HostValue,
    bridge,
    unbridge,
)
from dson.domain.types import NONE_TYPE, JSONValue, type_name
from dson.errors import SerializationFailed

if TYPE_CHECKING:
    from dson.dispatch import Converter

# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


class NoneConvertible(ConvertibleAdapter):
    def construct(self, value: Any, target: Any, converter: Converter) -> None:
        if isinstance(value, HostNull):
            return None
        raise self.declined(value, target)

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        return None


class BoolConvertible(ConvertibleAdapter):
    """Unwraps host boolean wrappers; a bool is its own representation."""

    def construct(self, value: Any, target: Any, converter: Converter) -> bool:
        if isinstance(value, HostBool):
            return value.value
        raise self.declined(value, target)

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        return value


class IntConvertible(ConvertibleAdapter):
    """Unwraps integral host numbers. Booleans are never integers here."""

    def construct(self, value: Any, target: Any, converter: Converter) -> int:
        if isinstance(value, HostNumber) and value.is_integral:
            return int(value.value)
        raise self.declined(value, target)

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        return int(value)


class FloatConvertible(ConvertibleAdapter):
    """Unwraps host numbers and widens native ints."""

    def construct(self, value: Any, target: Any, converter: Converter) -> float:
        if isinstance(value, HostNumber):
            return float(value.value)
        if isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        raise self.declined(value, target)

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        if not math.isfinite(value):
            raise SerializationFailed(type(value), f"non-finite float {value!r}")
        return float(value)


class StrConvertible(ConvertibleAdapter):
    def construct(self, value: Any, target: Any, converter: Converter) -> str:
        if isinstance(value, HostString):
            return value.value
        raise self.declined(value, target)

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        # Plain str content, even for str subclasses such as StrEnum.
        return str.__str__(value)


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


class SequenceConvertible(ConvertibleAdapter):
    """Ordered homogeneous sequences: ``list[E]``, ``tuple[E, ...]``, ``Sequence[E]``.

    Fixed-shape tuples (``tuple[int, str]``) convert positionally and
    require a source of the same length.
    """

    def construct(
        self, value: Any, target: Any, converter: Converter
    ) -> list[Any] | tuple[Any, ...]:
        if not isinstance(value, HostArray | list | tuple):
            raise self.declined(value, target)

        origin = get_origin(target) or target
        args = get_args(target)

        if issubclass(origin, tuple):
            if len(args) == 2 and args[1] is Ellipsis:
                return tuple(converter.convert(item, args[0]) for item in value)
            if args:
                if len(value) != len(args):
                    raise self.declined(value, target)
                return tuple(
                    converter.convert(item, arg) for item, arg in zip(value, args, strict=True)
                )
            return tuple(value)

        element = args[0] if args else Any
        return [converter.convert(item, element) for item in value]

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        return [converter.serialize_element(item) for item in value]


class MappingConvertible(ConvertibleAdapter):
    """Key-value mappings: ``dict[K, V]``, ``Mapping[K, V]``.

    Serialization requires string keys; a non-string key is an error
    rather than being coerced.  Source keys that convert to the same key
    are an error rather than being merged.
    """

    def construct(self, value: Any, target: Any, converter: Converter) -> dict[Any, Any]:
        if not isinstance(value, HostMapping | Mapping):
            raise self.declined(value, target)

        args = get_args(target)
        key_type, value_type = args if len(args) == 2 else (Any, Any)

        result: dict[Any, Any] = {}
        for key, item in value.items():
            converted = converter.convert(key, key_type)
            if converted in result:
                raise self.declined(value, target)
            result[converted] = converter.convert(item, value_type)
        return result

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        result: dict[str, JSONValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                reason = f"mapping key {key!r} is a {type_name(type(key))}, not a string"
                raise SerializationFailed(type(value), reason)
            result[str.__str__(key)] = converter.serialize_element(item)
        if converter.sort_keys:
            return dict(sorted(result.items()))
        return result


# ---------------------------------------------------------------------------
# Host values and models
# ---------------------------------------------------------------------------


class HostValueConvertible(ConvertibleAdapter):
    """Host-bridged values serialize through their unwrapped payload."""

    def construct(self, value: Any, target: Any, converter: Converter) -> HostValue:
        bridged = bridge(value)
        if not isinstance(bridged, target):
            raise self.declined(value, target)
        return bridged

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        if isinstance(value, HostOpaque):
            msg = "opaque host value has no serialized representation"
            raise SerializationFailed(type(value.obj), msg)
        if isinstance(value, HostArray):
            return [converter.serialize_element(item) for item in value]
        if isinstance(value, HostMapping):
            pairs: dict[Any, Any] = {}
            for key, item in value.items():
                native_key = key.value if isinstance(key, HostString) else key
                if native_key in pairs:
                    raise SerializationFailed(type(value), f"duplicate key {native_key!r}")
                pairs[native_key] = item
            return converter.serialize(pairs)
        return converter.serialize(value.unwrap())


class ModelConvertible(ConvertibleAdapter):
    """Pydantic models: validated from a mapping, dumped in JSON mode."""

    def construct(self, value: Any, target: Any, converter: Converter) -> BaseModel:
        if not isinstance(value, HostMapping | Mapping):
            raise self.declined(value, target)
        try:
            return target.model_validate(unbridge(value))
        except ValidationError as exc:
            raise self.declined(value, target) from exc

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        return value.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def builtin_adapters() -> dict[type, ConvertibleAdapter]:
    """Return the type -> adapter pairs registered at import time."""
    sequences = SequenceConvertible()
    mappings = MappingConvertible()
    return {
        NONE_TYPE: NoneConvertible(),
        bool: BoolConvertible(),
        int: IntConvertible(),
        float: FloatConvertible(),
        str: StrConvertible(),
        list: sequences,
        tuple: sequences,
        Sequence: sequences,
        MutableSequence: sequences,
        dict: mappings,
        Mapping: mappings,
        MutableMapping: mappings,
        HostValue: HostValueConvertible(),
        BaseModel: ModelConvertible(),
    }


def _register_builtins() -> None:
    for tp, adapter in builtin_adapters().items():
        register_convertible(tp, adapter, replace=True)


_register_builtins()
