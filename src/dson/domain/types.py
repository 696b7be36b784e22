"""Value kinds and type-descriptor helpers.

``ValueKind`` tags the variants a host bridging layer can hand over.
``type_name`` renders plain classes and parameterised generic aliases
alike, so error messages read ``list[int]`` rather than a typing repr.
"""

from __future__ import annotations

import types
from enum import StrEnum
from typing import Any, TypeAlias, Union, get_args, get_origin


class ValueKind(StrEnum):
    """Tags for host-bridged values."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    MAPPING = "mapping"
    OPAQUE = "opaque"


NONE_TYPE = type(None)


def is_union(tp: Any) -> bool:
    """Whether *tp* is a ``Union``/``Optional`` or a PEP 604 ``X | Y``."""
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def type_name(tp: Any) -> str:
    """Return a readable name for a class or generic alias.

    >>> type_name(dict[str, list[int]])
    'dict[str, list[int]]'
    """
    if tp is None or tp is NONE_TYPE:
        return "None"
    if tp is Any:
        return "Any"
    if tp is Ellipsis:
        return "..."

    if is_union(tp):
        return " | ".join(type_name(arm) for arm in get_args(tp))

    origin = get_origin(tp)
    if origin is not None:
        base = type_name(origin)
        args = get_args(tp)
        if not args:
            return base
        return f"{base}[{', '.join(type_name(arg) for arg in args)}]"

    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)


# Serialized representation: the JSON-compatible subset of Python values.
JSONScalar: TypeAlias = bool | int | float | str | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
