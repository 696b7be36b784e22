"""Host-bridged values: the tagged variants an interchange layer produces.

A bridging layer decodes foreign data into these wrappers rather than
native Python objects.  Each variant answers "what kind of value is this"
through its ``kind`` tag and can be destructured (iterated, unwrapped)
without knowing anything about the foreign runtime.

``bridge()`` and ``unbridge()`` wrap and unwrap native data the same way
a bridging layer would; the dispatcher itself never calls them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from dson.domain.types import ValueKind


@dataclass(frozen=True)
class HostValue(ABC):
    """Base class for all host-bridged values. Not instantiable itself."""

    kind: ClassVar[ValueKind] = ValueKind.OPAQUE

    @abstractmethod
    def unwrap(self) -> Any:
        """Return the shallow native payload of this value."""


@dataclass(frozen=True)
class HostNull(HostValue):
    kind: ClassVar[ValueKind] = ValueKind.NULL

    def unwrap(self) -> None:
        return None


@dataclass(frozen=True)
class HostBool(HostValue):
    """Foreign boolean wrapper (e.g. an Objective-C ``BOOL`` box)."""

    kind: ClassVar[ValueKind] = ValueKind.BOOLEAN

    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            msg = f"HostBool requires a bool, got {type(self.value).__name__}"
            raise TypeError(msg)

    def unwrap(self) -> bool:
        return self.value


@dataclass(frozen=True)
class HostNumber(HostValue):
    kind: ClassVar[ValueKind] = ValueKind.NUMBER

    value: int | float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int | float):
            msg = f"HostNumber requires an int or float, got {type(self.value).__name__}"
            raise TypeError(msg)

    @property
    def is_integral(self) -> bool:
        """True when the number has no fractional part."""
        if isinstance(self.value, int):
            return True
        return self.value.is_integer()

    def unwrap(self) -> int | float:
        return self.value


@dataclass(frozen=True)
class HostString(HostValue):
    kind: ClassVar[ValueKind] = ValueKind.STRING

    value: str

    def unwrap(self) -> str:
        return self.value


@dataclass(frozen=True)
class HostArray(HostValue):
    """Foreign heterogeneous array. Elements may be host or native values."""

    kind: ClassVar[ValueKind] = ValueKind.ARRAY

    items: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        # Accept any iterable but always store a tuple.
        object.__setattr__(self, "items", tuple(self.items))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, index: int) -> Any:
        return self.items[index]

    def unwrap(self) -> list[Any]:
        return list(self.items)


@dataclass(frozen=True)
class HostMapping(HostValue):
    """Foreign key-value container, stored as ordered ``(key, value)`` pairs.

    Accepts a mapping or any iterable of pairs at construction.
    """

    kind: ClassVar[ValueKind] = ValueKind.MAPPING

    entries: tuple[tuple[Any, Any], ...] = ()

    def __post_init__(self) -> None:
        source = self.entries
        pairs = source.items() if isinstance(source, Mapping) else source
        object.__setattr__(self, "entries", tuple((k, v) for k, v in pairs))

    def items(self) -> Iterator[tuple[Any, Any]]:
        return iter(self.entries)

    def keys(self) -> list[Any]:
        return [k for k, _ in self.entries]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.entries)

    def unwrap(self) -> dict[Any, Any]:
        return dict(self.entries)


@dataclass(frozen=True)
class HostOpaque(HostValue):
    """A foreign object with no native counterpart."""

    kind: ClassVar[ValueKind] = ValueKind.OPAQUE

    obj: Any = None

    def unwrap(self) -> Any:
        return self.obj


# ---------------------------------------------------------------------------
# Bridging helpers
# ---------------------------------------------------------------------------


def bridge(obj: Any) -> HostValue:
    """Recursively wrap native Python data as host values.

    Mapping keys are bridged too, mirroring containers whose keys are
    themselves foreign objects.
    """
    if isinstance(obj, HostValue):
        return obj
    if obj is None:
        return HostNull()
    if isinstance(obj, bool):
        return HostBool(obj)
    if isinstance(obj, int | float):
        return HostNumber(obj)
    if isinstance(obj, str):
        return HostString(obj)
    if isinstance(obj, Mapping):
        return HostMapping(tuple((bridge(k), bridge(v)) for k, v in obj.items()))
    if isinstance(obj, list | tuple):
        return HostArray(tuple(bridge(item) for item in obj))
    return HostOpaque(obj)


def unbridge(value: Any) -> Any:
    """Recursively unwrap host values back into native Python data.

    Native containers are walked as well so mixed trees unwrap fully.
    Array-valued mapping keys become tuples to stay hashable.
    """
    if isinstance(value, HostArray | list | tuple):
        return [unbridge(item) for item in value]
    if isinstance(value, HostMapping | Mapping):
        result: dict[Any, Any] = {}
        for key, item in value.items():
            native_key = unbridge(key)
            if isinstance(native_key, list):
                native_key = tuple(native_key)
            result[native_key] = unbridge(item)
        return result
    if isinstance(value, HostValue):
        return value.unwrap()
    return value
