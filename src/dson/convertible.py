"""Convertible capability: protocol, adapter base, and registry.

A type opts into conversion and serialization in one of two ways:

- **Protocol**: the class itself defines a ``construct`` classmethod and a
  ``serialize`` method (see :class:`Convertible`).  Nothing to register;
  the dispatcher queries the capability when it needs it.
- **Adapter**: types that cannot carry methods (builtins, third-party
  classes) are paired with a :class:`ConvertibleAdapter` in
  :data:`CONVERTIBLE_REGISTRY` via :func:`register_convertible`.

Lookup follows the class MRO, so subclasses inherit their base's adapter
(``IntEnum`` members serialize through the ``int`` adapter, pydantic models
through the ``BaseModel`` adapter), then falls back to registered ABCs so
virtual subclasses such as ``deque`` resolve through ``MutableSequence``.
"""

from __future__ import annotations

import logging
from abc import ABC, ABCMeta, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, Self, get_origin, runtime_checkable

from pydantic import BaseModel

from dson.domain.types import JSONValue, type_name
from dson.errors import ConvertibleFailed

if TYPE_CHECKING:
    from dson.dispatch import Converter

logger = logging.getLogger(__name__)

_TEXT_TYPES = (str, bytes, bytearray, memoryview)


@runtime_checkable
class Convertible(Protocol):
    """Capability implemented directly by participating classes."""

    @classmethod
    def construct(cls, value: Any) -> Self:
        """Build an instance from *value* or raise ``ConvertibleFailed``.

        Implementations inspect the runtime identity of *value* and accept
        only the representations they explicitly recognise.
        """
        ...

    def serialize(self) -> JSONValue:
        """Return this instance's JSON-compatible representation."""
        ...


class ConvertibleAdapter(ABC):
    """Convertible capability for a type that cannot implement it itself.

    *target* is the full requested type, including generic parameters, so
    container adapters can read their element types from it.  *converter*
    is the calling dispatcher, used to recurse into elements.
    """

    @abstractmethod
    def construct(self, value: Any, target: Any, converter: Converter) -> Any:
        """Build a *target* instance from *value*."""

    @abstractmethod
    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        """Return the JSON-compatible representation of *value*."""

    @staticmethod
    def declined(value: Any, target: Any) -> ConvertibleFailed:
        """Error for a source representation this adapter does not recognise."""
        return ConvertibleFailed(type(value), target)


class ProtocolAdapter(ConvertibleAdapter):
    """Adapter view over a class implementing :class:`Convertible`."""

    def __init__(self, cls: type[Convertible]) -> None:
        self.cls = cls

    def construct(self, value: Any, target: Any, converter: Converter) -> Any:
        return self.cls.construct(value)

    def serialize(self, value: Any, converter: Converter) -> JSONValue:
        return value.serialize()

    def __repr__(self) -> str:
        return f"ProtocolAdapter({self.cls.__qualname__})"


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

# Populated by dson.builtins at import time; plugins add to it later.
CONVERTIBLE_REGISTRY: dict[type, ConvertibleAdapter] = {}


def implements_convertible(cls: Any) -> bool:
    """Whether *cls* carries ``construct`` and ``serialize`` itself.

    Pydantic's deprecated ``BaseModel.construct`` does not count; a model
    must define its own to use the protocol path.
    """
    if not isinstance(cls, type) or not issubclass(cls, Convertible):
        return False
    construct = getattr(cls.construct, "__func__", None)
    return construct is not getattr(BaseModel.construct, "__func__", None)


def get_convertible(tp: Any) -> ConvertibleAdapter | None:
    """Return the Convertible capability for *tp*, or None.

    *tp* may be a plain class or a parameterised generic alias; aliases
    resolve through their origin (``list[int]`` -> ``list``).
    """
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return None
    if implements_convertible(origin):
        return ProtocolAdapter(origin)
    for base in origin.__mro__:
        adapter = CONVERTIBLE_REGISTRY.get(base)
        if adapter is not None:
            return adapter
    # Virtual subclasses of a registered ABC (deque, MappingProxyType).
    if issubclass(origin, _TEXT_TYPES):
        return None
    for registered, adapter in CONVERTIBLE_REGISTRY.items():
        if isinstance(registered, ABCMeta) and issubclass(origin, registered):
            return adapter
    return None


def is_convertible(tp: Any) -> bool:
    """Capability query: does *tp* implement Convertible?"""
    return get_convertible(tp) is not None


def register_convertible(
    tp: type,
    adapter: ConvertibleAdapter,
    *,
    replace: bool = False,
) -> None:
    """Pair *tp* with *adapter* in the registry.

    Raises:
        TypeError: If *tp* is not a class or *adapter* is not an adapter.
        ValueError: If *tp* is ``object`` or already registered and
            *replace* is False.
    """
    if not isinstance(tp, type):
        msg = f"Convertible registrations require a class, got {tp!r}"
        raise TypeError(msg)

    if tp is object:
        msg = "Cannot register a Convertible adapter for object"
        raise ValueError(msg)

    if not isinstance(adapter, ConvertibleAdapter):
        msg = f"Adapter for {type_name(tp)!r} must be a ConvertibleAdapter instance"
        raise TypeError(msg)

    existing = CONVERTIBLE_REGISTRY.get(tp)
    if existing is not None and not replace:
        msg = f"Type {type_name(tp)!r} already has a Convertible adapter ({existing!r})"
        raise ValueError(msg)

    CONVERTIBLE_REGISTRY[tp] = adapter
    logger.debug("Registered Convertible adapter for %s: %r", type_name(tp), adapter)
