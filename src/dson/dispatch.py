"""Conversion dispatcher: ``convert(value, target)`` and ``serialize(value)``.

Conversion runs three steps in order:

1. **Direct match**: *value* already satisfies *target*; return it as is.
   This short-circuits the majority of calls.
2. **Capability delegation**: *target* implements Convertible; hand the
   value to its ``construct``.  The adapter's error propagates unchanged.
3. **No path**: raise ``NoConversionPossible``.

Serialization is the mirror operation: the value's own type supplies the
Convertible capability, and containers recurse through the same converter.

INVARIANT: ``convert`` never returns a value that does not satisfy the
requested target type.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, MutableSequence, Sequence, Set
from typing import TYPE_CHECKING, Any, TypeVar, get_args, get_origin

from dson import builtins as _builtins  # noqa: F401  (registers built-in adapters)
from dson.convertible import ConvertibleAdapter, get_convertible
from dson.domain.types import NONE_TYPE, is_union, type_name
from dson.errors import (
    ConversionError,
    ConvertibleFailed,
    NoConversionPossible,
    SerializationFailed,
)
from dson.result import ConversionResult

if TYPE_CHECKING:
    from dson.config.settings import DsonSettings
    from dson.domain.types import JSONValue
    from dson.plugins.manager import PluginManager

T = TypeVar("T")

# Text is iterable but never treated as a sequence of elements.
_TEXT_TYPES = (str, bytes, bytearray)
_SEQUENCE_ABCS = (Sequence, MutableSequence)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Direct match
# ---------------------------------------------------------------------------


def satisfies(value: Any, target: Any) -> bool:
    """Whether *value* can be viewed as *target* without transformation.

    Parameterised containers match when every element (and key) satisfies
    its parameter.  ``bool`` never satisfies ``int``, and text never
    satisfies a sequence target.
    """
    if target is Any or target is object:
        return True
    if target is None or target is NONE_TYPE:
        return value is None
    if is_union(target):
        return any(satisfies(value, arm) for arm in get_args(target))

    origin = get_origin(target)
    if origin is None:
        if not isinstance(target, type):
            return False
        if target is int and isinstance(value, bool):
            return False
        if target in _SEQUENCE_ABCS and isinstance(value, _TEXT_TYPES):
            return False
        return isinstance(value, target)

    if not isinstance(origin, type) or not isinstance(value, origin):
        return False
    if origin in _SEQUENCE_ABCS and isinstance(value, _TEXT_TYPES):
        return False

    args = get_args(target)
    if not args:
        return True

    if issubclass(origin, tuple):
        if len(args) == 2 and args[1] is Ellipsis:
            return all(satisfies(item, args[0]) for item in value)
        return len(value) == len(args) and all(
            satisfies(item, arg) for item, arg in zip(value, args, strict=True)
        )
    if issubclass(origin, Mapping):
        key_type, value_type = args if len(args) == 2 else (args[0], Any)
        return all(
            satisfies(key, key_type) and satisfies(item, value_type) for key, item in value.items()
        )
    if issubclass(origin, Sequence | Set):
        return all(satisfies(item, args[0]) for item in value)

    # Other generics cannot be checked past their origin.
    return True


# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------


class Converter:
    """Dispatches conversion and serialization through Convertible adapters.

    Holds no per-call state; one instance is safe to share across threads.

    Attributes:
        sort_keys: Emit serialized mapping keys in sorted order instead of
            the mapping's own iteration order.
        strict: Reject container elements that have no Convertible
            capability instead of passing them through unchanged.
    """

    def __init__(self, *, sort_keys: bool = False, strict: bool = False) -> None:
        self.sort_keys = sort_keys
        self.strict = strict

    @classmethod
    def from_settings(
        cls,
        settings: DsonSettings,
        *,
        plugin_manager: PluginManager | None = None,
    ) -> Converter:
        """Build a converter from settings, loading plugins if enabled."""
        if settings.load_plugins:
            from dson.plugins.manager import PluginManager

            manager = plugin_manager or PluginManager()
            if not manager.is_loaded:
                manager.discover_and_load()
        return cls(sort_keys=settings.sort_keys, strict=settings.strict)

    def convert(self, value: Any, target: type[T]) -> T:
        """Return *value* as an instance of *target*.

        Raises:
            NoConversionPossible: No direct match and *target* is not
                Convertible.
            ConvertibleFailed: *target* is Convertible but declined *value*
                (or an element of it).
        """
        if target is None:
            target = NONE_TYPE  # type: ignore[assignment]

        if satisfies(value, target):
            return value

        if is_union(target):
            return self._convert_union(value, target)

        adapter = get_convertible(target)
        if adapter is None:
            raise NoConversionPossible(type(value), target)
        return self._construct(adapter, value, target)

    def try_convert(self, value: Any, target: Any) -> ConversionResult:
        """Like :meth:`convert`, but report failure as a ConversionResult."""
        name = type_name(target)
        try:
            converted = self.convert(value, target)
        except ConversionError as exc:
            logger.debug("Conversion to %s failed: %s", name, exc)
            return ConversionResult(ok=False, target=name, error=exc.to_info())
        return ConversionResult(ok=True, target=name, value=converted)

    def serialize(self, value: Any) -> JSONValue:
        """Return the JSON-compatible representation of *value*.

        Raises:
            SerializationFailed: *value* (or a nested element) has no
                serialized representation.
        """
        adapter = get_convertible(type(value))
        if adapter is None:
            msg = "type does not implement Convertible and is not JSON-compatible"
            raise SerializationFailed(type(value), msg)
        return adapter.serialize(value, self)

    def serialize_element(self, value: Any) -> Any:
        """Serialize one element of a container.

        Elements without a Convertible capability are returned unchanged,
        unless the converter is strict.
        """
        adapter = get_convertible(type(value))
        if adapter is not None:
            return adapter.serialize(value, self)
        if self.strict:
            msg = "element type does not implement Convertible"
            raise SerializationFailed(type(value), msg)
        return value

    # ------------------------------------------------------------------

    def _construct(self, adapter: ConvertibleAdapter, value: Any, target: Any) -> Any:
        result = adapter.construct(value, target, self)
        origin = get_origin(target) or target
        if isinstance(origin, type) and not isinstance(result, origin):
            logger.debug(
                "Adapter %r produced %s for target %s",
                adapter,
                type_name(type(result)),
                type_name(target),
            )
            raise ConvertibleFailed(type(value), target)
        return result

    def _convert_union(self, value: Any, target: Any) -> Any:
        """Try each Convertible arm of a union in declaration order."""
        attempted = False
        for arm in get_args(target):
            adapter = get_convertible(arm)
            if adapter is None:
                continue
            attempted = True
            try:
                return self._construct(adapter, value, arm)
            except ConversionError as exc:
                logger.debug("Union arm %s declined: %s", type_name(arm), exc)
        if attempted:
            raise ConvertibleFailed(type(value), target)
        raise NoConversionPossible(type(value), target)


# ---------------------------------------------------------------------------
# Module-level entry points
# ---------------------------------------------------------------------------

_default_converter = Converter()


def convert(value: Any, target: type[T]) -> T:
    """Convert *value* to *target* with the default converter."""
    return _default_converter.convert(value, target)


def try_convert(value: Any, target: Any) -> ConversionResult:
    """Convert *value* to *target*, returning a ConversionResult."""
    return _default_converter.try_convert(value, target)


def serialize(value: Any) -> JSONValue:
    """Serialize *value* with the default converter."""
    return _default_converter.serialize(value)
