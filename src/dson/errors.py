"""Conversion error taxonomy.

Three failure reasons, each carrying the types involved so that generic
call sites still get a message naming what went wrong:

- ``NoConversionPossible``: direct match failed and the target type does
  not implement Convertible.
- ``ConvertibleFailed``: the target implements Convertible but declined
  this source value.
- ``SerializationFailed``: a value (or a container element) has no
  JSON-compatible representation.

INVARIANT: Containers propagate element errors unchanged, never wrapped.
"""

from __future__ import annotations

from typing import Any, ClassVar

from dson.domain.types import type_name
from dson.result import ConversionErrorInfo


class ConversionError(Exception):
    """Base class for every conversion and serialization failure."""

    code: ClassVar[str] = "CONVERSION_ERROR"

    def detail(self) -> dict[str, Any]:
        """Type names involved in the failure, keyed by role."""
        return {}

    def to_info(self) -> ConversionErrorInfo:
        """Return a structured payload suitable for a ConversionResult."""
        return ConversionErrorInfo(code=self.code, message=str(self), detail=self.detail())


class NoConversionPossible(ConversionError):
    """No direct match and the target type is not Convertible."""

    code: ClassVar[str] = "NO_CONVERSION_POSSIBLE"

    def __init__(self, source: Any, target: Any) -> None:
        self.source = source
        self.target = target
        super().__init__(
            f'Cannot convert "{type_name(source)}": cast failed or '
            f'"{type_name(target)}" does not implement Convertible'
        )

    def detail(self) -> dict[str, Any]:
        return {"source": type_name(self.source), "target": type_name(self.target)}


class ConvertibleFailed(ConversionError):
    """The target type is Convertible but does not accept this source."""

    code: ClassVar[str] = "CONVERTIBLE_FAILED"

    def __init__(self, source: Any, target: Any) -> None:
        self.source = source
        self.target = target
        super().__init__(
            f'Convertible type "{type_name(target)}" does not support '
            f'conversion from "{type_name(source)}"'
        )

    def detail(self) -> dict[str, Any]:
        return {"source": type_name(self.source), "target": type_name(self.target)}


class SerializationFailed(ConversionError):
    """A value could not be produced as a serialized representation."""

    code: ClassVar[str] = "SERIALIZATION_FAILED"

    def __init__(self, type: Any, reason: str) -> None:  # noqa: A002
        self.type = type
        self.reason = reason
        super().__init__(f'Could not serialize type "{type_name(type)}". Reason: "{reason}"')

    def detail(self) -> dict[str, Any]:
        return {"type": type_name(self.type), "reason": self.reason}
