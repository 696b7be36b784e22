"""ConversionResult and ConversionErrorInfo: the non-raising contract.

``convert`` raises; ``try_convert`` wraps the same call in a
ConversionResult so callers at an interchange boundary can branch on
``ok`` and ship ``error`` as structured data.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ConversionErrorInfo(BaseModel):
    """Structured error payload within a ConversionResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ConversionResult(BaseModel):
    """Outcome of a single conversion.

    Attributes:
        ok: Whether the conversion succeeded.
        target: Readable name of the requested target type.
        value: The converted value on success, ``None`` otherwise.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    ok: bool
    target: str
    value: Any = None
    error: ConversionErrorInfo | None = None
