"""Pluggy hook specifications for dson.

A single setup-time hook lets plugins contribute Convertible adapters for
types they own.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from dson.convertible import ConvertibleAdapter

PROJECT_NAME = "dson"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class DsonHookSpec:
    """Hook specifications for the dson plugin system."""

    @hookspec
    def register_convertibles(self) -> dict[type, ConvertibleAdapter] | None:
        """Return type -> adapter pairs to add to CONVERTIBLE_REGISTRY."""
