"""Shared pytest fixtures for dson tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from dson.convertible import CONVERTIBLE_REGISTRY
from dson.dispatch import Converter


@pytest.fixture
def converter() -> Converter:
    """Converter with default options."""
    return Converter()


@pytest.fixture
def sorted_converter() -> Converter:
    """Converter that emits mapping keys in sorted order."""
    return Converter(sort_keys=True)


@pytest.fixture
def restore_registry() -> Generator[None]:
    """Restore CONVERTIBLE_REGISTRY after a test that registers adapters."""
    original = CONVERTIBLE_REGISTRY.copy()
    try:
        yield
    finally:
        CONVERTIBLE_REGISTRY.clear()
        CONVERTIBLE_REGISTRY.update(original)
