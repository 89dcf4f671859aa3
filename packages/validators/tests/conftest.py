"""Shared fixtures for the valknobs tests."""

import pytest

from valknobs.registry import ValidatorRegistry, register_builtins, reset_default_registry


@pytest.fixture
def registry():
    """A registry holding only the built-in types."""
    return register_builtins(ValidatorRegistry("test"))


@pytest.fixture(autouse=True)
def clean_default_registry():
    """Never leak the process-wide registry between tests."""
    reset_default_registry()
    yield
    reset_default_registry()
