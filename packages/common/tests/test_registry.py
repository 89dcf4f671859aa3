"""Tests for the registry pattern."""

from dataclasses import dataclass
from threading import Thread

import pytest

from valknobs_common.exceptions import NotFoundError, OperationError
from valknobs_common.registry import Registry


@dataclass
class Factory:
    """Test item class."""
    name: str
    description: str


class TestRegistry:
    """Test basic Registry functionality."""

    def test_create_registry(self):
        """Test creating a registry."""
        registry = Registry[str]("test_registry")
        assert registry.name == "test_registry"
        assert registry.count() == 0

    def test_register_item(self):
        """Test registering an item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        assert registry.count() == 1
        assert registry.has("key1")
        assert registry.get("key1") == "value1"

    def test_register_with_metadata(self):
        """Test registering with metadata."""
        registry = Registry[Factory]("factories", enable_metrics=True)
        registry.register("email", Factory("email", "Email address"), metadata={"version": "1.0"})

        metrics = registry.get_metrics("email")
        assert "registered_at" in metrics
        assert metrics["metadata"]["version"] == "1.0"

    def test_metrics_disabled_by_default(self):
        """Test that metrics are empty unless enabled."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")
        assert registry.get_metrics() == {}

    def test_register_duplicate_raises_error(self):
        """Test that registering duplicate key raises error."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        with pytest.raises(OperationError) as exc_info:
            registry.register("key1", "value2")

        assert "already registered" in str(exc_info.value)
        assert exc_info.value.context["key"] == "key1"

    def test_register_duplicate_with_overwrite(self):
        """Test overwriting existing item."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")
        registry.register("key1", "value2", allow_overwrite=True)

        assert registry.get("key1") == "value2"

    def test_get_nonexistent_raises_error(self):
        """Test getting non-existent item raises error."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        with pytest.raises(NotFoundError) as exc_info:
            registry.get("nonexistent")

        error = exc_info.value
        assert "not found" in str(error).lower()
        assert error.context["available_keys"] == ["key1"]

    def test_get_optional(self):
        """Test getting item with optional return."""
        registry = Registry[str]("test")
        registry.register("key1", "value1")

        assert registry.get_optional("key1") == "value1"
        assert registry.get_optional("nonexistent") is None

    def test_list_keys_in_registration_order(self):
        """Test listing keys keeps registration order."""
        registry = Registry[str]("test")
        for key in ("b", "a", "c"):
            registry.register(key, key.upper())

        assert registry.list_keys() == ["b", "a", "c"]

    def test_metrics_for_unknown_key(self):
        """Test metrics lookup for a key that was never registered."""
        registry = Registry[str]("test", enable_metrics=True)
        registry.register("key1", "value1")

        assert registry.get_metrics("missing") == {}
        assert list(registry.get_metrics()) == ["key1"]

    def test_registries_are_independent(self):
        """Test that two registries never share state."""
        first = Registry[str]("first")
        second = Registry[str]("second")
        first.register("key1", "value1")

        assert not second.has("key1")


class TestRegistryThreadSafety:
    """Test concurrent access."""

    def test_concurrent_registration(self):
        """Test registering from many threads."""
        registry = Registry[int]("test")

        def register_range(start):
            for i in range(start, start + 100):
                registry.register(f"key{i}", i)

        threads = [Thread(target=register_range, args=(n * 100,)) for n in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.count() == 500
