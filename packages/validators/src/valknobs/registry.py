"""Registry of named validator factories.

A registry maps a type name (``"string"``, ``"email"``, ``"username"``) to a
zero-argument factory that builds a fresh validator. It is an explicit value:
create one, fill it and hand it to whatever builds schemas. A process-wide
registry exists only between :func:`init_default_registry` and
:func:`reset_default_registry`.

Example:
    ```python
    registry = ValidatorRegistry()
    register_builtins(registry)
    registry.register("username", lambda: string().min_length(3).alphanumeric(),
                      description="Login name")
    registry.create("username").validate("jo").success
    # False
    ```
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from valknobs_common.exceptions import OperationError
from valknobs_common.registry import Registry

from .core.validator import Validator
from .validators import (
    any_,
    array,
    boolean,
    business,
    date_,
    never,
    none,
    number,
    object_,
    string,
    undefined,
    unknown,
)

logger = logging.getLogger(__name__)

ValidatorFactory = Callable[[], Validator]


class ValidatorRegistry(Registry[ValidatorFactory]):
    """Named validator factories.

    Registering a name twice raises ``OperationError`` unless
    ``allow_overwrite`` is set.
    """

    def __init__(self, name: str = "validators"):
        super().__init__(name, enable_metrics=True)

    def register(  # type: ignore[override]
        self,
        key: str,
        item: ValidatorFactory,
        description: str | None = None,
        *,
        metadata: dict[str, Any] | None = None,
        allow_overwrite: bool = False,
    ) -> None:
        """Register a factory.

        Args:
            key: Type name used by :meth:`create` and schema configs
            item: Zero-argument callable returning a new validator
            description: Human readable description
            metadata: Extra metadata stored with the registration
            allow_overwrite: Replace an existing registration instead of failing

        Raises:
            OperationError: If ``key`` is taken and ``allow_overwrite`` is False
        """
        if not callable(item):
            raise OperationError(
                f"Validator factory for '{key}' is not callable",
                context={"key": key, "registry": self.name},
            )
        super().register(
            key,
            item,
            metadata={**(metadata or {}), "description": description},
            allow_overwrite=allow_overwrite,
        )

    def create(self, key: str) -> Validator | None:
        """Build a new validator for ``key``, or None when it is not registered."""
        factory = self.get_optional(key)
        if factory is None:
            return None
        return factory()

    def describe(self, key: str) -> str | None:
        return self.get_metrics(key).get("metadata", {}).get("description")

    def list(self) -> list[str]:
        """Registered names, in registration order."""
        return self.list_keys()


BUILTIN_FACTORIES: dict[str, tuple[ValidatorFactory, str]] = {
    "string": (string, "Text"),
    "number": (number, "Integer or floating point number"),
    "boolean": (boolean, "True or False"),
    "business": (business, "Card number, IBAN, phone, SSN or URL slug"),
    "date": (date_, "Date or datetime"),
    "array": (array, "List of items"),
    "object": (object_, "Mapping with a fixed set of fields"),
    "any": (any_, "Any value"),
    "unknown": (unknown, "Any value, to be narrowed later"),
    "never": (never, "No value"),
    "null": (none, "None"),
    "undefined": (undefined, "A missing value"),
}


def register_builtins(registry: ValidatorRegistry, allow_overwrite: bool = False) -> ValidatorRegistry:
    """Register the built-in type names on ``registry``."""
    for key, (factory, description) in BUILTIN_FACTORIES.items():
        registry.register(key, factory, description, allow_overwrite=allow_overwrite)
    return registry


_default_registry: ValidatorRegistry | None = None
_default_lock = threading.Lock()


def init_default_registry(with_builtins: bool = True) -> ValidatorRegistry:
    """Create the process-wide registry if needed and return it."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            registry = ValidatorRegistry("default")
            if with_builtins:
                register_builtins(registry)
            _default_registry = registry
            logger.info("Initialized default validator registry (%d types)", registry.count())
        return _default_registry


def default_registry() -> ValidatorRegistry:
    """The process-wide registry.

    Raises:
        OperationError: If :func:`init_default_registry` has not been called
    """
    with _default_lock:
        if _default_registry is None:
            raise OperationError(
                "Default validator registry is not initialized; call init_default_registry()"
            )
        return _default_registry


def reset_default_registry() -> None:
    """Drop the process-wide registry."""
    global _default_registry
    with _default_lock:
        _default_registry = None
