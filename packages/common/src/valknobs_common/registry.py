"""Generic registry for managing named items.

The registry is an explicit value: callers create one and pass it to whatever
needs it. There is no hidden module-level instance, so two registries never
share state and tests can build a fresh one per case.

Example:
    ```python
    from valknobs_common.registry import Registry

    registry = Registry[Callable[[], Validator]]("validators")
    registry.register("email", lambda: string().email())
    validator = registry.get("email")()
    ```
"""

import threading
import time
from typing import Any, Dict, Generic, List, TypeVar

from valknobs_common.exceptions import NotFoundError, OperationError

T = TypeVar("T")


class Registry(Generic[T]):
    """Thread-safe mapping of unique names to items, in registration order.

    Registering a taken name raises unless ``allow_overwrite`` is passed.
    With ``enable_metrics`` each entry also records when it was registered
    and the metadata it was registered with.

    Example:
        ```python
        registry = Registry[str]("codes", enable_metrics=True)
        registry.register("a", "first", metadata={"owner": "core"})
        registry.get_metrics("a")["metadata"]
        # {'owner': 'core'}
        ```
    """

    def __init__(self, name: str, enable_metrics: bool = False):
        self._name = name
        self._items: Dict[str, T] = {}
        self._lock = threading.RLock()
        self._metrics: Dict[str, Dict[str, Any]] | None = {} if enable_metrics else None

    @property
    def name(self) -> str:
        return self._name

    def register(
        self,
        key: str,
        item: T,
        metadata: Dict[str, Any] | None = None,
        allow_overwrite: bool = False,
    ) -> None:
        """Add ``item`` under ``key``.

        Raises:
            OperationError: If ``key`` is taken and ``allow_overwrite`` is False
        """
        with self._lock:
            if key in self._items and not allow_overwrite:
                raise OperationError(
                    f"Item '{key}' already registered in {self._name}",
                    context={"key": key, "registry": self._name},
                )
            self._items[key] = item
            if self._metrics is not None:
                self._metrics[key] = {"registered_at": time.time(), "metadata": metadata or {}}

    def get(self, key: str) -> T:
        """Item registered under ``key``.

        Raises:
            NotFoundError: If nothing is registered under ``key``; the error
                context lists the names that are available
        """
        with self._lock:
            try:
                return self._items[key]
            except KeyError:
                raise NotFoundError(
                    f"Item not found: {key}",
                    context={
                        "key": key,
                        "registry": self._name,
                        "available_keys": list(self._items),
                    },
                ) from None

    def get_optional(self, key: str) -> T | None:
        with self._lock:
            return self._items.get(key)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._items

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def get_metrics(self, key: str | None = None) -> Dict[str, Any]:
        """Registration metrics for ``key``, or for every entry.

        Returns an empty dict when metrics are disabled or ``key`` is unknown.
        """
        with self._lock:
            if self._metrics is None:
                return {}
            if key is not None:
                return self._metrics.get(key, {})
            return dict(self._metrics)


__all__ = ["Registry"]
