"""Strategy abstraction.

A strategy is one named rule: it takes a value and a context and returns a
``ValidationResult``. Validators hold an ordered list of strategies and run
them through a :class:`~valknobs.core.pipeline.ValidationPipeline`.
"""

from __future__ import annotations

import copy
import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any, Union

from ..messages import translate
from ..results import (
    ValidationContext,
    ValidationResult,
    create_error,
)

StrategyOutcome = Union[ValidationResult, Awaitable[ValidationResult]]


class StrategyKind(Enum):
    """What the async coordinator should do with a strategy."""

    RULE = "rule"
    """Ordinary rule, run as a pipeline member."""

    ASYNC = "async"
    """Awaitable rule, run as a pipeline member on the async path only."""

    DEBOUNCE = "debounce"
    """Meta strategy: delays and coalesces calls."""

    TIMEOUT = "timeout"
    """Meta strategy: races the validation body against a deadline."""

    RETRY = "retry"
    """Meta strategy: re-runs the validation body while it fails."""

    @property
    def is_meta(self) -> bool:
        return self in (StrategyKind.DEBOUNCE, StrategyKind.TIMEOUT, StrategyKind.RETRY)


class Strategy(ABC):
    """Base class for validation rules.

    Subclasses set ``name`` and implement :meth:`validate`. Failures should go
    through :meth:`failure`, which renders the catalog message for the
    error code (or the custom message set by :meth:`with_message`).
    """

    name: str = "strategy"
    kind: StrategyKind = StrategyKind.RULE

    custom_message: str | None = None

    @abstractmethod
    def validate(self, value: Any, context: ValidationContext) -> StrategyOutcome:
        """Validate a value.

        Args:
            value: Value produced by the previous strategy
            context: Context of the value being validated

        Returns:
            ValidationResult, or an awaitable of one for async strategies
        """

    async def validate_async(self, value: Any, context: ValidationContext) -> ValidationResult:
        """Async form of :meth:`validate`; awaits the outcome when needed."""
        result = self.validate(value, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    @property
    def is_async(self) -> bool:
        """True when this strategy can only run on the async path."""
        return self.kind is StrategyKind.ASYNC

    def with_message(self, message: str) -> Strategy:
        """Copy of this strategy that reports ``message`` for every failure."""
        clone = copy.copy(self)
        clone.custom_message = message
        return clone

    def success(self, value: Any) -> ValidationResult:
        return ValidationResult.ok(value)

    def failure(
        self,
        code: str,
        context: ValidationContext,
        params: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        message = self.custom_message
        if message is None:
            message = translate(code, params, context.locale)
        return ValidationResult.fail(
            [create_error(code, message, context.path, context.field, params)]
        )

    def describe(self) -> dict[str, Any]:
        return {"name": self.name, "kind": self.kind.value}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionStrategy(Strategy):
    """Adapts a plain callable ``fn(value, context) -> ValidationResult``.

    Coroutine functions are tagged ``ASYNC`` so the synchronous path can
    refuse them up front.
    """

    def __init__(
        self,
        fn: Callable[[Any, ValidationContext], StrategyOutcome],
        name: str | None = None,
    ):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "function")
        if inspect.iscoroutinefunction(fn):
            self.kind = StrategyKind.ASYNC

    def validate(self, value: Any, context: ValidationContext) -> StrategyOutcome:
        return self.fn(value, context)


def strategy(
    fn: Callable[[Any, ValidationContext], StrategyOutcome] | None = None,
    *,
    name: str | None = None,
) -> Any:
    """Turn a function into a :class:`FunctionStrategy`.

    Works both bare and with arguments:

    ```python
    @strategy
    def even(value, context):
        ...

    @strategy(name="username.available")
    async def available(value, context):
        ...
    ```
    """
    if fn is None:
        return lambda inner: FunctionStrategy(inner, name=name)
    return FunctionStrategy(fn, name=name)
