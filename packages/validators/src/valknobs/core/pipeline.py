"""Chain-of-responsibility pipeline that runs strategies in order.

Each link runs its strategy and hands the (possibly transformed) value to the
next link only when the strategy succeeded. The first failure ends the chain
and is returned as is; errors are never aggregated inside one pipeline.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any

from ..messages import translate
from ..results import (
    UNDEFINED,
    ValidationContext,
    ValidationResult,
    create_error,
)
from .strategy import Strategy, StrategyKind

logger = logging.getLogger(__name__)


def forward_value(result: ValidationResult, value: Any) -> Any:
    """Value passed on after a successful step.

    A step that succeeded without producing data (``None`` or ``UNDEFINED``)
    passes the value it was given.
    """
    data = result.data
    return value if data is None or data is UNDEFINED else data


def reject_awaitable(outcome: Any, context: ValidationContext) -> ValidationResult:
    """Failure for an awaitable reached on the synchronous path.

    The awaitable is closed so it does not warn about never being awaited.
    """
    close = getattr(outcome, "close", None)
    if callable(close):
        close()
    return ValidationResult.fail(
        [
            create_error(
                "common.asyncRequired",
                translate("common.asyncRequired", locale=context.locale),
                context.path,
                context.field,
            )
        ]
    )


class StrategyHandler:
    """One link of the chain."""

    def __init__(self, strategy: Strategy):
        self.strategy = strategy
        self.next: StrategyHandler | None = None

    def set_next(self, handler: StrategyHandler) -> StrategyHandler:
        self.next = handler
        return handler

    def handle(self, value: Any, context: ValidationContext) -> ValidationResult:
        outcome = self.strategy.validate(value, context)
        if inspect.isawaitable(outcome):
            logger.debug(
                "Strategy '%s' returned an awaitable on the sync path", self.strategy.name
            )
            return reject_awaitable(outcome, context)

        if not outcome.success:
            logger.debug(
                "Pipeline stopped at strategy '%s' with %d error(s)",
                self.strategy.name, len(outcome.errors),
            )
            return outcome
        if self.next is None:
            return outcome
        return self.next.handle(forward_value(outcome, value), context)

    async def handle_async(self, value: Any, context: ValidationContext) -> ValidationResult:
        outcome = await self.strategy.validate_async(value, context)
        if not outcome.success:
            logger.debug(
                "Pipeline stopped at strategy '%s' with %d error(s)",
                self.strategy.name, len(outcome.errors),
            )
            return outcome
        if self.next is None:
            return outcome
        return await self.next.handle_async(forward_value(outcome, value), context)


class ValidationPipeline:
    """Ordered, short-circuiting sequence of strategies.

    Example:
        ```python
        pipeline = ValidationPipeline()
        pipeline.add_strategy(MinLengthStrategy(2)).add_strategy(TrimStrategy())
        result = pipeline.execute("  jo ", ValidationContext.root())
        ```
    """

    def __init__(self) -> None:
        self._handlers: list[StrategyHandler] = []

    def add_handler(self, handler: StrategyHandler) -> ValidationPipeline:
        """Append a link, wiring the previous tail to it."""
        if self._handlers:
            self._handlers[-1].set_next(handler)
        self._handlers.append(handler)
        return self

    def add_strategy(self, strategy: Strategy) -> ValidationPipeline:
        return self.add_handler(StrategyHandler(strategy))

    @classmethod
    def from_strategies(cls, strategies: list[Strategy]) -> ValidationPipeline:
        pipeline = cls()
        for item in strategies:
            pipeline.add_strategy(item)
        return pipeline

    @property
    def strategies(self) -> list[Strategy]:
        return [handler.strategy for handler in self._handlers]

    def execute(self, value: Any, context: ValidationContext) -> ValidationResult:
        """Run the chain; an empty pipeline succeeds with ``value`` unchanged."""
        if not self._handlers:
            return ValidationResult.ok(value)
        if any(h.strategy.kind is StrategyKind.ASYNC for h in self._handlers):
            # Refuse before anything runs rather than part way through
            logger.debug("Sync execution of a pipeline holding async strategies")
            return reject_awaitable(None, context)
        return self._handlers[0].handle(value, context)

    async def execute_async(self, value: Any, context: ValidationContext) -> ValidationResult:
        """Run the chain, awaiting each strategy."""
        if not self._handlers:
            return ValidationResult.ok(value)
        return await self._handlers[0].handle_async(value, context)

    def clear(self) -> None:
        self._handlers = []

    def __len__(self) -> int:
        return len(self._handlers)
