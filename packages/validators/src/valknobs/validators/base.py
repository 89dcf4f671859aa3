"""Base class for strategy-driven validators."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from ..core.pipeline import ValidationPipeline
from ..core.strategy import Strategy
from ..core.validator import Validator
from ..messages import translate
from ..results import (
    UNDEFINED,
    ValidationContext,
    ValidationResult,
    create_error,
    is_nil,
)
from .common import CustomStrategy, RequiredStrategy

logger = logging.getLogger(__name__)

V = TypeVar("V", bound="BaseValidator")


class BaseValidator(Validator):
    """Validator built from an ordered list of strategies.

    A call runs in three steps:

    1. ``check_type`` narrows the input (``<type>.type`` on mismatch, or
       ``common.required`` for missing input when ``required()`` was used).
       Strategies never run when the type check fails.
    2. With no strategies the checked value is returned as is.
    3. Otherwise a fresh pipeline is built from the strategies and executed.

    Every fluent method returns a new validator; the receiver is never
    modified, so partially built validators can be shared and extended.

    Example:
        ```python
        username = string().min_length(3).max_length(20).alphanumeric()
        result = username.validate("jo")
        result.errors[0].code
        # 'string.minLength'
        ```
    """

    type_name = "any"

    def __init__(self) -> None:
        self._strategies: list[Strategy] = []
        self._required = False

    @property
    def strategies(self) -> tuple[Strategy, ...]:
        return tuple(self._strategies)

    @property
    def is_required(self) -> bool:
        return self._required

    def _clone(self: V) -> V:
        clone = copy.copy(self)
        clone._strategies = list(self._strategies)
        return clone

    def _add_strategy(self: V, strategy: Strategy, message: str | None = None) -> V:
        if message is not None:
            strategy = strategy.with_message(message)
        clone = self._clone()
        clone._strategies.append(strategy)
        return clone

    def use(self: V, strategy: Strategy, message: str | None = None) -> V:
        """Append an arbitrary strategy to the pipeline."""
        return self._add_strategy(strategy, message)

    def fail(
        self,
        code: str,
        context: ValidationContext,
        params: Mapping[str, Any] | None = None,
    ) -> ValidationResult:
        return ValidationResult.fail(
            [
                create_error(
                    code,
                    translate(code, params, context.locale),
                    context.path,
                    context.field,
                    params,
                )
            ]
        )

    def type_error(self, context: ValidationContext) -> ValidationResult:
        return self.fail(f"{self.type_name}.type", context)

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        """Narrow ``value`` to this validator's type. Accepts anything by default."""
        return ValidationResult.ok(value)

    def _check(self, value: Any, context: ValidationContext) -> ValidationResult:
        if self._required and is_nil(value):
            return self.fail("common.required", context)
        return self.check_type(value, context)

    def _pipeline_strategies(self) -> list[Strategy]:
        """Strategies to run, in order. Composites prepend their member checks."""
        return self._strategies

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        checked = self._check(value, ctx)
        if not checked.success:
            return checked
        strategies = self._pipeline_strategies()
        if not strategies:
            return ValidationResult.ok(checked.data)
        return ValidationPipeline.from_strategies(strategies).execute(checked.data, ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        checked = self._check(value, ctx)
        if not checked.success:
            return checked
        strategies = self._pipeline_strategies()
        if not strategies:
            return ValidationResult.ok(checked.data)
        pipeline = ValidationPipeline.from_strategies(strategies)
        return await pipeline.execute_async(checked.data, ctx)

    @property
    def is_async(self) -> bool:
        """True when some strategy can only run on the async path."""
        return any(s.is_async for s in self._pipeline_strategies())

    # Common rules

    def required(self: V, message: str | None = None) -> V:
        """Reject missing values (and whitespace-only strings)."""
        clone = self._add_strategy(RequiredStrategy(), message)
        clone._required = True
        return clone

    def custom(
        self: V,
        predicate: Callable[[Any, ValidationContext], Any],
        message: str,
        code: str = "common.custom",
    ) -> V:
        """Fail with ``code`` when ``predicate(value, context)`` is falsy."""
        return self._add_strategy(CustomStrategy(predicate, message, code))

    def refine(self: V, check: Callable[[Any], Any], message: str) -> V:
        """Fail with ``common.refine`` when ``check(value)`` is falsy."""
        return self._add_strategy(
            CustomStrategy(check, message, "common.refine", pass_context=False)
        )

    def describe(self) -> dict[str, Any]:
        return {
            "type": self.type_name,
            "strategies": [s.name for s in self._strategies],
            "required": self._required,
        }

    def __repr__(self) -> str:
        names = ", ".join(s.name for s in self._strategies)
        return f"{type(self).__name__}([{names}])"
