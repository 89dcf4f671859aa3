"""Strategies available on every typed validator."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from ..core.pipeline import reject_awaitable
from ..core.strategy import Strategy, StrategyKind
from ..results import ValidationContext, ValidationResult, create_error, is_nil

logger = logging.getLogger(__name__)


class RequiredStrategy(Strategy):
    """Rejects ``None``/``UNDEFINED`` and whitespace-only strings."""

    name = "required"

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if is_nil(value):
            return self.failure("common.required", context)
        if isinstance(value, str) and not value.strip():
            return self.failure("string.required", context)
        return self.success(value)


class CustomStrategy(Strategy):
    """Runs a user predicate; a falsy return fails with ``code``.

    A predicate that raises fails with the same code and the exception text.
    Coroutine predicates are only run on the async path.

    Args:
        predicate: ``predicate(value, context)`` or, with ``pass_context=False``,
            ``predicate(value)``
        message: Message reported when the predicate returns a falsy value
        code: Error code to report
        pass_context: Whether the predicate takes the context as well
    """

    name = "custom"

    def __init__(
        self,
        predicate: Callable[..., Any],
        message: str,
        code: str = "common.custom",
        pass_context: bool = True,
    ):
        self.predicate = predicate
        self.message = message
        self.code = code
        self.pass_context = pass_context
        if inspect.iscoroutinefunction(predicate):
            self.kind = StrategyKind.ASYNC

    def _call(self, value: Any, context: ValidationContext) -> Any:
        if self.pass_context:
            return self.predicate(value, context)
        return self.predicate(value)

    def _error(self, message: str, context: ValidationContext) -> ValidationResult:
        return ValidationResult.fail(
            [create_error(self.code, message, context.path, context.field)]
        )

    def _finish(self, passed: Any, value: Any, context: ValidationContext) -> ValidationResult:
        if not passed:
            return self._error(self.custom_message or self.message, context)
        return self.success(value)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        try:
            outcome = self._call(value, context)
        except Exception as e:
            logger.debug("Custom predicate raised at %s: %s", context.path, e)
            return self._error(str(e) or self.message, context)
        if inspect.isawaitable(outcome):
            return reject_awaitable(outcome, context)
        return self._finish(outcome, value, context)

    async def validate_async(self, value: Any, context: ValidationContext) -> ValidationResult:
        try:
            outcome = self._call(value, context)
            if inspect.isawaitable(outcome):
                outcome = await outcome
        except Exception as e:
            logger.debug("Custom predicate raised at %s: %s", context.path, e)
            return self._error(str(e) or self.message, context)
        return self._finish(outcome, value, context)


class TransformStrategy(Strategy):
    """Maps the value in place inside the pipeline (``trim``, ``to_lower_case``)."""

    def __init__(self, fn: Callable[[Any], Any], name: str = "transform"):
        self.fn = fn
        self.name = name

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        try:
            return self.success(self.fn(value))
        except Exception as e:
            return ValidationResult.fail(
                [create_error("common.transform", str(e), context.path, context.field)]
            )
