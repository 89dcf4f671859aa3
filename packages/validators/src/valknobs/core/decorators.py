"""Wrapper validators that change how another validator is called.

Each decorator holds the validator it wraps and intercepts the value before,
or the result after, delegating to it. Decorators stack: the outermost one
runs its check first.

```python
name = string().min_length(2).optional().default("anonymous")
name.validate(UNDEFINED).data  # 'anonymous'
```
"""

from __future__ import annotations

import copy
import inspect
import logging
from collections.abc import Callable
from typing import Any

from ..messages import translate
from ..results import (
    UNDEFINED,
    ValidationContext,
    ValidationResult,
    create_error,
)
from .pipeline import reject_awaitable
from .validator import Validator

logger = logging.getLogger(__name__)


def _transform_failure(error: Exception, context: ValidationContext) -> ValidationResult:
    message = str(error) or translate("common.transform", locale=context.locale)
    return ValidationResult.fail(
        [create_error("common.transform", message, context.path, context.field)]
    )


class ValidatorDecorator(Validator):
    """Base for decorators; reports the wrapped validator's type."""

    def __init__(self, wrapped: Validator):
        self.wrapped = wrapped

    @property
    def type_name(self) -> str:  # type: ignore[override]
        return self.wrapped.type_name

    @property
    def is_async(self) -> bool:
        return self.wrapped.is_async

    def describe(self) -> dict[str, Any]:
        return self.wrapped.describe()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.wrapped!r})"


class OptionalValidator(ValidatorDecorator):
    """``UNDEFINED`` succeeds as ``UNDEFINED``; anything else is delegated."""

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        if value is UNDEFINED:
            return ValidationResult.ok(UNDEFINED)
        return self.wrapped.validate(value, context)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        if value is UNDEFINED:
            return ValidationResult.ok(UNDEFINED)
        return await self.wrapped.validate_async(value, context)

    def describe(self) -> dict[str, Any]:
        return {**self.wrapped.describe(), "optional": True}


class NullableValidator(ValidatorDecorator):
    """``None`` succeeds as ``None``; anything else is delegated."""

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        if value is None:
            return ValidationResult.ok(None)
        return self.wrapped.validate(value, context)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        if value is None:
            return ValidationResult.ok(None)
        return await self.wrapped.validate_async(value, context)

    def describe(self) -> dict[str, Any]:
        return {**self.wrapped.describe(), "nullable": True}


class DefaultValidator(ValidatorDecorator):
    """Missing or ``None`` input becomes the default, without validating it.

    Mutable defaults are copied per call so callers never share one list or
    dict through their results.
    """

    def __init__(self, wrapped: Validator, default_value: Any):
        super().__init__(wrapped)
        self.default_value = default_value

    def _default(self) -> Any:
        return copy.deepcopy(self.default_value)

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        if value is UNDEFINED or value is None:
            return ValidationResult.ok(self._default())
        return self.wrapped.validate(value, context)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        if value is UNDEFINED or value is None:
            return ValidationResult.ok(self._default())
        return await self.wrapped.validate_async(value, context)

    def describe(self) -> dict[str, Any]:
        return {**self.wrapped.describe(), "default": self.default_value}


class TransformValidator(ValidatorDecorator):
    """Maps successful output through a function.

    Failures and ``UNDEFINED`` output pass through untouched. An exception
    raised by the function becomes a ``common.transform`` error carrying the
    exception text.
    """

    def __init__(self, wrapped: Validator, fn: Callable[[Any], Any]):
        super().__init__(wrapped)
        self.fn = fn

    @property
    def is_async(self) -> bool:
        return self.wrapped.is_async or inspect.iscoroutinefunction(self.fn)

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        result = self.wrapped.validate(value, ctx)
        if not result.success or result.data is UNDEFINED:
            return result
        try:
            transformed = self.fn(result.data)
        except Exception as e:
            logger.debug("Transform raised at %s: %s", ctx.path, e)
            return _transform_failure(e, ctx)
        if inspect.isawaitable(transformed):
            return reject_awaitable(transformed, ctx)
        return ValidationResult.ok(transformed)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        result = await self.wrapped.validate_async(value, ctx)
        if not result.success or result.data is UNDEFINED:
            return result
        try:
            transformed = self.fn(result.data)
            if inspect.isawaitable(transformed):
                transformed = await transformed
        except Exception as e:
            logger.debug("Transform raised at %s: %s", ctx.path, e)
            return _transform_failure(e, ctx)
        return ValidationResult.ok(transformed)


class MessageValidator(ValidatorDecorator):
    """Rewrites every error message, keeping code, path and field."""

    def __init__(self, wrapped: Validator, message: str):
        super().__init__(wrapped)
        self.message = message

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        return self.wrapped.validate(value, context).with_message(self.message)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        result = await self.wrapped.validate_async(value, context)
        return result.with_message(self.message)


class PreprocessValidator(ValidatorDecorator):
    """Maps the input through a function before delegating.

    Used to accept a different input shape than the wrapped validator
    expects, e.g. splitting a comma separated string before an array check.
    """

    def __init__(self, wrapped: Validator, fn: Callable[[Any], Any]):
        super().__init__(wrapped)
        self.fn = fn

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        try:
            prepared = self.fn(value)
        except Exception as e:
            logger.debug("Preprocess raised at %s: %s", ctx.path, e)
            return _transform_failure(e, ctx)
        return self.wrapped.validate(prepared, ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        try:
            prepared = self.fn(value)
        except Exception as e:
            logger.debug("Preprocess raised at %s: %s", ctx.path, e)
            return _transform_failure(e, ctx)
        return await self.wrapped.validate_async(prepared, ctx)


def optional(validator: Validator) -> OptionalValidator:
    return OptionalValidator(validator)


def nullable(validator: Validator) -> NullableValidator:
    return NullableValidator(validator)


def nullish(validator: Validator) -> NullableValidator:
    return NullableValidator(OptionalValidator(validator))
