"""Boolean validator."""

from __future__ import annotations

from typing import Any

from ..core.strategy import Strategy
from ..results import ValidationContext, ValidationResult
from .base import BaseValidator


class IsTrueStrategy(Strategy):
    name = "isTrue"

    def validate(self, value: bool, context: ValidationContext) -> ValidationResult:
        if value is not True:
            return self.failure("boolean.isTrue", context)
        return self.success(value)


class IsFalseStrategy(Strategy):
    name = "isFalse"

    def validate(self, value: bool, context: ValidationContext) -> ValidationResult:
        if value is not False:
            return self.failure("boolean.isFalse", context)
        return self.success(value)


class BooleanValidator(BaseValidator):
    type_name = "boolean"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not isinstance(value, bool):
            return self.type_error(context)
        return ValidationResult.ok(value)

    def is_true(self, message: str | None = None) -> BooleanValidator:
        """Must be ``True`` (accepting terms, consent boxes)."""
        return self._add_strategy(IsTrueStrategy(), message)

    def is_false(self, message: str | None = None) -> BooleanValidator:
        return self._add_strategy(IsFalseStrategy(), message)


def boolean() -> BooleanValidator:
    """Create a boolean validator."""
    return BooleanValidator()
