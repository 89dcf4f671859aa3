"""Number validator and its strategies."""

from __future__ import annotations

import math
from decimal import Decimal
from numbers import Real
from typing import Any

from valknobs_common.exceptions import SchemaError

from ..core.strategy import Strategy
from ..results import ValidationContext, ValidationResult
from .base import BaseValidator

MAX_SAFE_INTEGER = 2**53 - 1

_MULTIPLE_TOLERANCE = 1e-9


def is_number(value: Any) -> bool:
    """Real numbers and ``Decimal``, excluding ``bool`` and NaN."""
    if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
        return False
    if isinstance(value, Decimal):
        return not value.is_nan()
    return not (isinstance(value, float) and math.isnan(value))


def is_integer(value: Any) -> bool:
    if isinstance(value, int):
        return True
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return isinstance(value, float) and value.is_integer()


class MinStrategy(Strategy):
    """Inclusive lower bound."""

    name = "min"

    def __init__(self, minimum: float):
        self.minimum = minimum

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if value < self.minimum:
            return self.failure("number.min", context, {"min": self.minimum, "actual": value})
        return self.success(value)


class MaxStrategy(Strategy):
    """Inclusive upper bound."""

    name = "max"

    def __init__(self, maximum: float):
        self.maximum = maximum

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if value > self.maximum:
            return self.failure("number.max", context, {"max": self.maximum, "actual": value})
        return self.success(value)


class IntegerStrategy(Strategy):
    name = "integer"

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if not is_integer(value):
            return self.failure("number.integer", context)
        return self.success(value)


class FiniteStrategy(Strategy):
    name = "finite"

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if not math.isfinite(value):
            return self.failure("number.finite", context)
        return self.success(value)


class SafeIntegerStrategy(Strategy):
    name = "safe"

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if not is_integer(value) or abs(value) > MAX_SAFE_INTEGER:
            return self.failure("number.safe", context)
        return self.success(value)


class SignStrategy(Strategy):
    """Sign checks: positive, negative, nonNegative, nonPositive."""

    _CHECKS = {
        "positive": lambda v: v > 0,
        "negative": lambda v: v < 0,
        "nonNegative": lambda v: v >= 0,
        "nonPositive": lambda v: v <= 0,
    }

    def __init__(self, name: str):
        if name not in self._CHECKS:
            raise SchemaError(f"Unknown sign check: {name}", context={"name": name})
        self.name = name

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if not self._CHECKS[self.name](value):
            return self.failure(f"number.{self.name}", context)
        return self.success(value)


class MultipleOfStrategy(Strategy):
    name = "multipleOf"

    def __init__(self, factor: float):
        if not is_number(factor) or factor == 0:
            raise SchemaError("multiple_of factor must be a non-zero number",
                              context={"factor": factor})
        self.factor = factor

    def validate(self, value: float, context: ValidationContext) -> ValidationResult:
        if isinstance(value, int) and isinstance(self.factor, int):
            ok = value % self.factor == 0
        else:
            remainder = abs(math.fmod(value, self.factor))
            ok = (
                remainder < _MULTIPLE_TOLERANCE
                or abs(remainder - abs(self.factor)) < _MULTIPLE_TOLERANCE
            )
        if not ok:
            return self.failure("number.multipleOf", context, {"factor": self.factor})
        return self.success(value)


class NumberValidator(BaseValidator):
    """Validates real numbers (``int``, ``float``, ``Decimal``, ``Fraction``).

    ``bool`` is rejected even though it subclasses ``int``, and so is NaN.
    """

    type_name = "number"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not is_number(value):
            return self.type_error(context)
        return ValidationResult.ok(value)

    def min(self, minimum: float, message: str | None = None) -> NumberValidator:
        return self._add_strategy(MinStrategy(minimum), message)

    def max(self, maximum: float, message: str | None = None) -> NumberValidator:
        return self._add_strategy(MaxStrategy(maximum), message)

    def range(self, minimum: float, maximum: float) -> NumberValidator:
        if minimum > maximum:
            raise SchemaError("range minimum exceeds maximum",
                              context={"min": minimum, "max": maximum})
        return self.min(minimum).max(maximum)

    def between(self, minimum: float, maximum: float) -> NumberValidator:
        return self.range(minimum, maximum)

    def integer(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(IntegerStrategy(), message)

    def int(self, message: str | None = None) -> NumberValidator:
        return self.integer(message)

    def finite(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(FiniteStrategy(), message)

    def safe(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(SafeIntegerStrategy(), message)

    def safe_integer(self, message: str | None = None) -> NumberValidator:
        return self.safe(message)

    def positive(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(SignStrategy("positive"), message)

    def negative(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(SignStrategy("negative"), message)

    def non_negative(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(SignStrategy("nonNegative"), message)

    def non_positive(self, message: str | None = None) -> NumberValidator:
        return self._add_strategy(SignStrategy("nonPositive"), message)

    def multiple_of(self, factor: float, message: str | None = None) -> NumberValidator:
        return self._add_strategy(MultipleOfStrategy(factor), message)

    def step(self, factor: float, message: str | None = None) -> NumberValidator:
        return self.multiple_of(factor, message)


def number() -> NumberValidator:
    """Create a number validator."""
    return NumberValidator()
