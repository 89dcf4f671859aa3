"""String validator and its strategies."""

from __future__ import annotations

import re
from re import Pattern
from typing import Any

from valknobs_common.exceptions import SchemaError

from ..core.strategy import Strategy
from ..results import ValidationContext, ValidationResult
from .base import BaseValidator
from .common import TransformStrategy

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_RE = re.compile(r"^https?://[^\s/$.?#].[^\s]*$", re.IGNORECASE)
UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
ALPHA_RE = re.compile(r"^[a-zA-Z]+$")
ALPHANUMERIC_RE = re.compile(r"^[a-zA-Z0-9]+$")
NUMERIC_RE = re.compile(r"^-?\d*\.?\d+$", re.ASCII)


def _check_length(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise SchemaError(
            f"{name} must be a non-negative integer", context={name: value}
        )


class PatternStrategy(Strategy):
    """Fails with ``code`` unless the whole string matches ``pattern``."""

    def __init__(self, pattern: str | Pattern[str], code: str = "string.pattern",
                 name: str = "pattern"):
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.code = code
        self.name = name

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if not self.pattern.search(value):
            return self.failure(self.code, context)
        return self.success(value)


class MinLengthStrategy(Strategy):
    name = "minLength"

    def __init__(self, minimum: int):
        _check_length("min", minimum)
        self.minimum = minimum

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if len(value) < self.minimum:
            return self.failure(
                "string.minLength", context, {"min": self.minimum, "actual": len(value)}
            )
        return self.success(value)


class MaxLengthStrategy(Strategy):
    name = "maxLength"

    def __init__(self, maximum: int):
        _check_length("max", maximum)
        self.maximum = maximum

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if len(value) > self.maximum:
            return self.failure(
                "string.maxLength", context, {"max": self.maximum, "actual": len(value)}
            )
        return self.success(value)


class LengthStrategy(Strategy):
    name = "length"

    def __init__(self, length: int):
        _check_length("length", length)
        self.length = length

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if len(value) != self.length:
            return self.failure(
                "string.length", context, {"length": self.length, "actual": len(value)}
            )
        return self.success(value)


class StartsWithStrategy(Strategy):
    name = "startsWith"

    def __init__(self, prefix: str):
        self.prefix = prefix

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if not value.startswith(self.prefix):
            return self.failure("string.startsWith", context, {"prefix": self.prefix})
        return self.success(value)


class EndsWithStrategy(Strategy):
    name = "endsWith"

    def __init__(self, suffix: str):
        self.suffix = suffix

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if not value.endswith(self.suffix):
            return self.failure("string.endsWith", context, {"suffix": self.suffix})
        return self.success(value)


class ContainsStrategy(Strategy):
    name = "contains"

    def __init__(self, substring: str):
        self.substring = substring

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if self.substring not in value:
            return self.failure("string.contains", context, {"substring": self.substring})
        return self.success(value)


class LowercaseStrategy(Strategy):
    name = "lowercase"

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if value != value.lower():
            return self.failure("string.lowercase", context)
        return self.success(value)


class UppercaseStrategy(Strategy):
    name = "uppercase"

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if value != value.upper():
            return self.failure("string.uppercase", context)
        return self.success(value)


class NotEmptyStrategy(Strategy):
    name = "notEmpty"

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if not value.strip():
            return self.failure("string.notEmpty", context)
        return self.success(value)


class StringValidator(BaseValidator):
    """Validates ``str`` values.

    Rule methods accept an optional ``message`` that replaces the catalog
    message for that rule only.
    """

    type_name = "string"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not isinstance(value, str):
            return self.type_error(context)
        return ValidationResult.ok(value)

    # Formats

    def email(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(PatternStrategy(EMAIL_RE, "string.email", "email"), message)

    def url(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(PatternStrategy(URL_RE, "string.url", "url"), message)

    def uuid(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(PatternStrategy(UUID_RE, "string.uuid", "uuid"), message)

    # Length

    def min_length(self, minimum: int, message: str | None = None) -> StringValidator:
        return self._add_strategy(MinLengthStrategy(minimum), message)

    def min(self, minimum: int, message: str | None = None) -> StringValidator:
        return self.min_length(minimum, message)

    def max_length(self, maximum: int, message: str | None = None) -> StringValidator:
        return self._add_strategy(MaxLengthStrategy(maximum), message)

    def max(self, maximum: int, message: str | None = None) -> StringValidator:
        return self.max_length(maximum, message)

    def length(self, length: int, message: str | None = None) -> StringValidator:
        return self._add_strategy(LengthStrategy(length), message)

    # Patterns

    def matches(self, pattern: str | Pattern[str], message: str | None = None) -> StringValidator:
        return self._add_strategy(PatternStrategy(pattern), message)

    def pattern(self, pattern: str | Pattern[str], message: str | None = None) -> StringValidator:
        return self.matches(pattern, message)

    def regex(self, pattern: str | Pattern[str], message: str | None = None) -> StringValidator:
        return self.matches(pattern, message)

    # Content

    def starts_with(self, prefix: str, message: str | None = None) -> StringValidator:
        return self._add_strategy(StartsWithStrategy(prefix), message)

    def ends_with(self, suffix: str, message: str | None = None) -> StringValidator:
        return self._add_strategy(EndsWithStrategy(suffix), message)

    def contains(self, substring: str, message: str | None = None) -> StringValidator:
        return self._add_strategy(ContainsStrategy(substring), message)

    def includes(self, substring: str, message: str | None = None) -> StringValidator:
        return self.contains(substring, message)

    # Character sets

    def alpha(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(PatternStrategy(ALPHA_RE, "string.alpha", "alpha"), message)

    def alphanumeric(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(
            PatternStrategy(ALPHANUMERIC_RE, "string.alphanumeric", "alphanumeric"), message
        )

    def numeric(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(
            PatternStrategy(NUMERIC_RE, "string.numeric", "numeric"), message
        )

    def lowercase(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(LowercaseStrategy(), message)

    def uppercase(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(UppercaseStrategy(), message)

    def not_empty(self, message: str | None = None) -> StringValidator:
        return self._add_strategy(NotEmptyStrategy(), message)

    # Transformers (run in pipeline order, so later rules see the new value)

    def trim(self) -> StringValidator:
        return self._add_strategy(TransformStrategy(str.strip, "trim"))

    def to_lower_case(self) -> StringValidator:
        return self._add_strategy(TransformStrategy(str.lower, "toLowerCase"))

    def to_upper_case(self) -> StringValidator:
        return self._add_strategy(TransformStrategy(str.upper, "toUpperCase"))


def string() -> StringValidator:
    """Create a string validator."""
    return StringValidator()
