"""Coercing validators.

Each one converts its input before the usual rules run, so all the rules of
the plain validator stay available:

```python
from valknobs import coerce

coerce.number().integer().min(1).validate("42").data  # 42
coerce.date().past().validate("2001-02-03").data       # date(2001, 2, 3)
```
"""

from __future__ import annotations

import math
from typing import Any

from ..results import ValidationContext, ValidationResult, is_nil
from .boolean import BooleanValidator
from .date import DateValidator, parse_date
from .number import NumberValidator, is_number
from .string import StringValidator


class CoerceStringValidator(StringValidator):
    """``str(value)`` for anything but a missing value."""

    type_name = "string"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if is_nil(value):
            return self.type_error(context)
        return ValidationResult.ok(value if isinstance(value, str) else str(value))


def _to_number(value: Any) -> Any:
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    raise TypeError(f"cannot convert {type(value).__name__} to a number")


class CoerceNumberValidator(NumberValidator):
    """Accepts numbers, numeric strings and booleans."""

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        try:
            number = _to_number(value)
        except (TypeError, ValueError):
            return self.fail("coerce.number", context)
        if isinstance(number, float) and math.isnan(number):
            return self.fail("coerce.number", context)
        return ValidationResult.ok(number)


class CoerceBooleanValidator(BooleanValidator):
    """Truthiness of the input."""

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        return ValidationResult.ok(bool(value))


class CoerceDateValidator(DateValidator):
    """Accepts dates, ISO 8601 strings and POSIX timestamps."""

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        parsed = parse_date(value)
        if parsed is None:
            return self.fail("coerce.date", context)
        return ValidationResult.ok(parsed)


def string() -> CoerceStringValidator:
    return CoerceStringValidator()


def number() -> CoerceNumberValidator:
    return CoerceNumberValidator()


def boolean() -> CoerceBooleanValidator:
    return CoerceBooleanValidator()


def date() -> CoerceDateValidator:
    return CoerceDateValidator()
