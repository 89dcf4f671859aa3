"""Comparison validator: equality, ordering, membership and cross-field checks.

Operands may be literal values or field references created with
:func:`ref`, which are resolved against the root value (``context.data``)
at validation time:

```python
signup = object_({
    "password": string().min_length(8),
    "confirm": compare().same_as("password"),
    "min_price": number(),
    "max_price": compare().greater_than(ref("min_price")),
})
```
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from ..core.strategy import Strategy
from ..paths import get_by_path
from ..results import UNDEFINED, ValidationContext, ValidationResult
from .base import BaseValidator
from .date import to_aware


@dataclass(frozen=True)
class FieldRef:
    """Pointer to another value in the validated tree (dotted path)."""

    path: str

    def resolve(self, context: ValidationContext) -> Any:
        return get_by_path(context.data, self.path)

    def __str__(self) -> str:
        return self.path


def ref(path: str) -> FieldRef:
    """Reference the value at ``path`` in the root data."""
    return FieldRef(path)


def as_field_ref(value: Any) -> Any:
    """Accept ``{"$ref": "a.b"}`` mappings as field references."""
    if isinstance(value, Mapping) and set(value) == {"$ref"} and isinstance(value["$ref"], str):
        return FieldRef(value["$ref"])
    return value


def resolve_operand(operand: Any, context: ValidationContext) -> Any:
    if isinstance(operand, FieldRef):
        return operand.resolve(context)
    return operand


def _comparable(value: Any) -> Any:
    if isinstance(value, date):
        return to_aware(value)
    return value


class EqualToStrategy(Strategy):
    name = "equalTo"

    def __init__(self, expected: Any):
        self.expected = as_field_ref(expected)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value != resolve_operand(self.expected, context):
            return self.failure("comparison.equalTo", context, {"expected": self.expected})
        return self.success(value)


class NotEqualToStrategy(Strategy):
    name = "notEqualTo"

    def __init__(self, expected: Any):
        self.expected = as_field_ref(expected)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value == resolve_operand(self.expected, context):
            return self.failure("comparison.notEqualTo", context, {"expected": self.expected})
        return self.success(value)


class OrderingStrategy(Strategy):
    """``value <op> operand`` for ordered types (numbers, dates, strings).

    Operands that cannot be compared with the value (missing references,
    mismatched types) fail the check.
    """

    _OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
        "greaterThan": operator.gt,
        "greaterThanOrEqual": operator.ge,
        "lessThan": operator.lt,
        "lessThanOrEqual": operator.le,
    }

    def __init__(self, name: str, operand: Any):
        self.name = name
        self.compare = self._OPERATORS[name]
        self.operand = as_field_ref(operand)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        other = resolve_operand(self.operand, context)
        try:
            passed = other is not UNDEFINED and self.compare(
                _comparable(value), _comparable(other)
            )
        except (TypeError, ArithmeticError):
            passed = False
        if not passed:
            return self.failure(f"comparison.{self.name}", context, {"expected": self.operand})
        return self.success(value)


class BetweenStrategy(Strategy):
    """Inclusive range check."""

    name = "between"

    def __init__(self, minimum: Any, maximum: Any):
        self.minimum = as_field_ref(minimum)
        self.maximum = as_field_ref(maximum)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        low = resolve_operand(self.minimum, context)
        high = resolve_operand(self.maximum, context)
        try:
            passed = (
                low is not UNDEFINED
                and high is not UNDEFINED
                and _comparable(low) <= _comparable(value) <= _comparable(high)
            )
        except (TypeError, ArithmeticError):
            passed = False
        if not passed:
            return self.failure(
                "comparison.between", context, {"min": self.minimum, "max": self.maximum}
            )
        return self.success(value)


class OneOfStrategy(Strategy):
    name = "oneOf"

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value not in self.values:
            return self.failure("comparison.oneOf", context, {"values": self.values})
        return self.success(value)


class NotOneOfStrategy(Strategy):
    name = "notOneOf"

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value in self.values:
            return self.failure("comparison.notOneOf", context, {"values": self.values})
        return self.success(value)


class SameAsStrategy(Strategy):
    name = "sameAs"

    def __init__(self, path: str):
        self.field_ref = FieldRef(path)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value != self.field_ref.resolve(context):
            return self.failure("comparison.sameAs", context, {"field": self.field_ref.path})
        return self.success(value)


class DifferentFromStrategy(Strategy):
    name = "differentFrom"

    def __init__(self, path: str):
        self.field_ref = FieldRef(path)

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value == self.field_ref.resolve(context):
            return self.failure(
                "comparison.differentFrom", context, {"field": self.field_ref.path}
            )
        return self.success(value)


class NativeEnumStrategy(Strategy):
    """Accepts members of an ``Enum`` or their values; outputs the member."""

    name = "nativeEnum"

    def __init__(self, enum_cls: type[Enum]):
        self.enum_cls = enum_cls

    def validate(self, value: Any, context: ValidationContext) -> ValidationResult:
        if isinstance(value, self.enum_cls):
            return self.success(value)
        try:
            return self.success(self.enum_cls(value))
        except (ValueError, TypeError):
            return self.failure(
                "comparison.oneOf",
                context,
                {"values": [member.value for member in self.enum_cls]},
            )


class ComparisonValidator(BaseValidator):
    """Comparison rules over values of any type (no type check of its own)."""

    type_name = "comparison"

    def equal_to(self, value: Any, message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(EqualToStrategy(value), message)

    def equals(self, value: Any, message: str | None = None) -> ComparisonValidator:
        return self.equal_to(value, message)

    def not_equal_to(self, value: Any, message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(NotEqualToStrategy(value), message)

    def greater_than(self, value: Any, message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(OrderingStrategy("greaterThan", value), message)

    def greater_than_or_equal(
        self, value: Any, message: str | None = None
    ) -> ComparisonValidator:
        return self._add_strategy(OrderingStrategy("greaterThanOrEqual", value), message)

    def less_than(self, value: Any, message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(OrderingStrategy("lessThan", value), message)

    def less_than_or_equal(self, value: Any, message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(OrderingStrategy("lessThanOrEqual", value), message)

    gt = greater_than
    gte = greater_than_or_equal
    lt = less_than
    lte = less_than_or_equal

    def between(
        self, minimum: Any, maximum: Any, message: str | None = None
    ) -> ComparisonValidator:
        return self._add_strategy(BetweenStrategy(minimum, maximum), message)

    def one_of(self, values: Iterable[Any], message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(OneOfStrategy(values), message)

    def not_one_of(self, values: Iterable[Any], message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(NotOneOfStrategy(values), message)

    def same_as(self, path: str, message: str | None = None) -> ComparisonValidator:
        """Must equal the value at ``path`` in the root data."""
        return self._add_strategy(SameAsStrategy(path), message)

    def different_from(self, path: str, message: str | None = None) -> ComparisonValidator:
        return self._add_strategy(DifferentFromStrategy(path), message)


def compare() -> ComparisonValidator:
    """Create a comparison validator."""
    return ComparisonValidator()


def literal(value: Any, message: str | None = None) -> ComparisonValidator:
    """Accept exactly ``value``."""
    validator = ComparisonValidator().equal_to(value, message)
    validator.type_name = "literal"
    return validator


def one_of_values(values: Iterable[Any], message: str | None = None) -> ComparisonValidator:
    """Accept any of ``values`` (an enumeration of literals)."""
    validator = ComparisonValidator().one_of(values, message)
    validator.type_name = "enum"
    return validator


def native_enum(enum_cls: type[Enum], message: str | None = None) -> ComparisonValidator:
    """Accept members of ``enum_cls`` or their values, producing the member."""
    validator = ComparisonValidator().use(NativeEnumStrategy(enum_cls), message)
    validator.type_name = "enum"
    return validator
