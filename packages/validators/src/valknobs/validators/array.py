"""Array validator and its strategies.

Item validation is itself a pipeline strategy (``items``), so it runs in
registration order together with the length and content rules:

```python
# Length is checked first, items only when the length is fine
tags = array().min_length(1).of(string().trim().min_length(2))

# Items first: every bad item is reported, then uniqueness of the cleaned list
tags = array().of(string().trim()).unique()
```

Every index is validated and all item errors are reported, with the index
as an ``int`` path segment (``("tags", 0)``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from valknobs_common.exceptions import SchemaError

from ..core.strategy import Strategy
from ..core.validator import Validator
from ..results import ValidationContext, ValidationError, ValidationResult
from .base import BaseValidator
from .composite import check_member, check_member_async, is_sequence

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], Any]


def _check_count(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise SchemaError(f"{name} must be a non-negative integer", context={name: value})


class ItemValidatorStrategy(Strategy):
    """Validates every item against one validator."""

    name = "items"

    def __init__(self, validator: Validator):
        self.validator = validator

    @property
    def is_async(self) -> bool:
        return self.validator.is_async

    @staticmethod
    def _collect(results: list[ValidationResult]) -> ValidationResult:
        errors: list[ValidationError] = []
        output = []
        for result in results:
            if result.success:
                output.append(result.data)
            else:
                errors.extend(result.errors)
        if errors:
            return ValidationResult.fail(errors)
        return ValidationResult.ok(output)

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        return self._collect(
            [check_member(self.validator, item, context, i) for i, item in enumerate(value)]
        )

    async def validate_async(
        self, value: Sequence[Any], context: ValidationContext
    ) -> ValidationResult:
        results = []
        for index, item in enumerate(value):
            results.append(await check_member_async(self.validator, item, context, index))
        return self._collect(results)


class MinItemsStrategy(Strategy):
    name = "minLength"

    def __init__(self, minimum: int):
        _check_count("min", minimum)
        self.minimum = minimum

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        if len(value) < self.minimum:
            return self.failure(
                "array.minLength", context, {"min": self.minimum, "actual": len(value)}
            )
        return self.success(value)


class MaxItemsStrategy(Strategy):
    name = "maxLength"

    def __init__(self, maximum: int):
        _check_count("max", maximum)
        self.maximum = maximum

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        if len(value) > self.maximum:
            return self.failure(
                "array.maxLength", context, {"max": self.maximum, "actual": len(value)}
            )
        return self.success(value)


class ItemCountStrategy(Strategy):
    name = "length"

    def __init__(self, length: int):
        _check_count("length", length)
        self.length = length

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        if len(value) != self.length:
            return self.failure(
                "array.length", context, {"length": self.length, "actual": len(value)}
            )
        return self.success(value)


class NonEmptyStrategy(Strategy):
    name = "nonEmpty"

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        if not value:
            return self.failure("array.nonEmpty", context)
        return self.success(value)


def _all_distinct(items: Sequence[Any]) -> bool:
    try:
        return len(set(items)) == len(items)
    except TypeError:
        # Unhashable items (dicts, lists): pairwise equality
        seen: list[Any] = []
        for item in items:
            if item in seen:
                return False
            seen.append(item)
        return True


class UniqueStrategy(Strategy):
    name = "unique"

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        if not _all_distinct(value):
            return self.failure("array.unique", context)
        return self.success(value)


class ContainsItemStrategy(Strategy):
    name = "contains"

    def __init__(self, item: Any):
        self.item = item

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        if self.item not in value:
            return self.failure("array.contains", context, {"value": self.item})
        return self.success(value)


class PredicateStrategy(Strategy):
    """``every``, ``some`` and ``none`` over a per-item predicate.

    A predicate that raises counts as not matching that item.
    """

    _codes = {"every": "array.every", "some": "array.some", "none": "array.none"}

    def __init__(self, mode: str, predicate: Predicate):
        if mode not in self._codes:
            raise SchemaError(f"Unknown predicate mode: {mode}", context={"mode": mode})
        self.name = mode
        self.predicate = predicate

    def _matches(self, item: Any) -> bool:
        try:
            return bool(self.predicate(item))
        except Exception as e:
            logger.debug("Array predicate '%s' raised: %s", self.name, e)
            return False

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        matches = (self._matches(item) for item in value)
        if self.name == "every":
            passed = all(matches)
        elif self.name == "some":
            passed = any(matches)
        else:
            passed = not any(matches)
        if not passed:
            return self.failure(self._codes[self.name], context)
        return self.success(value)


class ArrayValidator(BaseValidator):
    """Validates lists and tuples; the output is always a list."""

    type_name = "array"

    def __init__(self, items: Validator | None = None):
        super().__init__()
        if items is not None:
            self._strategies.append(ItemValidatorStrategy(items))

    @property
    def item_validator(self) -> Validator | None:
        for item in self._strategies:
            if isinstance(item, ItemValidatorStrategy):
                return item.validator
        return None

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not is_sequence(value):
            return self.type_error(context)
        return ValidationResult.ok(list(value))

    def of(self, validator: Validator) -> ArrayValidator:
        """Validate every item with ``validator``.

        Calling ``of`` again replaces the item validator in place; the
        other rules keep their positions.
        """
        replacement = ItemValidatorStrategy(validator)
        clone = self._clone()
        for index, item in enumerate(clone._strategies):
            if isinstance(item, ItemValidatorStrategy):
                clone._strategies[index] = replacement
                return clone
        clone._strategies.append(replacement)
        return clone

    items = of

    def min_length(self, minimum: int, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(MinItemsStrategy(minimum), message)

    min = min_length

    def max_length(self, maximum: int, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(MaxItemsStrategy(maximum), message)

    max = max_length

    def length(self, length: int, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(ItemCountStrategy(length), message)

    def range(self, minimum: int, maximum: int, message: str | None = None) -> ArrayValidator:
        if minimum > maximum:
            raise SchemaError(
                "range minimum is greater than maximum",
                context={"min": minimum, "max": maximum},
            )
        return self.min_length(minimum, message).max_length(maximum, message)

    between = range

    def non_empty(self, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(NonEmptyStrategy(), message)

    def unique(self, message: str | None = None) -> ArrayValidator:
        """Reject duplicate items (``==`` equality)."""
        return self._add_strategy(UniqueStrategy(), message)

    distinct = unique

    def contains(self, item: Any, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(ContainsItemStrategy(item), message)

    includes = contains

    def every(self, predicate: Predicate, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(PredicateStrategy("every", predicate), message)

    def some(self, predicate: Predicate, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(PredicateStrategy("some", predicate), message)

    def none_match(self, predicate: Predicate, message: str | None = None) -> ArrayValidator:
        return self._add_strategy(PredicateStrategy("none", predicate), message)

    def describe(self) -> dict[str, Any]:
        described = super().describe()
        if self.item_validator is not None:
            described["items"] = self.item_validator.describe()
        return described


def array(items: Validator | None = None) -> ArrayValidator:
    """Create an array validator, optionally with an item validator."""
    return ArrayValidator(items)
