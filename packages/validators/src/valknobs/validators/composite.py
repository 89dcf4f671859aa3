"""Composite validators whose members are validators themselves.

Containers validate every member, re-root each member's errors under the
member's path and report all of them together; one failing member never
stops the others from being checked. Member checking runs as the first
pipeline strategy, so rules added with the fluent API (``refine``,
``min_keys`` ...) see the validated output.

Objects and arrays live in their own modules and share the helpers here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from ..core.strategy import Strategy
from ..core.validator import Validator
from ..results import (
    UNDEFINED,
    PathSegment,
    ValidationContext,
    ValidationError,
    ValidationResult,
    prefix_errors,
)
from .base import BaseValidator


def check_member(
    validator: Validator, value: Any, context: ValidationContext, key: PathSegment
) -> ValidationResult:
    """Validate one member at ``context.child(key)`` with re-rooted errors."""
    child = context.child(key)
    result = validator.validate(value, child)
    if result.success:
        return result
    return ValidationResult.fail(prefix_errors(result.errors, child.path))


async def check_member_async(
    validator: Validator, value: Any, context: ValidationContext, key: PathSegment
) -> ValidationResult:
    child = context.child(key)
    result = await validator.validate_async(value, child)
    if result.success:
        return result
    return ValidationResult.fail(prefix_errors(result.errors, child.path))


def is_sequence(value: Any) -> bool:
    """Lists and tuples; strings, bytes and mappings are not sequences here."""
    return isinstance(value, (list, tuple))


class ElementsStrategy(Strategy):
    """Validates a sequence position by position against ``elements``."""

    name = "elements"

    def __init__(self, elements: Sequence[Validator]):
        self.elements = tuple(elements)

    @property
    def is_async(self) -> bool:
        return any(element.is_async for element in self.elements)

    @staticmethod
    def _collect(value: Sequence[Any], results: list[ValidationResult]) -> ValidationResult:
        errors: list[ValidationError] = []
        output = []
        for result in results:
            if result.success:
                output.append(result.data)
            else:
                errors.extend(result.errors)
        if errors:
            return ValidationResult.fail(errors)
        return ValidationResult.ok(tuple(output) if isinstance(value, tuple) else output)

    def validate(self, value: Sequence[Any], context: ValidationContext) -> ValidationResult:
        results = [
            check_member(validator, item, context, index)
            for index, (validator, item) in enumerate(zip(self.elements, value))
        ]
        return self._collect(value, results)

    async def validate_async(
        self, value: Sequence[Any], context: ValidationContext
    ) -> ValidationResult:
        results = []
        for index, (validator, item) in enumerate(zip(self.elements, value)):
            results.append(await check_member_async(validator, item, context, index))
        return self._collect(value, results)


class EntriesStrategy(Strategy):
    """Validates every key (optionally) and value of a mapping."""

    name = "entries"

    def __init__(self, values: Validator, keys: Validator | None = None):
        self.values = values
        self.keys = keys

    @property
    def is_async(self) -> bool:
        return self.values.is_async or (self.keys is not None and self.keys.is_async)

    @staticmethod
    def _collect(entries: list[tuple[Any, ValidationResult]]) -> ValidationResult:
        errors: list[ValidationError] = []
        output: dict[Any, Any] = {}
        for key, result in entries:
            if result.success:
                if result.data is not UNDEFINED:
                    output[key] = result.data
            else:
                errors.extend(result.errors)
        if errors:
            return ValidationResult.fail(errors)
        return ValidationResult.ok(output)

    def _entry(self, key: Any, item: Any, context: ValidationContext) -> tuple[Any, ValidationResult]:
        out_key = key
        if self.keys is not None:
            key_result = check_member(self.keys, key, context, key)
            if not key_result.success:
                return key, key_result
            out_key = key_result.data
        return out_key, check_member(self.values, item, context, key)

    async def _entry_async(
        self, key: Any, item: Any, context: ValidationContext
    ) -> tuple[Any, ValidationResult]:
        out_key = key
        if self.keys is not None:
            key_result = await check_member_async(self.keys, key, context, key)
            if not key_result.success:
                return key, key_result
            out_key = key_result.data
        return out_key, await check_member_async(self.values, item, context, key)

    def validate(self, value: Mapping[Any, Any], context: ValidationContext) -> ValidationResult:
        return self._collect([self._entry(k, v, context) for k, v in value.items()])

    async def validate_async(
        self, value: Mapping[Any, Any], context: ValidationContext
    ) -> ValidationResult:
        entries = [await self._entry_async(k, v, context) for k, v in value.items()]
        return self._collect(entries)


class TupleValidator(BaseValidator):
    """Fixed-length sequence validated index by index.

    A length mismatch fails with ``tuple.length`` before any element is
    checked. The output keeps the input container type.
    """

    type_name = "tuple"

    def __init__(self, elements: Sequence[Validator] = ()):
        super().__init__()
        self._members = ElementsStrategy(elements)

    @property
    def elements(self) -> tuple[Validator, ...]:
        return self._members.elements

    def _pipeline_strategies(self) -> list[Strategy]:
        return [self._members, *self._strategies]

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not is_sequence(value):
            return self.type_error(context)
        expected = len(self._members.elements)
        if len(value) != expected:
            return self.fail(
                "tuple.length", context, {"expected": expected, "actual": len(value)}
            )
        return ValidationResult.ok(value)

    def describe(self) -> dict[str, Any]:
        return {
            **super().describe(),
            "elements": [element.describe() for element in self.elements],
        }


class RecordValidator(BaseValidator):
    """Mapping with arbitrary keys; every key and value is validated.

    Key errors and value errors are both reported at the entry's path.
    Entries whose value validates to ``UNDEFINED`` are left out.
    """

    type_name = "record"

    def __init__(self, values: Validator, keys: Validator | None = None):
        super().__init__()
        self._members = EntriesStrategy(values, keys)

    def _pipeline_strategies(self) -> list[Strategy]:
        return [self._members, *self._strategies]

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not isinstance(value, Mapping):
            return self.type_error(context)
        return ValidationResult.ok(value)

    def describe(self) -> dict[str, Any]:
        described = {**super().describe(), "values": self._members.values.describe()}
        if self._members.keys is not None:
            described["keys"] = self._members.keys.describe()
        return described


class CompositeValidator(Validator):
    """Runs every member on the same value and reports all their errors.

    Successful members thread their output into the next member, so a
    normalizing member (trim, coerce) feeds the ones after it. Unlike
    ``and_`` there is no short-circuit.
    """

    type_name = "composite"

    def __init__(self, validators: Sequence[Validator]):
        self.validators = list(validators)

    @property
    def is_async(self) -> bool:
        return any(v.is_async for v in self.validators)

    def add(self, validator: Validator) -> CompositeValidator:
        return CompositeValidator([*self.validators, validator])

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        current = value
        errors: list[ValidationError] = []
        for validator in self.validators:
            result = validator.validate(current, ctx)
            if result.success:
                current = result.data
            else:
                errors.extend(result.errors)
        if errors:
            return ValidationResult.fail(errors)
        return ValidationResult.ok(current)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        current = value
        errors: list[ValidationError] = []
        for validator in self.validators:
            result = await validator.validate_async(current, ctx)
            if result.success:
                current = result.data
            else:
                errors.extend(result.errors)
        if errors:
            return ValidationResult.fail(errors)
        return ValidationResult.ok(current)

    def describe(self) -> dict[str, Any]:
        return {"type": self.type_name, "validators": [v.describe() for v in self.validators]}


def tuple_(*elements: Validator) -> TupleValidator:
    """Create a tuple validator: ``tuple_(string(), number())``."""
    if len(elements) == 1 and isinstance(elements[0], (list, tuple)):
        elements = tuple(elements[0])
    return TupleValidator(elements)


def record(values: Validator, keys: Validator | None = None) -> RecordValidator:
    """Create a record validator for ``{key: value}`` mappings."""
    return RecordValidator(values, keys)


def composite(*validators: Validator) -> CompositeValidator:
    return CompositeValidator(validators)
