"""Logic combinators.

Combinators compose whole validators rather than strategies:

- ``and_``: every validator in order, output of one feeds the next; stops at
  the first failure
- ``or_``: first success wins; if all fail, one ``logic.or`` error
- ``not_``: succeeds (with the input) exactly when the wrapped validator fails
- ``xor``: exactly one validator must pass
- ``union``: like ``or_`` but reports ``logic.union``
- ``intersection``: every validator runs on the input, all errors are
  reported and mapping outputs are merged
- ``lazy``: defers building the validator, for recursive schemas
- ``if_then_else``: picks a branch on whether a condition validates

Passing ``message=`` makes a combinator report a single error with its own
``logic.<name>`` code instead of the errors of its children.

Example:
    ```python
    port = number().integer() & number().range(1, 65535)
    id_ = number().integer().positive() | string().uuid()
    not_admin = ~literal("admin")
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from ..core.validator import Validator
from ..messages import translate
from ..results import (
    UNDEFINED,
    ValidationContext,
    ValidationError,
    ValidationResult,
    create_error,
)

logger = logging.getLogger(__name__)


class LogicValidator(Validator):
    """Base for combinators over a list of validators."""

    code = "logic.invalid"

    def __init__(self, validators: Sequence[Validator], message: str | None = None):
        self.validators = list(validators)
        self.custom_message = message

    @property
    def is_async(self) -> bool:
        return any(v.is_async for v in self.validators)

    def _error(
        self, context: ValidationContext, metadata: Mapping[str, Any] | None = None
    ) -> ValidationResult:
        message = self.custom_message
        if message is None:
            message = translate(self.code, metadata, context.locale)
        return ValidationResult.fail(
            [create_error(self.code, message, context.path, context.field, metadata)]
        )

    def _failed(self, result: ValidationResult, context: ValidationContext) -> ValidationResult:
        """Child failure as reported by this combinator."""
        if self.custom_message is not None:
            return self._error(context)
        return result

    def describe(self) -> dict[str, Any]:
        return {"type": self.type_name, "validators": [v.describe() for v in self.validators]}

    def __repr__(self) -> str:
        inner = ", ".join(repr(v) for v in self.validators)
        return f"{type(self).__name__}([{inner}])"


class AndValidator(LogicValidator):
    type_name = "and"
    code = "logic.and"

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        current = value
        for validator in self.validators:
            result = validator.validate(current, ctx)
            if not result.success:
                return self._failed(result, ctx)
            current = result.data
        return ValidationResult.ok(current)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        current = value
        for validator in self.validators:
            result = await validator.validate_async(current, ctx)
            if not result.success:
                return self._failed(result, ctx)
            current = result.data
        return ValidationResult.ok(current)


class OrValidator(LogicValidator):
    type_name = "or"
    code = "logic.or"

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        for validator in self.validators:
            result = validator.validate(value, ctx)
            if result.success:
                return result
        return self._error(ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        for validator in self.validators:
            result = await validator.validate_async(value, ctx)
            if result.success:
                return result
        return self._error(ctx)


class UnionValidator(OrValidator):
    """Value must match one of several types; the first match's output is kept."""

    type_name = "union"
    code = "logic.union"


class NotValidator(LogicValidator):
    type_name = "not"
    code = "logic.not"

    def __init__(self, validator: Validator, message: str | None = None):
        super().__init__([validator], message)

    @property
    def wrapped(self) -> Validator:
        return self.validators[0]

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        if self.wrapped.validate(value, ctx).success:
            return self._error(ctx)
        return ValidationResult.ok(value)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        if (await self.wrapped.validate_async(value, ctx)).success:
            return self._error(ctx)
        return ValidationResult.ok(value)


class XorValidator(LogicValidator):
    """Exactly one validator must pass.

    Failures carry ``{"matched": 2}`` when more than one passed (checking
    stops at the second match) and ``{"matched": 0}`` when none did.
    """

    type_name = "xor"
    code = "logic.xor"

    def _decide(self, match: ValidationResult | None, matched: int,
                ctx: ValidationContext) -> ValidationResult:
        if matched == 1 and match is not None:
            return match
        return self._error(ctx, {"matched": matched})

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        match = None
        matched = 0
        for validator in self.validators:
            result = validator.validate(value, ctx)
            if result.success:
                matched += 1
                if matched > 1:
                    break
                match = result
        return self._decide(match, matched, ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        match = None
        matched = 0
        for validator in self.validators:
            result = await validator.validate_async(value, ctx)
            if result.success:
                matched += 1
                if matched > 1:
                    break
                match = result
        return self._decide(match, matched, ctx)


class IntersectionValidator(LogicValidator):
    """Every validator runs on the original input; all errors are kept.

    When all pass, mapping outputs are shallow-merged (later validators win
    on shared keys); otherwise the last output is returned.
    """

    type_name = "intersection"
    code = "logic.intersection"

    def _combine(self, results: list[ValidationResult], value: Any,
                 ctx: ValidationContext) -> ValidationResult:
        errors: list[ValidationError] = []
        for result in results:
            errors.extend(result.errors)
        if errors:
            return self._failed(ValidationResult.fail(errors), ctx)

        outputs = [result.data for result in results]
        if not outputs:
            return ValidationResult.ok(value)
        if all(isinstance(output, Mapping) for output in outputs):
            merged: dict[Any, Any] = {}
            for output in outputs:
                merged.update(output)
            return ValidationResult.ok(merged)
        return ValidationResult.ok(outputs[-1])

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        results = [validator.validate(value, ctx) for validator in self.validators]
        return self._combine(results, value, ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        results = [await validator.validate_async(value, ctx) for validator in self.validators]
        return self._combine(results, value, ctx)


class LazyValidator(LogicValidator):
    """Builds its validator on first use and reuses it afterwards.

    Lets a schema refer to itself:

    ```python
    node = object_({
        "name": string(),
        "children": array(lazy(lambda: node)).optional(),
    })
    ```
    """

    type_name = "lazy"
    code = "logic.lazy"

    def __init__(self, factory: Callable[[], Validator], message: str | None = None):
        super().__init__([], message)
        self.factory = factory

    def resolve(self) -> Validator:
        if not self.validators:
            self.validators.append(self.factory())
            logger.debug("Lazy validator resolved to %s", type(self.validators[0]).__name__)
        return self.validators[0]

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        result = self.resolve().validate(value, ctx)
        return result if result.success else self._failed(result, ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        result = await self.resolve().validate_async(value, ctx)
        return result if result.success else self._failed(result, ctx)

    @property
    def is_async(self) -> bool:
        # Self-referencing schemas would recurse forever
        return False

    def describe(self) -> dict[str, Any]:
        # Resolving here could recurse forever on self-referencing schemas
        return {"type": self.type_name, "resolved": bool(self.validators)}


class IfThenElseValidator(LogicValidator):
    """Validates with ``then`` when ``condition`` passes, else with ``otherwise``.

    The condition only selects the branch; its output is discarded and the
    branch sees the original input. Without ``otherwise`` a value that does
    not meet the condition passes unchanged.
    """

    type_name = "ifThenElse"
    code = "logic.ifThenElse"

    def __init__(
        self,
        condition: Validator,
        then: Validator,
        otherwise: Validator | None = None,
        message: str | None = None,
    ):
        branches = [condition, then] + ([otherwise] if otherwise is not None else [])
        super().__init__(branches, message)
        self.condition = condition
        self.then = then
        self.otherwise = otherwise

    def _branch(self, matched: bool) -> Validator | None:
        return self.then if matched else self.otherwise

    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        branch = self._branch(self.condition.validate(value, ctx).success)
        if branch is None:
            return ValidationResult.ok(value)
        result = branch.validate(value, ctx)
        return result if result.success else self._failed(result, ctx)

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        ctx = self._context(value, context)
        branch = self._branch((await self.condition.validate_async(value, ctx)).success)
        if branch is None:
            return ValidationResult.ok(value)
        result = await branch.validate_async(value, ctx)
        return result if result.success else self._failed(result, ctx)

    def describe(self) -> dict[str, Any]:
        described = {
            "type": self.type_name,
            "if": self.condition.describe(),
            "then": self.then.describe(),
        }
        if self.otherwise is not None:
            described["else"] = self.otherwise.describe()
        return described


def and_(*validators: Validator, message: str | None = None) -> AndValidator:
    return AndValidator(validators, message)


def or_(*validators: Validator, message: str | None = None) -> OrValidator:
    return OrValidator(validators, message)


def not_(validator: Validator, message: str | None = None) -> NotValidator:
    return NotValidator(validator, message)


def xor(*validators: Validator, message: str | None = None) -> XorValidator:
    return XorValidator(validators, message)


def union(*validators: Validator, message: str | None = None) -> UnionValidator:
    return UnionValidator(validators, message)


def intersection(*validators: Validator, message: str | None = None) -> IntersectionValidator:
    return IntersectionValidator(validators, message)


def lazy(factory: Callable[[], Validator], message: str | None = None) -> LazyValidator:
    return LazyValidator(factory, message)


def if_then_else(
    condition: Validator,
    then: Validator,
    otherwise: Validator | None = None,
    message: str | None = None,
) -> IfThenElseValidator:
    return IfThenElseValidator(condition, then, otherwise, message)


all_of = and_
any_of = or_
negate = not_
one_of = xor
when = if_then_else
