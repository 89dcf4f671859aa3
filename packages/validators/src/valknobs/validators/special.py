"""Validators for the special types: any, unknown, never, None and UNDEFINED."""

from __future__ import annotations

from typing import Any

from ..results import UNDEFINED, ValidationContext, ValidationResult
from .base import BaseValidator


class AnyValidator(BaseValidator):
    """Accepts every value."""

    type_name = "any"


class UnknownValidator(BaseValidator):
    """Accepts every value; the output is meant to be narrowed later."""

    type_name = "unknown"


class NeverValidator(BaseValidator):
    """Rejects every value, including a missing one."""

    type_name = "never"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        return self.fail("never.invalid", context)


class NoneValidator(BaseValidator):
    """Accepts only ``None``."""

    type_name = "null"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value is not None:
            return self.type_error(context)
        return ValidationResult.ok(None)


class UndefinedValidator(BaseValidator):
    """Accepts only a missing value (``UNDEFINED``)."""

    type_name = "undefined"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if value is not UNDEFINED:
            return self.type_error(context)
        return ValidationResult.ok(UNDEFINED)


def any_() -> AnyValidator:
    return AnyValidator()


def unknown() -> UnknownValidator:
    return UnknownValidator()


def never() -> NeverValidator:
    return NeverValidator()


def none() -> NoneValidator:
    return NoneValidator()


def undefined() -> UndefinedValidator:
    return UndefinedValidator()
