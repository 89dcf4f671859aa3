"""Object validator: mappings checked against a schema of field validators.

Every schema key is validated, even after an earlier key failed, and all
field errors are reported together with their full paths. Keys that are
missing from the input validate as ``UNDEFINED``; fields whose output is
``UNDEFINED`` are left out of the result.

Unknown input keys are handled by the object's mode:

- ``strip`` (default): dropped from the output
- ``strict``: reported as a single ``object.extraKeys`` error
- ``passthrough``: copied to the output unchanged

Schema algebra (``extend``, ``merge``, ``pick``, ``omit``, ``partial``)
builds a new validator; the receiver is never modified.

Example:
    ```python
    user = object_({
        "name": string().min_length(2),
        "age": number().min(0),
    })
    result = user.validate({"name": "Jo", "age": -1})
    [(e.code, e.path) for e in result.errors]
    # [('number.min', ('age',))]
    ```
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from valknobs_common.exceptions import SchemaError

from ..core.decorators import OptionalValidator
from ..core.strategy import Strategy
from ..core.validator import Validator
from ..results import UNDEFINED, ValidationContext, ValidationError, ValidationResult
from .base import BaseValidator
from .composite import check_member, check_member_async

logger = logging.getLogger(__name__)


class UnknownKeys(Enum):
    """What an object does with input keys outside its schema."""

    STRIP = "strip"
    STRICT = "strict"
    PASSTHROUGH = "passthrough"


class ShapeStrategy(Strategy):
    """Validates each schema field and applies the unknown-key policy."""

    name = "shape"

    def __init__(
        self,
        schema: Mapping[str, Validator],
        unknown_keys: UnknownKeys = UnknownKeys.STRIP,
        partial: bool = False,
        strict_message: str | None = None,
    ):
        self.schema = dict(schema)
        self.unknown_keys = unknown_keys
        self.partial = partial
        self.strict_message = strict_message

    @property
    def is_async(self) -> bool:
        return any(v.is_async for v in self.schema.values())

    def _field_validator(self, validator: Validator) -> Validator:
        return OptionalValidator(validator) if self.partial else validator

    def _finish(
        self,
        value: Mapping[str, Any],
        results: list[tuple[str, ValidationResult]],
        context: ValidationContext,
    ) -> ValidationResult:
        errors: list[ValidationError] = []
        output: dict[str, Any] = {}
        for key, result in results:
            if not result.success:
                errors.extend(result.errors)
            elif result.data is not UNDEFINED:
                output[key] = result.data

        extra = [key for key in value if key not in self.schema]
        if extra and self.unknown_keys is UnknownKeys.STRICT:
            failure = self.failure("object.extraKeys", context, {"keys": extra})
            if self.strict_message is not None:
                failure = failure.with_message(self.strict_message)
            errors.extend(failure.errors)

        if errors:
            return ValidationResult.fail(errors)
        if extra and self.unknown_keys is UnknownKeys.PASSTHROUGH:
            for key in extra:
                output[key] = value[key]
        return self.success(output)

    def validate(self, value: Mapping[str, Any], context: ValidationContext) -> ValidationResult:
        results = [
            (key, check_member(self._field_validator(validator),
                               value.get(key, UNDEFINED), context, key))
            for key, validator in self.schema.items()
        ]
        return self._finish(value, results, context)

    async def validate_async(
        self, value: Mapping[str, Any], context: ValidationContext
    ) -> ValidationResult:
        results = []
        for key, validator in self.schema.items():
            result = await check_member_async(
                self._field_validator(validator), value.get(key, UNDEFINED), context, key
            )
            results.append((key, result))
        return self._finish(value, results, context)


class MinKeysStrategy(Strategy):
    name = "minKeys"

    def __init__(self, minimum: int):
        self.minimum = minimum

    def validate(self, value: Mapping[str, Any], context: ValidationContext) -> ValidationResult:
        if len(value) < self.minimum:
            return self.failure("object.minKeys", context, {"min": self.minimum})
        return self.success(value)


class MaxKeysStrategy(Strategy):
    name = "maxKeys"

    def __init__(self, maximum: int):
        self.maximum = maximum

    def validate(self, value: Mapping[str, Any], context: ValidationContext) -> ValidationResult:
        if len(value) > self.maximum:
            return self.failure("object.maxKeys", context, {"max": self.maximum})
        return self.success(value)


class ObjectValidator(BaseValidator):
    """Validates mappings field by field against a schema."""

    type_name = "object"

    def __init__(
        self,
        schema: Mapping[str, Validator] | None = None,
        unknown_keys: UnknownKeys = UnknownKeys.STRIP,
    ):
        super().__init__()
        self._shape = ShapeStrategy(schema or {}, unknown_keys)

    @property
    def unknown_keys(self) -> UnknownKeys:
        return self._shape.unknown_keys

    @property
    def is_partial(self) -> bool:
        return self._shape.partial

    def get_schema(self) -> dict[str, Validator]:
        """Copy of the field schema."""
        return dict(self._shape.schema)

    def _pipeline_strategies(self) -> list[Strategy]:
        return [self._shape, *self._strategies]

    def _with_shape(self, **changes: Any) -> ObjectValidator:
        current = self._shape
        clone = self._clone()
        clone._shape = ShapeStrategy(
            changes.get("schema", current.schema),
            changes.get("unknown_keys", current.unknown_keys),
            changes.get("partial", current.partial),
            changes.get("strict_message", current.strict_message),
        )
        return clone

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        if not isinstance(value, Mapping):
            return self.type_error(context)
        return ValidationResult.ok(value)

    # Schema algebra

    def shape(self, schema: Mapping[str, Validator]) -> ObjectValidator:
        """Replace the schema, keeping rules and mode."""
        return self._with_shape(schema=schema)

    def extend(self, extension: Mapping[str, Validator]) -> ObjectValidator:
        """Add (or override) fields."""
        return self._with_shape(schema={**self._shape.schema, **extension})

    def merge(self, other: ObjectValidator) -> ObjectValidator:
        """Add the fields of ``other``; its fields win on conflict."""
        return self.extend(other.get_schema())

    def pick(self, *keys: str) -> ObjectValidator:
        """Keep only ``keys``."""
        unknown = [key for key in keys if key not in self._shape.schema]
        if unknown:
            logger.warning("pick() ignoring keys not in schema: %s", unknown)
        return self._with_shape(
            schema={k: v for k, v in self._shape.schema.items() if k in keys}
        )

    def omit(self, *keys: str) -> ObjectValidator:
        """Drop ``keys``."""
        return self._with_shape(
            schema={k: v for k, v in self._shape.schema.items() if k not in keys}
        )

    def partial(self) -> ObjectValidator:
        """Treat every field as optional."""
        return self._with_shape(partial=True)

    # Unknown keys

    def strict(self, message: str | None = None) -> ObjectValidator:
        """Fail with ``object.extraKeys`` when the input has keys outside the schema."""
        return self._with_shape(unknown_keys=UnknownKeys.STRICT, strict_message=message)

    def strip(self) -> ObjectValidator:
        """Drop unknown keys from the output (the default)."""
        return self._with_shape(unknown_keys=UnknownKeys.STRIP)

    def passthrough(self) -> ObjectValidator:
        """Copy unknown keys to the output unchanged."""
        return self._with_shape(unknown_keys=UnknownKeys.PASSTHROUGH)

    # Key counts

    def min_keys(self, minimum: int, message: str | None = None) -> ObjectValidator:
        if minimum < 0:
            raise SchemaError("min_keys cannot be negative", context={"min": minimum})
        return self._add_strategy(MinKeysStrategy(minimum), message)

    def max_keys(self, maximum: int, message: str | None = None) -> ObjectValidator:
        if maximum < 0:
            raise SchemaError("max_keys cannot be negative", context={"max": maximum})
        return self._add_strategy(MaxKeysStrategy(maximum), message)

    def key_count(self, count: int, message: str | None = None) -> ObjectValidator:
        return self.min_keys(count, message).max_keys(count, message)

    def describe(self) -> dict[str, Any]:
        return {
            **super().describe(),
            "mode": self._shape.unknown_keys.value,
            "partial": self._shape.partial,
            "fields": {key: v.describe() for key, v in self._shape.schema.items()},
        }


def object_(
    schema: Mapping[str, Validator] | None = None,
) -> ObjectValidator:
    """Create an object validator from a ``{field: validator}`` schema."""
    return ObjectValidator(schema)
