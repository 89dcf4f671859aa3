"""Message catalog used to render error codes.

Every error code is a dotted ``<domain>.<rule>`` key. The catalog looks the
key up for the requested locale, falls back to English, and finally to the
code itself, then interpolates ``{param}`` placeholders from the error
metadata. Placeholders without a matching parameter are left untouched.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")

EN_MESSAGES: dict[str, dict[str, str]] = {
    "string": {
        "type": "Must be a string",
        "required": "This field is required",
        "empty": "This field cannot be empty",
        "email": "Must be a valid email address",
        "url": "Must be a valid URL",
        "uuid": "Must be a valid UUID",
        "minLength": "Must be at least {min} characters",
        "maxLength": "Must be at most {max} characters",
        "length": "Must be exactly {length} characters",
        "pattern": "Invalid format",
        "matches": "Does not match the required pattern",
        "startsWith": 'Must start with "{prefix}"',
        "endsWith": 'Must end with "{suffix}"',
        "contains": 'Must contain "{substring}"',
        "alpha": "Must contain only letters",
        "alphanumeric": "Must contain only letters and numbers",
        "numeric": "Must contain only numbers",
        "lowercase": "Must be lowercase",
        "uppercase": "Must be uppercase",
        "notEmpty": "Cannot be empty or whitespace only",
    },
    "number": {
        "type": "Must be a number",
        "required": "This field is required",
        "min": "Must be at least {min}",
        "max": "Must be at most {max}",
        "range": "Must be between {min} and {max}",
        "integer": "Must be an integer",
        "positive": "Must be a positive number",
        "negative": "Must be a negative number",
        "nonPositive": "Must be zero or a negative number",
        "nonNegative": "Must be zero or a positive number",
        "multipleOf": "Must be a multiple of {factor}",
        "finite": "Must be a finite number",
        "safe": "Must be a safe integer",
    },
    "boolean": {
        "type": "Must be a boolean",
        "required": "This field is required",
        "isTrue": "Must be true",
        "isFalse": "Must be false",
    },
    "date": {
        "type": "Must be a valid date",
        "required": "This field is required",
        "invalid": "Invalid date",
        "min": "Must be on or after {date}",
        "max": "Must be on or before {date}",
        "past": "Must be a past date",
        "future": "Must be a future date",
        "today": "Must be today",
        "weekday": "Must be a weekday",
        "weekend": "Must be a weekend day",
        "minAge": "Must be at least {years} years old",
        "maxAge": "Must be at most {years} years old",
    },
    "array": {
        "type": "Must be an array",
        "required": "This field is required",
        "minLength": "Must have at least {min} items",
        "maxLength": "Must have at most {max} items",
        "length": "Must have exactly {length} items",
        "nonEmpty": "Cannot be an empty array",
        "unique": "All items must be unique",
        "contains": "Must include {value}",
        "every": "Every item must satisfy the condition",
        "some": "At least one item must satisfy the condition",
        "none": "No item may satisfy the condition",
    },
    "tuple": {
        "type": "Must be a tuple",
        "length": "Must have exactly {expected} elements",
    },
    "record": {
        "type": "Must be a record",
    },
    "object": {
        "type": "Must be an object",
        "required": "This field is required",
        "extraKeys": "Unknown fields: {keys}",
        "minKeys": "Must have at least {min} keys",
        "maxKeys": "Must have at most {max} keys",
        "keyCount": "Must have exactly {count} keys",
    },
    "logic": {
        "and": "All conditions must be met",
        "or": "At least one condition must be met",
        "not": "Condition must not be met",
        "xor": "Exactly one condition must be met ({matched} matched)",
        "union": "Value does not match any allowed type",
        "intersection": "Value must satisfy every condition",
        "lazy": "Lazy validation failed",
        "ifThenElse": "Conditional validation failed",
    },
    "comparison": {
        "equalTo": "Must equal {expected}",
        "notEqualTo": "Must not equal {expected}",
        "greaterThan": "Must be greater than {expected}",
        "greaterThanOrEqual": "Must be greater than or equal to {expected}",
        "lessThan": "Must be less than {expected}",
        "lessThanOrEqual": "Must be less than or equal to {expected}",
        "between": "Must be between {min} and {max}",
        "oneOf": "Must be one of: {values}",
        "notOneOf": "Must not be one of: {values}",
        "sameAs": "Must match {field}",
        "differentFrom": "Must be different from {field}",
    },
    "business": {
        "type": "Must be a string",
        "creditCard": {
            "invalid": "Must be a valid credit card number",
            "luhn": "Invalid credit card number",
            "type": "Card type {cardType} is not accepted; allowed: {allowedTypes}",
        },
        "iban": {
            "format": "Must be a valid IBAN",
            "country": "Unknown IBAN country code {countryCode}",
            "countryNotAllowed": "IBAN country {countryCode} is not accepted; allowed: {allowedCountries}",
            "length": "IBAN must have {expected} characters",
            "checksum": "Invalid IBAN checksum",
        },
        "phone": {
            "invalid": "Must be a valid phone number",
            "e164": "Must be a valid E.164 phone number",
            "country": "Must be a valid {countryCode} phone number",
        },
        "ssn": {
            "format": "Must be a valid SSN",
            "area": "Invalid SSN area number",
            "group": "Invalid SSN group number",
            "serial": "Invalid SSN serial number",
            "invalid": "Must be a valid SSN",
        },
        "urlSlug": {
            "format": "Must contain only lowercase letters, numbers and hyphens",
            "boundary": "Cannot start or end with a separator",
            "consecutive": "Cannot contain consecutive separators",
            "minLength": "Must be at least {min} characters",
            "maxLength": "Must be at most {max} characters",
        },
    },
    "coerce": {
        "number": "Cannot convert to a number",
        "date": "Cannot convert to a date",
    },
    "never": {
        "invalid": "No value is allowed here",
    },
    "null": {
        "type": "Must be null",
    },
    "undefined": {
        "type": "Must be undefined",
    },
    "async": {
        "failed": "Async validation failed",
        "timeout": "Validation timed out",
        "cancelled": "Validation cancelled",
        "retry": {
            "failed": "Validation failed after {attempts} attempts",
        },
    },
    "common": {
        "required": "This field is required",
        "invalid": "Invalid value",
        "custom": "Validation failed",
        "refine": "Validation failed",
        "transform": "Transformation failed",
        "asyncRequired": "This validator must be run with validate_async()",
    },
}


def _flatten(messages: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    flat: dict[str, str] = {}
    for key, value in messages.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, Mapping):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = str(value)
    return flat


def interpolate(template: str, params: Mapping[str, Any] | None) -> str:
    """Replace ``{name}`` placeholders with values from ``params``."""
    if not params:
        return template

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        value = params[name]
        if isinstance(value, (list, tuple, set, frozenset)):
            return ", ".join(str(item) for item in value)
        return str(value)

    return _PLACEHOLDER_RE.sub(replace, template)


class MessageCatalog:
    """Locale-aware lookup of error messages.

    Example:
        ```python
        catalog = MessageCatalog()
        catalog.register_locale("vi", {"string": {"type": "Phải là chuỗi"}})
        catalog.translate("string.minLength", {"min": 3})
        # 'Must be at least 3 characters'
        ```
    """

    def __init__(self, fallback_locale: str = DEFAULT_LOCALE):
        self._fallback_locale = fallback_locale
        self._locales: dict[str, dict[str, str]] = {DEFAULT_LOCALE: _flatten(EN_MESSAGES)}
        self._lock = threading.RLock()

    @property
    def fallback_locale(self) -> str:
        return self._fallback_locale

    def register_locale(self, locale: str, messages: Mapping[str, Any]) -> None:
        """Add (or extend) a locale with nested or dotted-key messages."""
        flat = _flatten(messages)
        with self._lock:
            self._locales.setdefault(locale, {}).update(flat)
        logger.debug("Registered %d messages for locale '%s'", len(flat), locale)

    def locales(self) -> list[str]:
        with self._lock:
            return list(self._locales)

    def has(self, code: str, locale: str | None = None) -> bool:
        with self._lock:
            return code in self._locales.get(locale or self._fallback_locale, {})

    def translate(
        self,
        code: str,
        params: Mapping[str, Any] | None = None,
        locale: str | None = None,
    ) -> str:
        """Render ``code`` for ``locale``, falling back to the code itself."""
        with self._lock:
            template = self._locales.get(locale or self._fallback_locale, {}).get(code)
            if template is None:
                template = self._locales.get(self._fallback_locale, {}).get(code)
        if template is None:
            return code
        return interpolate(template, params)


_catalog = MessageCatalog()


def get_catalog() -> MessageCatalog:
    """The catalog strategies render their messages with."""
    return _catalog


def translate(
    code: str,
    params: Mapping[str, Any] | None = None,
    locale: str | None = None,
) -> str:
    return _catalog.translate(code, params, locale)


def register_locale(locale: str, messages: Mapping[str, Any]) -> None:
    _catalog.register_locale(locale, messages)
