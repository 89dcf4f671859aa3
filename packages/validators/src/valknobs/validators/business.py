"""Business identifier validators.

``business()`` is a string validator with extra rules for payment card
numbers (Luhn checksum and card network), IBANs (country length table and
mod-97 checksum), phone numbers, U.S. Social Security Numbers and URL slugs.
Every string rule is still available, so ``business().trim().iban()`` works.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from enum import Enum

from valknobs_common.exceptions import SchemaError

from ..core.strategy import Strategy
from ..results import ValidationContext, ValidationResult
from .string import StringValidator


class CreditCardType(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    DISCOVER = "discover"
    DINERS = "diners"
    JCB = "jcb"
    UNKNOWN = "unknown"


CARD_PATTERNS: dict[CreditCardType, re.Pattern[str]] = {
    CreditCardType.VISA: re.compile(r"4[0-9]{12}(?:[0-9]{3})?"),
    CreditCardType.MASTERCARD: re.compile(r"5[1-5][0-9]{14}"),
    CreditCardType.AMEX: re.compile(r"3[47][0-9]{13}"),
    CreditCardType.DISCOVER: re.compile(r"6(?:011|5[0-9]{2})[0-9]{12}"),
    CreditCardType.DINERS: re.compile(r"3(?:0[0-5]|[68][0-9])[0-9]{11}"),
    CreditCardType.JCB: re.compile(r"(?:2131|1800|35[0-9]{3})[0-9]{11}"),
}

IBAN_LENGTHS: dict[str, int] = {
    "AD": 24, "AE": 23, "AL": 28, "AT": 20, "AZ": 28, "BA": 20, "BE": 16,
    "BG": 22, "BH": 22, "BR": 29, "BY": 28, "CH": 21, "CR": 22, "CY": 28,
    "CZ": 24, "DE": 22, "DK": 18, "DO": 28, "EE": 20, "EG": 29, "ES": 24,
    "FI": 18, "FO": 18, "FR": 27, "GB": 22, "GE": 22, "GI": 23, "GL": 18,
    "GR": 27, "GT": 28, "HR": 21, "HU": 28, "IE": 22, "IL": 23, "IS": 26,
    "IT": 27, "JO": 30, "KW": 30, "KZ": 20, "LB": 28, "LC": 32, "LI": 21,
    "LT": 20, "LU": 20, "LV": 21, "MC": 27, "MD": 24, "ME": 22, "MK": 19,
    "MR": 27, "MT": 31, "MU": 30, "NL": 18, "NO": 15, "PK": 24, "PL": 28,
    "PS": 29, "PT": 25, "QA": 29, "RO": 24, "RS": 22, "SA": 24, "SE": 24,
    "SI": 19, "SK": 24, "SM": 27, "TN": 24, "TR": 26, "UA": 29, "VA": 22,
    "VG": 24, "XK": 20,
}

# Country calling code plus national number length
PHONE_PATTERNS: dict[str, re.Pattern[str]] = {
    "US": re.compile(r"\+?1\d{10}"),
    "GB": re.compile(r"\+?44\d{10}"),
    "VN": re.compile(r"\+?84\d{9,10}"),
    "CN": re.compile(r"\+?86\d{11}"),
    "JP": re.compile(r"\+?81\d{10}"),
    "KR": re.compile(r"\+?82\d{9,10}"),
    "AU": re.compile(r"\+?61\d{9}"),
    "FR": re.compile(r"\+?33\d{9}"),
    "DE": re.compile(r"\+?49\d{10,11}"),
    "IT": re.compile(r"\+?39\d{9,10}"),
}

_DIGITS_RE = re.compile(r"[0-9]+")
_PHONE_SEPARATORS_RE = re.compile(r"[\s\-().]")
_PHONE_EXTENSION_RE = re.compile(r"(.+?)(?:ext?|x)(\d+)", re.IGNORECASE)
_PHONE_RE = re.compile(r"\+?\d{7,15}", re.ASCII)
_E164_RE = re.compile(r"\+\d{1,3}\d{4,14}", re.ASCII)

# Placeholder, sequential and publicly circulated numbers
INVALID_SSNS = frozenset({
    "123456789",
    "111111111",
    "222222222",
    "333333333",
    "444444444",
    "555555555",
    "777777777",
    "888888888",
    "999999999",
    "078051120",
})


def luhn_valid(digits: str) -> bool:
    """Luhn (mod 10) checksum of a string of ASCII digits."""
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def detect_card_type(digits: str) -> CreditCardType:
    for card_type, pattern in CARD_PATTERNS.items():
        if pattern.fullmatch(digits):
            return card_type
    return CreditCardType.UNKNOWN


def iban_checksum_valid(iban: str) -> bool:
    """ISO 13616 mod-97 check on a normalized (uppercase, no spaces) IBAN."""
    rearranged = iban[4:] + iban[:4]
    numeric = "".join(str(int(char, 36)) for char in rearranged)
    return int(numeric) % 97 == 1


def slugify(text: str, separator: str = "-", lowercase: bool = True) -> str:
    """Turn free text into a URL slug.

    Diacritics are dropped, punctuation removed, and runs of whitespace or
    underscores become a single ``separator``.
    """
    decomposed = unicodedata.normalize("NFD", text)
    slug = "".join(char for char in decomposed if not unicodedata.combining(char))
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII).strip()
    sep = re.escape(separator)
    slug = re.sub(r"[\s_]+", separator, slug)
    slug = re.sub(f"(?:{sep})+", separator, slug)
    if lowercase:
        slug = slug.lower()
    return re.sub(f"^(?:{sep})+|(?:{sep})+$", "", slug)


class CreditCardStrategy(Strategy):
    """Payment card number; spaces and hyphens are ignored."""

    name = "creditCard"

    def __init__(self, allowed_types: Iterable[str | CreditCardType] | None = None):
        if allowed_types is None:
            self.allowed_types = None
        else:
            try:
                self.allowed_types = [CreditCardType(t) for t in allowed_types]
            except ValueError as e:
                raise SchemaError(str(e), context={"allowed_types": allowed_types}) from e

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        digits = re.sub(r"[\s-]", "", value)
        if not _DIGITS_RE.fullmatch(digits):
            return self.failure("business.creditCard.invalid", context)
        if not luhn_valid(digits):
            return self.failure("business.creditCard.luhn", context)

        card_type = detect_card_type(digits)
        if self.allowed_types is not None and card_type not in self.allowed_types:
            return self.failure("business.creditCard.type", context, {
                "cardType": card_type.value,
                "allowedTypes": [t.value for t in self.allowed_types],
            })
        return self.success(value)


class IBANStrategy(Strategy):
    name = "iban"

    def __init__(self, allowed_countries: Iterable[str] | None = None):
        self.allowed_countries = (
            None if allowed_countries is None else [c.upper() for c in allowed_countries]
        )

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        iban = re.sub(r"\s", "", value).upper()
        if not re.fullmatch(r"[A-Z]{2}[0-9]{2}[A-Z0-9]+", iban):
            return self.failure("business.iban.format", context)

        country = iban[:2]
        expected = IBAN_LENGTHS.get(country)
        if expected is None:
            return self.failure("business.iban.country", context, {"countryCode": country})
        if self.allowed_countries is not None and country not in self.allowed_countries:
            return self.failure("business.iban.countryNotAllowed", context, {
                "countryCode": country,
                "allowedCountries": self.allowed_countries,
            })
        if len(iban) != expected:
            return self.failure(
                "business.iban.length", context, {"expected": expected, "actual": len(iban)}
            )
        if not iban_checksum_valid(iban):
            return self.failure("business.iban.checksum", context)
        return self.success(value)


class PhoneStrategy(Strategy):
    """International phone number, optionally checked against a country.

    Countries without a known numbering pattern only get the generic check.
    """

    name = "phone"

    def __init__(self, country_code: str | None = None, allow_extension: bool = False):
        self.country_code = country_code.upper() if country_code else None
        self.allow_extension = allow_extension

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        number = _PHONE_SEPARATORS_RE.sub("", value)
        if self.allow_extension:
            match = _PHONE_EXTENSION_RE.fullmatch(number)
            if match:
                number = match.group(1)

        if not _PHONE_RE.fullmatch(number):
            return self.failure("business.phone.invalid", context)
        if number.startswith("+") and not _E164_RE.fullmatch(number):
            return self.failure("business.phone.e164", context)

        pattern = PHONE_PATTERNS.get(self.country_code) if self.country_code else None
        if pattern is not None and not pattern.fullmatch(number):
            return self.failure(
                "business.phone.country", context, {"countryCode": self.country_code}
            )
        return self.success(value)


class SSNStrategy(Strategy):
    """U.S. Social Security Number, ``XXX-XX-XXXX`` or nine digits."""

    name = "ssn"

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        ssn = value.replace("-", "")
        if not re.fullmatch(r"[0-9]{9}", ssn):
            return self.failure("business.ssn.format", context)

        area, group, serial = ssn[:3], ssn[3:5], ssn[5:]
        if int(area) in (0, 666) or int(area) >= 900:
            return self.failure("business.ssn.area", context)
        if group == "00":
            return self.failure("business.ssn.group", context)
        if serial == "0000":
            return self.failure("business.ssn.serial", context)
        if ssn in INVALID_SSNS:
            return self.failure("business.ssn.invalid", context)
        return self.success(value)


class UrlSlugStrategy(Strategy):
    name = "urlSlug"

    def __init__(self, min_length: int | None = None, max_length: int | None = None,
                 allow_underscores: bool = False):
        for label, bound in (("min_length", min_length), ("max_length", max_length)):
            if bound is not None and (not isinstance(bound, int) or bound < 0):
                raise SchemaError(f"{label} must be a non-negative integer",
                                  context={label: bound})
        self.min_length = min_length
        self.max_length = max_length
        self.allow_underscores = allow_underscores
        chars = r"[a-z0-9_-]" if allow_underscores else r"[a-z0-9-]"
        self._pattern = re.compile(f"{chars}+")

    def validate(self, value: str, context: ValidationContext) -> ValidationResult:
        if not self._pattern.fullmatch(value):
            return self.failure("business.urlSlug.format", context)
        if value[0] in "-_" or value[-1] in "-_":
            return self.failure("business.urlSlug.boundary", context)
        if re.search(r"[-_]{2,}", value):
            return self.failure("business.urlSlug.consecutive", context)
        if self.min_length is not None and len(value) < self.min_length:
            return self.failure(
                "business.urlSlug.minLength", context,
                {"min": self.min_length, "actual": len(value)},
            )
        if self.max_length is not None and len(value) > self.max_length:
            return self.failure(
                "business.urlSlug.maxLength", context,
                {"max": self.max_length, "actual": len(value)},
            )
        return self.success(value)


class BusinessValidator(StringValidator):
    """String validator with business identifier rules.

    Example:
        ```python
        card = business().credit_card(["visa", "mastercard"])
        phone = business().phone(country_code="US")
        iban = business().iban(["DE", "GB"])
        ```
    """

    type_name = "business"

    def credit_card(self, allowed_types: Iterable[str | CreditCardType] | None = None,
                    message: str | None = None) -> BusinessValidator:
        return self._add_strategy(CreditCardStrategy(allowed_types), message)

    def iban(self, allowed_countries: Iterable[str] | None = None,
             message: str | None = None) -> BusinessValidator:
        return self._add_strategy(IBANStrategy(allowed_countries), message)

    def phone(self, country_code: str | None = None, allow_extension: bool = False,
              message: str | None = None) -> BusinessValidator:
        return self._add_strategy(PhoneStrategy(country_code, allow_extension), message)

    def ssn(self, message: str | None = None) -> BusinessValidator:
        return self._add_strategy(SSNStrategy(), message)

    def slug(self, min_length: int | None = None, max_length: int | None = None,
             allow_underscores: bool = False, message: str | None = None) -> BusinessValidator:
        return self._add_strategy(
            UrlSlugStrategy(min_length, max_length, allow_underscores), message
        )


def business() -> BusinessValidator:
    """Create a business identifier validator."""
    return BusinessValidator()
