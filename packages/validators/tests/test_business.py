"""Tests for business identifier validators."""

import pytest

from valknobs_common.exceptions import SchemaError

from valknobs import SchemaFactory, ValidatorRegistry, business, slugify
from valknobs.registry import register_builtins
from valknobs.validators.business import (
    CreditCardType,
    detect_card_type,
    iban_checksum_valid,
    luhn_valid,
)


def codes(result):
    return [error.code for error in result.errors]


class TestCreditCard:
    """Test card number checks."""

    def test_luhn(self):
        assert luhn_valid("4111111111111111")
        assert luhn_valid("378282246310005")
        assert not luhn_valid("4111111111111112")

    def test_detects_network(self):
        assert detect_card_type("4111111111111111") is CreditCardType.VISA
        assert detect_card_type("5555555555554444") is CreditCardType.MASTERCARD
        assert detect_card_type("378282246310005") is CreditCardType.AMEX
        assert detect_card_type("6011111111111117") is CreditCardType.DISCOVER
        assert detect_card_type("0000000000") is CreditCardType.UNKNOWN

    def test_validates_formatted_numbers(self):
        validator = business().credit_card()
        assert validator.validate("4111 1111 1111 1111").success
        assert validator.validate("4111-1111-1111-1111").data == "4111-1111-1111-1111"
        assert codes(validator.validate("4111 1111 1111 1112")) == ["business.creditCard.luhn"]
        assert codes(validator.validate("4111 abcd")) == ["business.creditCard.invalid"]
        assert codes(validator.validate("")) == ["business.creditCard.invalid"]

    def test_allowed_types(self):
        validator = business().credit_card(["visa", CreditCardType.AMEX])
        assert validator.validate("378282246310005").success

        error = validator.validate("5555555555554444").errors[0]
        assert error.code == "business.creditCard.type"
        assert error.metadata == {"cardType": "mastercard", "allowedTypes": ["visa", "amex"]}
        assert error.message == "Card type mastercard is not accepted; allowed: visa, amex"

    def test_unknown_card_type_rejected_at_construction(self):
        with pytest.raises(SchemaError):
            business().credit_card(["bitcoin"])


class TestIBAN:
    """Test IBAN checks."""

    def test_checksum(self):
        assert iban_checksum_valid("GB82WEST12345698765432")
        assert iban_checksum_valid("DE89370400440532013000")
        assert not iban_checksum_valid("GB83WEST12345698765432")

    def test_valid(self):
        validator = business().iban()
        assert validator.validate("GB82WEST12345698765432").success
        assert validator.validate("gb82 west 1234 5698 7654 32").success
        assert validator.validate("DE89 3704 0044 0532 0130 00").success

    def test_failures(self):
        validator = business().iban()
        assert codes(validator.validate("1234")) == ["business.iban.format"]
        assert codes(validator.validate("ZZ82WEST12345698765432")) == ["business.iban.country"]
        assert codes(validator.validate("GB83WEST12345698765432")) == ["business.iban.checksum"]

        error = validator.validate("GB82WEST1234569876543").errors[0]
        assert error.code == "business.iban.length"
        assert error.metadata == {"expected": 22, "actual": 21}

    def test_allowed_countries(self):
        validator = business().iban(["de"])
        assert validator.validate("DE89370400440532013000").success
        error = validator.validate("GB82WEST12345698765432").errors[0]
        assert error.code == "business.iban.countryNotAllowed"
        assert error.metadata == {"countryCode": "GB", "allowedCountries": ["DE"]}


class TestPhone:
    """Test phone number checks."""

    def test_generic(self):
        validator = business().phone()
        assert validator.validate("+1 (415) 555-2671").success
        assert validator.validate("415.555.2671").success
        assert codes(validator.validate("123")) == ["business.phone.invalid"]
        assert codes(validator.validate("call me")) == ["business.phone.invalid"]

    def test_country(self):
        assert business().phone(country_code="us").validate("+1 415 555 2671").success
        error = business().phone(country_code="GB").validate("+1 415 555 2671").errors[0]
        assert error.code == "business.phone.country"
        assert error.metadata == {"countryCode": "GB"}

    def test_country_without_pattern_uses_generic_check(self):
        assert business().phone(country_code="BR").validate("+55 11 91234 5678").success

    def test_extension(self):
        number = "+1 415 555 2671 ext 12"
        assert business().phone(allow_extension=True).validate(number).success
        assert business().phone(allow_extension=True).validate("4155552671x9").success
        assert codes(business().phone().validate(number)) == ["business.phone.invalid"]


class TestSSN:
    """Test U.S. Social Security Number checks."""

    def test_valid(self):
        assert business().ssn().validate("123-45-6788").success
        assert business().ssn().validate("123456788").success

    @pytest.mark.parametrize("value, code", [
        ("12-345-678", "business.ssn.format"),
        ("123-45-678a", "business.ssn.format"),
        ("000-12-3456", "business.ssn.area"),
        ("666-12-3456", "business.ssn.area"),
        ("901-12-3456", "business.ssn.area"),
        ("123-00-4567", "business.ssn.group"),
        ("123-45-0000", "business.ssn.serial"),
        ("123-45-6789", "business.ssn.invalid"),
        ("078-05-1120", "business.ssn.invalid"),
    ])
    def test_rejected(self, value, code):
        assert codes(business().ssn().validate(value)) == [code]

    def test_trailing_newline_rejected(self):
        assert not business().ssn().validate("123-45-6788\n").success


class TestUrlSlug:
    """Test slug checks and slugify."""

    def test_valid(self):
        assert business().slug().validate("hello-world-2").success
        assert business().slug(allow_underscores=True).validate("hello_world").success

    def test_failures(self):
        validator = business().slug()
        assert codes(validator.validate("Hello")) == ["business.urlSlug.format"]
        assert codes(validator.validate("hello_world")) == ["business.urlSlug.format"]
        assert codes(validator.validate("-hello")) == ["business.urlSlug.boundary"]
        assert codes(validator.validate("hello-")) == ["business.urlSlug.boundary"]
        assert codes(validator.validate("a--b")) == ["business.urlSlug.consecutive"]
        assert codes(validator.validate("")) == ["business.urlSlug.format"]

    def test_length(self):
        validator = business().slug(min_length=5, max_length=8)
        error = validator.validate("abc").errors[0]
        assert error.code == "business.urlSlug.minLength"
        assert error.metadata == {"min": 5, "actual": 3}
        assert codes(validator.validate("abcdefghij")) == ["business.urlSlug.maxLength"]
        with pytest.raises(SchemaError):
            business().slug(min_length=-1)

    def test_slugify(self):
        assert slugify("Héllo  Wörld!") == "hello-world"
        assert slugify("  Already_slugged--text ") == "already-slugged-text"
        assert slugify("Keep Case", lowercase=False) == "Keep-Case"
        assert slugify("a b c", separator="_") == "a_b_c"
        assert business().slug().validate(slugify("Ünïcödé Title: Part 2")).success


class TestBusinessValidator:
    """Test the validator as a whole."""

    def test_type_check(self):
        assert codes(business().validate(4111111111111111)) == ["business.type"]
        assert business().validate(4111111111111111).errors[0].message == "Must be a string"

    def test_string_rules_still_apply(self):
        validator = business().trim().iban()
        assert validator.validate("  GB82WEST12345698765432 ").data == "GB82WEST12345698765432"

    def test_custom_message(self):
        error = business().ssn(message="Bad SSN").validate("000-12-3456").errors[0]
        assert error.code == "business.ssn.area"
        assert error.message == "Bad SSN"

    def test_registry_and_factory(self):
        registry = register_builtins(ValidatorRegistry())
        assert "business" in registry.list()

        validator = SchemaFactory(registry).create({
            "type": "business",
            "rules": [{"credit_card": {"allowed_types": ["visa"]}}],
        })
        assert validator.validate("4111111111111111").success
        assert codes(validator.validate("5555555555554444")) == ["business.creditCard.type"]
