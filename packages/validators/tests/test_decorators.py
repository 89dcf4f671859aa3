"""Tests for optional, nullable, default, transform, preprocess and with_message."""

import pytest

from valknobs.core import nullable, nullish, optional
from valknobs.core.strategy import Strategy
from valknobs.results import UNDEFINED
from valknobs.validators import array, number, string


class Counter(Strategy):
    name = "counter"

    def __init__(self):
        self.count = 0

    def validate(self, value, context):
        self.count += 1
        return self.success(value)


class TestOptional:
    """Test the optional decorator."""

    def test_missing_value_skips_wrapped_validator(self):
        counter = Counter()
        validator = string().use(counter).optional()

        result = validator.validate(UNDEFINED)
        assert result.success
        assert result.data is UNDEFINED
        assert counter.count == 0

    def test_none_is_still_validated(self):
        assert string().optional().validate(None).errors[0].code == "string.type"

    def test_present_value_validated(self):
        validator = string().min_length(2).optional()
        assert not validator.validate("a").success
        assert validator.validate("ab").data == "ab"

    def test_reports_wrapped_type(self):
        validator = optional(string())
        assert validator.type_name == "string"
        assert validator.describe()["optional"] is True


class TestNullable:
    """Test nullable and nullish."""

    def test_none_accepted(self):
        result = number().nullable().validate(None)
        assert result.success
        assert result.data is None

    def test_missing_value_still_validated(self):
        assert not nullable(number()).validate(UNDEFINED).success

    def test_nullish_accepts_both(self):
        for validator in (number().nullish(), nullish(number())):
            assert validator.validate(None).success
            assert validator.validate(UNDEFINED).success
            assert not validator.validate("x").success


class TestDefault:
    """Test default values."""

    def test_default_for_missing_and_none(self):
        validator = string().min_length(3).default("anonymous")
        assert validator.validate(UNDEFINED).data == "anonymous"
        assert validator.validate(None).data == "anonymous"
        assert validator.validate("bob").data == "bob"

    def test_default_is_not_validated(self):
        assert number().min(10).default(0).validate(None).data == 0

    def test_mutable_default_is_copied(self):
        validator = array().default([])
        first = validator.validate(UNDEFINED).data
        first.append("x")
        assert validator.validate(UNDEFINED).data == []

    def test_optional_then_default(self):
        validator = string().optional().default("anonymous")
        assert validator.validate(UNDEFINED).data == "anonymous"


class TestTransform:
    """Test transform and preprocess."""

    def test_transform_output(self):
        assert string().transform(len).validate("four").data == 4

    def test_transform_skipped_on_failure(self):
        calls = []
        result = string().transform(calls.append).validate(1)
        assert not result.success
        assert calls == []

    def test_transform_skipped_for_undefined(self):
        result = string().optional().transform(str.upper).validate(UNDEFINED)
        assert result.data is UNDEFINED

    def test_transform_exception(self):
        result = string().transform(int).validate("abc")
        assert result.errors[0].code == "common.transform"
        assert "invalid literal" in result.errors[0].message

    def test_async_transform_requires_async_path(self):
        async def shout(value):
            return value.upper()

        assert string().transform(shout).validate("a").errors[0].code == "common.asyncRequired"

    @pytest.mark.asyncio
    async def test_async_transform(self):
        async def shout(value):
            return value.upper()

        assert (await string().transform(shout).validate_async("a")).data == "A"

    def test_preprocess(self):
        validator = array(string().trim()).preprocess(lambda v: v.split(","))
        assert validator.validate("a, b").data == ["a", "b"]

    def test_preprocess_exception(self):
        result = array().preprocess(lambda v: v.split(",")).validate(3)
        assert result.errors[0].code == "common.transform"


class TestWithMessage:
    """Test message overrides."""

    def test_replaces_every_message(self):
        result = number().min(5).with_message("Too small").validate(1)
        error = result.errors[0]
        assert error.message == "Too small"
        assert error.code == "number.min"

    def test_rule_level_message(self):
        result = string().min_length(3, "Name too short").validate("a")
        assert result.errors[0].message == "Name too short"
