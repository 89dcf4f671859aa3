"""Tests for object, array, tuple, record and composite validators."""

import logging

import pytest

from valknobs_common.exceptions import SchemaError

from valknobs.results import UNDEFINED
from valknobs.validators import (
    UnknownKeys,
    array,
    boolean,
    composite,
    number,
    object_,
    record,
    string,
    tuple_,
)


@pytest.fixture
def user():
    return object_({
        "name": string().min_length(2),
        "age": number().min(0),
    })


class TestObjectValidator:
    """Test field validation and error paths."""

    def test_valid_object(self, user):
        result = user.validate({"name": "Jo", "age": 30})
        assert result.success
        assert result.data == {"name": "Jo", "age": 30}

    def test_single_field_error_has_field_path(self, user):
        result = user.validate({"name": "Jo", "age": -1})

        assert not result.success
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.code == "number.min"
        assert error.path == ("age",)
        assert error.field == "age"

    def test_every_field_is_checked(self):
        validator = object_({"a": string(), "b": number()})
        result = validator.validate({"a": 1, "b": "x"})

        assert [(e.code, e.path) for e in result.errors] == [
            ("string.type", ("a",)),
            ("number.type", ("b",)),
        ]

    def test_missing_field_validates_as_undefined(self, user):
        result = user.validate({"name": "Jo"})
        assert result.errors[0].code == "number.type"
        assert result.errors[0].path == ("age",)

    def test_optional_fields_are_omitted(self):
        validator = object_({"name": string(), "nick": string().optional()})
        assert validator.validate({"name": "Jo"}).data == {"name": "Jo"}

    def test_nested_paths(self):
        validator = object_({"user": object_({"email": string().email()})})
        error = validator.validate({"user": {"email": "nope"}}).errors[0]
        assert error.path == ("user", "email")
        assert error.field == "email"

    def test_type_error(self, user):
        assert user.validate(["not", "a", "dict"]).errors[0].code == "object.type"

    def test_strip_is_default(self, user):
        assert user.unknown_keys is UnknownKeys.STRIP
        result = user.validate({"name": "Jo", "age": 1, "extra": True})
        assert result.data == {"name": "Jo", "age": 1}

    def test_strict_reports_extra_keys(self, user):
        result = user.strict().validate({"name": "Jo", "age": 1, "x": 1, "y": 2})

        error = result.errors[0]
        assert error.code == "object.extraKeys"
        assert error.metadata == {"keys": ["x", "y"]}
        assert error.path == ()

    def test_strict_with_field_errors(self, user):
        result = user.strict("No extras").validate({"name": "J", "age": 1, "x": 1})
        assert [e.code for e in result.errors] == ["string.minLength", "object.extraKeys"]
        assert result.errors[1].message == "No extras"

    def test_passthrough(self, user):
        result = user.passthrough().validate({"name": "Jo", "age": 1, "extra": True})
        assert result.data == {"name": "Jo", "age": 1, "extra": True}

    def test_partial(self, user):
        partial = user.partial()
        assert partial.is_partial
        assert partial.validate({}).data == {}
        assert not partial.validate({"age": -1}).success
        assert not user.is_partial

    def test_extend_and_merge(self, user):
        extended = user.extend({"email": string().email()})
        assert set(extended.get_schema()) == {"name", "age", "email"}
        assert set(user.get_schema()) == {"name", "age"}

        merged = user.merge(object_({"age": number().min(18)}))
        assert not merged.validate({"name": "Jo", "age": 10}).success

    def test_pick_and_omit(self, user, caplog):
        assert set(user.pick("name").get_schema()) == {"name"}
        assert set(user.omit("name").get_schema()) == {"age"}

        with caplog.at_level(logging.WARNING):
            user.pick("name", "missing")
        assert "missing" in caplog.text

    def test_key_counts(self):
        validator = object_().passthrough().min_keys(1).max_keys(2)
        assert validator.validate({}).errors[0].code == "object.minKeys"
        assert validator.validate({"a": 1, "b": 2, "c": 3}).errors[0].code == "object.maxKeys"
        assert validator.validate({"a": 1}).success
        with pytest.raises(SchemaError):
            object_().min_keys(-1)

    def test_rules_see_validated_output(self):
        validator = object_({"name": string().trim()}).refine(
            lambda v: v["name"] == "Jo", "Must be Jo"
        )
        assert validator.validate({"name": " Jo "}).success

    def test_cross_field_rule(self):
        validator = object_({"password": string(), "confirm": string()}).refine(
            lambda v: v["password"] == v["confirm"], "Passwords must match"
        )
        result = validator.validate({"password": "a", "confirm": "b"})
        assert result.errors[0].message == "Passwords must match"

    @pytest.mark.asyncio
    async def test_async_fields(self):
        async def available(value):
            return value != "taken"

        validator = object_({"username": string().refine(available, "Taken")})
        result = await validator.validate_async({"username": "taken"})
        assert result.errors[0].path == ("username",)

    def test_reports_async_members(self):
        async def available(value):
            return True

        remote = string().refine(available, "Taken")
        assert object_({"username": remote}).is_async
        assert array(remote).is_async
        assert tuple_(number(), remote.optional()).is_async
        assert not object_({"username": string()}).is_async

    def test_describe(self, user):
        described = user.strict().describe()
        assert described["type"] == "object"
        assert described["mode"] == "strict"
        assert set(described["fields"]) == {"name", "age"}


class TestArrayValidator:
    """Test item validation and array rules."""

    def test_item_errors_have_index_paths(self):
        validator = array(object_({"n": number()}))
        result = validator.validate([{"n": 1}, {"n": "x"}, {"n": "y"}])

        assert [e.path for e in result.errors] == [(1, "n"), (2, "n")]

    def test_tuple_input_becomes_list(self):
        assert array(number()).validate((1, 2)).data == [1, 2]

    def test_type(self):
        assert array().validate("abc").errors[0].code == "array.type"

    def test_lengths(self):
        assert array().min_length(1).validate([]).errors[0].code == "array.minLength"
        assert array().max(1).validate([1, 2]).errors[0].code == "array.maxLength"
        assert array().length(2).validate([1]).errors[0].code == "array.length"
        assert array().between(1, 2).validate([1]).success
        assert array().non_empty().validate([]).errors[0].code == "array.nonEmpty"
        with pytest.raises(SchemaError):
            array().range(3, 1)

    def test_unique(self):
        assert array().unique().validate([1, 2, 1]).errors[0].code == "array.unique"
        assert array().distinct().validate([{"a": 1}, {"a": 2}]).success
        assert not array().unique().validate([{"a": 1}, {"a": 1}]).success

    def test_rules_run_in_order(self):
        # Items are trimmed before uniqueness is checked
        validator = array().of(string().trim()).unique()
        assert not validator.validate(["a", " a "]).success
        assert array().unique().of(string().trim()).validate(["a", " a "]).success

    def test_of_replaces_item_validator(self):
        validator = array(number()).of(string())
        assert validator.validate(["a"]).success
        assert len(validator.strategies) == 1

    def test_contains(self):
        assert array().includes(3).validate([1, 2]).errors[0].metadata == {"value": 3}

    def test_predicates(self):
        assert array().every(lambda x: x > 0).validate([1, 2]).success
        assert array().every(lambda x: x > 0).validate([1, -2]).errors[0].code == "array.every"
        assert array().some(lambda x: x > 1).validate([1, 2]).success
        assert array().none_match(lambda x: x > 1).validate([1, 2]).errors[0].code == "array.none"
        assert not array().every(lambda x: x.missing).validate([1]).success

    def test_describe(self):
        assert array(string()).describe()["items"]["type"] == "string"


class TestTupleValidator:
    """Test fixed-length sequences."""

    def test_elements(self):
        validator = tuple_(string(), number())
        assert validator.validate(("a", 1)).data == ("a", 1)
        assert validator.validate(["a", 1]).data == ["a", 1]

    def test_length_mismatch(self):
        error = tuple_(string(), number()).validate(["a"]).errors[0]
        assert error.code == "tuple.length"
        assert error.metadata == {"expected": 2, "actual": 1}

    def test_element_errors(self):
        result = tuple_([string(), number()]).validate([1, "x"])
        assert [e.path for e in result.errors] == [(0,), (1,)]


class TestRecordValidator:
    """Test mappings with arbitrary keys."""

    def test_values(self):
        validator = record(number())
        assert validator.validate({"a": 1}).success
        assert validator.validate({"a": "x"}).errors[0].path == ("a",)

    def test_keys(self):
        validator = record(boolean(), string().min_length(2))
        result = validator.validate({"ok": True, "x": False})
        assert result.errors[0].code == "string.minLength"
        assert result.errors[0].path == ("x",)

    def test_undefined_values_dropped(self):
        validator = record(string().optional())
        assert validator.validate({"a": UNDEFINED, "b": "x"}).data == {"b": "x"}


class TestCompositeValidator:
    """Test running every member and aggregating errors."""

    def test_aggregates_all_errors(self):
        validator = composite(string().min_length(5), string().matches(r"\d"))
        result = validator.validate("abc")
        assert [e.code for e in result.errors] == ["string.minLength", "string.pattern"]

    def test_threads_successful_output(self):
        validator = composite(string().trim()).add(string().max_length(3))
        assert validator.validate("  abc  ").data == "abc"


class TestRecursiveSchemas:
    """Test self-referencing schemas through lazy."""

    def test_tree(self):
        from valknobs.validators import lazy

        node = object_({
            "name": string(),
            "children": array(lazy(lambda: node)).optional(),
        })
        tree = {"name": "root", "children": [{"name": "a", "children": [{"name": 1}]}]}

        result = node.validate(tree)
        assert result.errors[0].path == ("children", 0, "children", 0, "name")
        assert not node.is_async
