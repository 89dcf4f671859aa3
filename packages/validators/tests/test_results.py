"""Tests for results, contexts, paths and the message catalog."""

import copy
import pickle

from valknobs.messages import MessageCatalog, interpolate, translate
from valknobs.paths import get_by_path, path_to_string, string_to_path
from valknobs.results import (
    UNDEFINED,
    ValidationContext,
    ValidationError,
    ValidationResult,
    create_error,
    is_nil,
    prefix_errors,
)


class TestUndefined:
    """Test the UNDEFINED marker."""

    def test_is_falsy_singleton(self):
        assert not UNDEFINED
        assert repr(UNDEFINED) == "UNDEFINED"
        assert copy.deepcopy(UNDEFINED) is UNDEFINED
        assert copy.copy([UNDEFINED])[0] is UNDEFINED

    def test_survives_pickling(self):
        assert pickle.loads(pickle.dumps(UNDEFINED)) is UNDEFINED

    def test_is_nil(self):
        assert is_nil(None)
        assert is_nil(UNDEFINED)
        assert not is_nil(0)
        assert not is_nil("")


class TestValidationContext:
    """Test immutable contexts."""

    def test_root(self):
        ctx = ValidationContext.root(data={"a": 1}, locale="vi")
        assert ctx.path == ()
        assert ctx.field == ""
        assert ctx.data == {"a": 1}
        assert ctx.locale == "vi"

    def test_child_does_not_modify_parent(self):
        root = ValidationContext.root()
        users = root.child("users")
        first = users.child(0)

        assert root.path == ()
        assert users.path == ("users",)
        assert first.path == ("users", 0)
        assert first.field == "0"

    def test_sibling_paths_are_independent(self):
        root = ValidationContext.root()
        assert root.child("a").path == ("a",)
        assert root.child("b").path == ("b",)


class TestValidationError:
    """Test error value objects."""

    def test_field_derived_from_path(self):
        error = create_error("string.type", "Must be a string", ["user", "name"])
        assert error.path == ("user", "name")
        assert error.field == "name"
        assert error.metadata is None

    def test_with_path(self):
        error = create_error("number.min", "too small", ("age",))
        moved = error.with_path(("people", 2, "age"))
        assert moved.path == ("people", 2, "age")
        assert moved.field == "age"
        assert error.path == ("age",)

    def test_to_dict(self):
        error = create_error("number.min", "Must be at least 0", ("age",), metadata={"min": 0})
        assert error.to_dict() == {
            "code": "number.min",
            "message": "Must be at least 0",
            "path": ["age"],
            "field": "age",
            "metadata": {"min": 0},
        }

    def test_list_path_is_normalized(self):
        error = ValidationError(code="x", message="y", path=["a", 0])
        assert error.path == ("a", 0)


class TestValidationResult:
    """Test result construction and helpers."""

    def test_ok_and_fail(self):
        assert ValidationResult.ok(5).data == 5
        assert ValidationResult.ok(5)
        failed = ValidationResult.fail([create_error("c", "m")])
        assert not failed
        assert failed.data is None
        assert failed.first_error.code == "c"

    def test_success_may_carry_none(self):
        result = ValidationResult.ok(None)
        assert result.success
        assert result.data is None
        assert result.first_error is None

    def test_merge(self):
        merged = ValidationResult.ok(1).merge(ValidationResult.fail([create_error("c", "m")]))
        assert not merged.success
        assert merged.data is None
        assert len(merged.errors) == 1
        assert ValidationResult.ok(1).merge(ValidationResult.ok(2)).data == 2

    def test_with_message(self):
        result = ValidationResult.fail([create_error("a", "x"), create_error("b", "y")])
        rewritten = result.with_message("nope")
        assert [e.message for e in rewritten.errors] == ["nope", "nope"]
        assert [e.code for e in rewritten.errors] == ["a", "b"]
        ok = ValidationResult.ok(1)
        assert ok.with_message("nope") is ok

    def test_errors_for_and_error_map(self):
        result = ValidationResult.fail([
            create_error("a", "first", ("items", 0, "name")),
            create_error("b", "second", ("items", 0, "name")),
            create_error("c", "root"),
        ])
        assert len(result.errors_for("items[0].name")) == 2
        assert len(result.errors_for(("items", 0, "name"))) == 2
        assert result.error_map() == {"items[0].name": ["first", "second"], "": ["root"]}

    def test_to_dict_hides_undefined(self):
        assert ValidationResult.ok(UNDEFINED).to_dict() == {
            "success": True, "data": None, "errors": [],
        }

    def test_prefix_errors_is_idempotent(self):
        errors = [create_error("c", "m", ("name",))]
        once = prefix_errors(errors, ("user",))
        assert once[0].path == ("user", "name")
        assert prefix_errors(once, ("user",))[0].path == ("user", "name")


class TestPaths:
    """Test path helpers."""

    def test_path_to_string(self):
        assert path_to_string(()) == ""
        assert path_to_string(("users", 0, "email")) == "users[0].email"
        assert path_to_string((1, "a")) == "[1].a"

    def test_string_to_path(self):
        assert string_to_path("users[0].email") == ("users", 0, "email")
        assert string_to_path("users.0.email") == ("users", 0, "email")
        assert string_to_path("") == ()

    def test_non_decimal_digit_keys_stay_strings(self):
        assert string_to_path("a.\u00b2") == ("a", "\u00b2")
        assert get_by_path({"a": {"\u00b2": 1}}, "a.\u00b2") == 1
        assert get_by_path({"a": [1]}, "a.\u00b2") is UNDEFINED

    def test_get_by_path(self):
        data = {"users": [{"email": "a@b.co"}]}
        assert get_by_path(data, "users[0].email") == "a@b.co"
        assert get_by_path(data, ("users", 3)) is UNDEFINED
        assert get_by_path(data, "missing.key") is UNDEFINED
        assert get_by_path(None, "a") is UNDEFINED


class TestMessages:
    """Test message lookup and interpolation."""

    def test_translate_interpolates(self):
        assert translate("string.minLength", {"min": 3}) == "Must be at least 3 characters"

    def test_unknown_placeholder_kept(self):
        assert interpolate("Needs {min} and {max}", {"min": 1}) == "Needs 1 and {max}"

    def test_lists_joined(self):
        assert translate("object.extraKeys", {"keys": ["a", "b"]}) == "Unknown fields: a, b"

    def test_unknown_code_falls_back_to_code(self):
        assert translate("nothing.here") == "nothing.here"

    def test_locale_with_english_fallback(self):
        catalog = MessageCatalog()
        catalog.register_locale("vi", {"string": {"type": "Phải là chuỗi"}})

        assert catalog.translate("string.type", locale="vi") == "Phải là chuỗi"
        assert catalog.translate("number.type", locale="vi") == "Must be a number"
        assert "vi" in catalog.locales()
        assert catalog.has("string.type", "vi")
        assert not catalog.has("number.type", "vi")

    def test_nested_retry_message(self):
        assert translate("async.retry.failed", {"attempts": 3}) == (
            "Validation failed after 3 attempts"
        )
