"""Tests for strategies, the pipeline and the base validator."""

import pytest

from valknobs_common.exceptions import SchemaError

from valknobs.core import (
    FunctionStrategy,
    Strategy,
    StrategyKind,
    ValidationPipeline,
    forward_value,
    strategy,
)
from valknobs.results import UNDEFINED, ValidationContext, ValidationResult
from valknobs.validators import number, string


class Spy(Strategy):
    """Records every value it sees."""

    name = "spy"

    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def validate(self, value, context):
        self.calls.append(value)
        return self.result if self.result is not None else self.success(value)


class Upper(Strategy):
    name = "upper"

    def validate(self, value, context):
        return self.success(value.upper())


class AlwaysFails(Strategy):
    name = "fails"

    def validate(self, value, context):
        return self.failure("common.invalid", context)


@pytest.fixture
def ctx():
    return ValidationContext.root()


class TestValidationPipeline:
    """Test chain-of-responsibility execution."""

    def test_empty_pipeline_passes_value(self, ctx):
        assert ValidationPipeline().execute("x", ctx).data == "x"

    def test_output_threads_into_next_strategy(self, ctx):
        spy = Spy()
        pipeline = ValidationPipeline().add_strategy(Upper()).add_strategy(spy)

        result = pipeline.execute("abc", ctx)
        assert result.data == "ABC"
        assert spy.calls == ["ABC"]

    def test_first_failure_short_circuits(self, ctx):
        spy = Spy()
        pipeline = ValidationPipeline.from_strategies([AlwaysFails(), spy])

        result = pipeline.execute("abc", ctx)
        assert not result.success
        assert result.errors[0].code == "common.invalid"
        assert spy.calls == []

    def test_step_without_data_forwards_input(self, ctx):
        spy = Spy()
        keeps = Spy(result=ValidationResult.ok(None))
        pipeline = ValidationPipeline.from_strategies([keeps, spy])

        assert pipeline.execute("abc", ctx).success
        assert spy.calls == ["abc"]

    def test_forward_value(self):
        assert forward_value(ValidationResult.ok(UNDEFINED), 3) == 3
        assert forward_value(ValidationResult.ok(None), 3) == 3
        assert forward_value(ValidationResult.ok(0), 3) == 0

    def test_sync_execution_refuses_async_strategy(self, ctx):
        spy = Spy()

        async def remote(value, context):
            return ValidationResult.ok(value)

        pipeline = ValidationPipeline.from_strategies([spy, FunctionStrategy(remote)])
        result = pipeline.execute("x", ctx)

        assert result.errors[0].code == "common.asyncRequired"
        assert spy.calls == []

    @pytest.mark.asyncio
    async def test_async_execution_awaits(self, ctx):
        async def remote(value, context):
            return ValidationResult.ok(value * 2)

        pipeline = ValidationPipeline.from_strategies([FunctionStrategy(remote), Spy()])
        result = await pipeline.execute_async(21, ctx)
        assert result.data == 42

    def test_len_and_clear(self):
        pipeline = ValidationPipeline.from_strategies([Spy(), Spy()])
        assert len(pipeline) == 2
        pipeline.clear()
        assert len(pipeline) == 0


class TestStrategy:
    """Test the Strategy helpers."""

    def test_with_message_copies(self, ctx):
        original = AlwaysFails()
        custom = original.with_message("Bad value")

        assert custom.validate("x", ctx).errors[0].message == "Bad value"
        assert original.validate("x", ctx).errors[0].message == "Invalid value"

    def test_decorator_forms(self):
        @strategy
        def even(value, context):
            return ValidationResult.ok(value)

        @strategy(name="username.available")
        async def available(value, context):
            return ValidationResult.ok(value)

        assert even.name == "even"
        assert even.kind is StrategyKind.RULE
        assert available.name == "username.available"
        assert available.kind is StrategyKind.ASYNC

    def test_meta_kinds(self):
        assert StrategyKind.TIMEOUT.is_meta
        assert not StrategyKind.ASYNC.is_meta


class TestBaseValidator:
    """Test type checks, immutability and shared use."""

    def test_type_error_stops_strategies(self):
        spy = Spy()
        result = string().use(spy).validate(42)

        assert result.errors[0].code == "string.type"
        assert spy.calls == []

    def test_fluent_methods_return_new_validators(self):
        base = string()
        longer = base.min_length(3)

        assert base.strategies == ()
        assert len(longer.strategies) == 1
        assert base.validate("ab").success
        assert not longer.validate("ab").success

    def test_branches_from_shared_base_are_independent(self):
        base = string().trim()
        short = base.max_length(3)
        long = base.min_length(5)

        assert short.validate(" abc ").success
        assert not long.validate(" abc ").success
        assert len(base.strategies) == 1

    def test_validation_is_repeatable(self):
        validator = number().min(0)
        first = validator.validate(-1)
        second = validator.validate(-1)
        assert first.errors == second.errors

    def test_missing_value_fails_type_check(self):
        assert string().validate().errors[0].code == "string.type"

    def test_required(self):
        validator = string().required()
        assert validator.is_required
        assert validator.validate(None).errors[0].code == "common.required"
        assert validator.validate(UNDEFINED).errors[0].code == "common.required"
        assert validator.validate("   ").errors[0].code == "string.required"
        assert validator.validate("x").success

    def test_custom_predicate_with_context(self):
        validator = number().custom(lambda v, ctx: v % 2 == 0, "Must be even")

        result = validator.validate(3)
        assert result.errors[0].code == "common.custom"
        assert result.errors[0].message == "Must be even"
        assert validator.validate(4).success

    def test_refine_exception_becomes_error(self):
        def explode(value):
            raise ValueError("broken check")

        result = string().refine(explode, "fallback").validate("x")
        assert result.errors[0].code == "common.refine"
        assert result.errors[0].message == "broken check"

    def test_async_refine_requires_async_path(self):
        async def check(value):
            return True

        validator = string().refine(check, "nope")
        assert validator.is_async
        assert validator.validate("x").errors[0].code == "common.asyncRequired"

    @pytest.mark.asyncio
    async def test_async_refine_on_async_path(self):
        async def check(value):
            return value == "ok"

        validator = string().refine(check, "Must be ok")
        assert (await validator.validate_async("ok")).success
        result = await validator.validate_async("no")
        assert result.errors[0].message == "Must be ok"

    def test_context_path_reaches_errors(self):
        ctx = ValidationContext.root().child("user").child("name")
        error = string().validate(1, ctx).errors[0]
        assert error.path == ("user", "name")
        assert error.field == "name"

    def test_locale_from_context(self):
        from valknobs.messages import register_locale

        register_locale("pl-test", {"number": {"min": "Co najmniej {min}"}})
        ctx = ValidationContext.root(locale="pl-test")
        assert number().min(5).validate(1, ctx).errors[0].message == "Co najmniej 5"

    def test_describe(self):
        assert string().min_length(2).required().describe() == {
            "type": "string",
            "strategies": ["minLength", "required"],
            "required": True,
        }

    def test_schema_errors_at_construction(self):
        with pytest.raises(SchemaError):
            string().min_length(-1)
        with pytest.raises(SchemaError):
            number().range(10, 1)
