"""Execution engine: strategies, the pipeline, decorators and cancellation."""

from .cancellation import CancellationToken
from .decorators import (
    DefaultValidator,
    MessageValidator,
    NullableValidator,
    OptionalValidator,
    PreprocessValidator,
    TransformValidator,
    ValidatorDecorator,
    nullable,
    nullish,
    optional,
)
from .pipeline import StrategyHandler, ValidationPipeline, forward_value, reject_awaitable
from .strategy import FunctionStrategy, Strategy, StrategyKind, strategy
from .validator import Validator

__all__ = [
    "CancellationToken",
    "DefaultValidator",
    "FunctionStrategy",
    "MessageValidator",
    "NullableValidator",
    "OptionalValidator",
    "PreprocessValidator",
    "Strategy",
    "StrategyHandler",
    "StrategyKind",
    "TransformValidator",
    "ValidationPipeline",
    "Validator",
    "ValidatorDecorator",
    "forward_value",
    "nullable",
    "nullish",
    "optional",
    "reject_awaitable",
    "strategy",
]
