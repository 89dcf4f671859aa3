"""Concrete validators, combinators and the async coordinator."""

from . import coerce
from .array import ArrayValidator, ItemValidatorStrategy, array
from .asynchronous import (
    AsyncStrategy,
    AsyncValidator,
    CoordinatorState,
    DebounceStrategy,
    RetryStrategy,
    TimeoutStrategy,
    async_validator,
)
from .base import BaseValidator
from .boolean import BooleanValidator, boolean
from .business import BusinessValidator, CreditCardType, business, slugify
from .common import CustomStrategy, RequiredStrategy, TransformStrategy
from .comparison import (
    ComparisonValidator,
    FieldRef,
    compare,
    literal,
    native_enum,
    one_of_values,
    ref,
)
from .composite import (
    CompositeValidator,
    RecordValidator,
    TupleValidator,
    composite,
    record,
    tuple_,
)
from .date import DateValidator, date_
from .logic import (
    AndValidator,
    IfThenElseValidator,
    IntersectionValidator,
    LazyValidator,
    NotValidator,
    OrValidator,
    UnionValidator,
    XorValidator,
    all_of,
    and_,
    any_of,
    if_then_else,
    intersection,
    lazy,
    negate,
    not_,
    one_of,
    or_,
    union,
    when,
    xor,
)
from .number import NumberValidator, number
from .object import ObjectValidator, UnknownKeys, object_
from .special import (
    AnyValidator,
    NeverValidator,
    NoneValidator,
    UndefinedValidator,
    UnknownValidator,
    any_,
    never,
    none,
    undefined,
    unknown,
)
from .string import StringValidator, string

__all__ = [
    "AndValidator",
    "AnyValidator",
    "ArrayValidator",
    "AsyncStrategy",
    "AsyncValidator",
    "BaseValidator",
    "BooleanValidator",
    "BusinessValidator",
    "ComparisonValidator",
    "CreditCardType",
    "CompositeValidator",
    "CoordinatorState",
    "CustomStrategy",
    "DateValidator",
    "DebounceStrategy",
    "FieldRef",
    "IfThenElseValidator",
    "IntersectionValidator",
    "ItemValidatorStrategy",
    "LazyValidator",
    "NeverValidator",
    "NoneValidator",
    "NotValidator",
    "NumberValidator",
    "ObjectValidator",
    "OrValidator",
    "RecordValidator",
    "RequiredStrategy",
    "RetryStrategy",
    "StringValidator",
    "TimeoutStrategy",
    "TransformStrategy",
    "TupleValidator",
    "UndefinedValidator",
    "UnionValidator",
    "UnknownKeys",
    "UnknownValidator",
    "XorValidator",
    "all_of",
    "and_",
    "any_",
    "any_of",
    "array",
    "async_validator",
    "boolean",
    "business",
    "coerce",
    "compare",
    "composite",
    "date_",
    "if_then_else",
    "intersection",
    "lazy",
    "literal",
    "native_enum",
    "negate",
    "never",
    "none",
    "not_",
    "number",
    "object_",
    "one_of",
    "one_of_values",
    "or_",
    "record",
    "ref",
    "slugify",
    "string",
    "tuple_",
    "undefined",
    "union",
    "unknown",
    "when",
    "xor",
]
