"""Composable data validation.

Validators are built fluently and return a ``ValidationResult`` instead of
raising:

```python
from valknobs import number, object_, string

user = object_({
    "name": string().min_length(2),
    "age": number().min(0),
})
result = user.validate({"name": "Jo", "age": -1})
result.success            # False
result.errors[0].code     # 'number.min'
result.errors[0].path     # ('age',)
```

Main pieces:

- **Results**: ``ValidationResult``, ``ValidationError``, ``ValidationContext``
  and the ``UNDEFINED`` marker for missing values
- **Validators**: ``string``, ``number``, ``boolean``, ``date``, ``array``,
  ``object_``, ``tuple_``, ``record``, ``business``, comparisons, special
  types and ``coerce``
- **Combinators**: ``and_``, ``or_``, ``not_``, ``xor``, ``union``,
  ``intersection``, ``lazy``, ``if_then_else`` (and the ``&``, ``|``, ``~``
  operators)
- **Async**: ``async_validator`` with debounce, timeout, retry and cancel
- **Construction**: ``ValidatorRegistry``, ``SchemaFactory``, ``load_schema``
  and ``ValidatorSettings``
"""

from valknobs.config import ValidatorSettings, load_config_file, substitute_env_vars
from valknobs.core import (
    CancellationToken,
    FunctionStrategy,
    Strategy,
    StrategyKind,
    ValidationPipeline,
    Validator,
    nullable,
    nullish,
    optional,
    strategy,
)
from valknobs.factory import SchemaFactory, load_schema
from valknobs.messages import MessageCatalog, get_catalog, register_locale, translate
from valknobs.paths import get_by_path, path_to_string, string_to_path
from valknobs.registry import (
    ValidatorRegistry,
    default_registry,
    init_default_registry,
    register_builtins,
    reset_default_registry,
)
from valknobs.results import (
    UNDEFINED,
    ValidationContext,
    ValidationError,
    ValidationResult,
    create_error,
    create_failure_result,
    create_success_result,
    is_nil,
)
from valknobs.validators import (
    AsyncValidator,
    BaseValidator,
    CoordinatorState,
    FieldRef,
    all_of,
    and_,
    any_,
    any_of,
    array,
    async_validator,
    boolean,
    business,
    coerce,
    compare,
    composite,
    if_then_else,
    intersection,
    lazy,
    literal,
    native_enum,
    negate,
    never,
    none,
    not_,
    number,
    object_,
    one_of,
    one_of_values,
    or_,
    record,
    ref,
    slugify,
    string,
    tuple_,
    undefined,
    union,
    unknown,
    when,
    xor,
)
from valknobs.validators import date_ as date

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Results
    "UNDEFINED",
    "ValidationContext",
    "ValidationError",
    "ValidationResult",
    "create_error",
    "create_failure_result",
    "create_success_result",
    "is_nil",
    "get_by_path",
    "path_to_string",
    "string_to_path",
    # Engine
    "CancellationToken",
    "FunctionStrategy",
    "Strategy",
    "StrategyKind",
    "ValidationPipeline",
    "Validator",
    "BaseValidator",
    "strategy",
    # Validators
    "any_",
    "array",
    "boolean",
    "business",
    "coerce",
    "compare",
    "composite",
    "date",
    "FieldRef",
    "literal",
    "native_enum",
    "never",
    "none",
    "number",
    "object_",
    "one_of_values",
    "record",
    "ref",
    "slugify",
    "string",
    "tuple_",
    "undefined",
    "unknown",
    # Decorators and combinators
    "all_of",
    "and_",
    "any_of",
    "if_then_else",
    "intersection",
    "lazy",
    "negate",
    "not_",
    "nullable",
    "nullish",
    "one_of",
    "optional",
    "or_",
    "union",
    "when",
    "xor",
    # Async
    "AsyncValidator",
    "CoordinatorState",
    "async_validator",
    # Messages
    "MessageCatalog",
    "get_catalog",
    "register_locale",
    "translate",
    # Construction
    "SchemaFactory",
    "ValidatorRegistry",
    "ValidatorSettings",
    "default_registry",
    "init_default_registry",
    "load_config_file",
    "load_schema",
    "register_builtins",
    "reset_default_registry",
    "substitute_env_vars",
]
