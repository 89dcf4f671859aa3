"""Common utilities shared by the valknobs packages.

- **Exceptions**: construction/configuration-time exception hierarchy
- **Registry**: explicit, thread-safe registry of named items
- **Retry**: retry executor with backoff, used by the async coordinator
"""

from valknobs_common.exceptions import (
    ConfigurationError,
    NotFoundError,
    OperationError,
    SchemaError,
    ValknobsError,
)
from valknobs_common.registry import Registry
from valknobs_common.retry import (
    BackoffStrategy,
    RetryConfig,
    RetryExecutor,
    RetryOutcome,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Exceptions
    "ValknobsError",
    "SchemaError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    # Registry
    "Registry",
    # Retry
    "BackoffStrategy",
    "RetryConfig",
    "RetryExecutor",
    "RetryOutcome",
]
