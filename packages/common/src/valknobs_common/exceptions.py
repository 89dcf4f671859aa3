"""Common exception hierarchy for the valknobs packages.

Validation failures are never raised: validators report them through a
``ValidationResult``. The exceptions below cover the remaining cases, all of
which happen while a schema is being *built*, configured, or looked up:

- Invalid construction arguments (negative lengths, ``min > max``)
- Configuration files or definitions that cannot be turned into validators
- Registry lookups and duplicate registrations

Example:
    ```python
    from valknobs_common.exceptions import SchemaError, ValknobsError

    try:
        string().min_length(-1)
    except SchemaError as e:
        logger.error("Bad schema: %s", e)
        if e.context:
            logger.error("Context: %s", e.context)
    ```
"""

from typing import Any, Dict


class ValknobsError(Exception):
    """Base exception for all valknobs packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (field names, keys, etc.)
        details: Alternative to context (both are supported)

    Example:
        ```python
        error = ValknobsError(
            "Registration failed",
            context={"name": "email", "registry": "validators"}
        )
        str(error)
        # 'Registration failed'
        error.context
        # {'name': 'email', 'registry': 'validators'}
        ```
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        # Details takes precedence if both are provided
        self.context = details or context or {}
        self.details = self.context


class SchemaError(ValknobsError):
    """Raised when a validator is constructed with invalid arguments.

    Example:
        ```python
        raise SchemaError(
            "min length cannot be negative",
            context={"min": -1}
        )
        ```
    """

    pass


class ConfigurationError(ValknobsError):
    """Raised when a settings source or schema definition is invalid.

    Common scenarios include:
    - Unknown validator type in a schema definition
    - Unknown rule name for a validator type
    - Unsupported settings file format

    Example:
        ```python
        raise ConfigurationError(
            "Unknown validator type",
            context={"type": "strnig", "available": ["string", "number"]}
        )
        ```
    """

    pass


class NotFoundError(ValknobsError):
    """Raised when a requested registry entry does not exist."""

    pass


class OperationError(ValknobsError):
    """Raised when an operation cannot be performed.

    The registry raises this for duplicate registrations.
    """

    pass


__all__ = [
    "ValknobsError",
    "SchemaError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
]
