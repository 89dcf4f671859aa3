"""The validator contract shared by every validator, decorator and combinator."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..results import UNDEFINED, ValidationContext, ValidationResult

if TYPE_CHECKING:
    from ..validators.logic import AndValidator, NotValidator, OrValidator
    from .decorators import (
        DefaultValidator,
        MessageValidator,
        NullableValidator,
        OptionalValidator,
        PreprocessValidator,
        TransformValidator,
    )


class Validator(ABC):
    """Anything that can validate a value.

    ``type_name`` is the discriminator tag (``"string"``, ``"object"``,
    ``"and"`` ...). Implementations must not keep per-call state on the
    instance: one validator is shared by every caller.

    Operators compose validators:

    - ``a & b``: both must pass, output of ``a`` feeds ``b``
    - ``a | b``: first success wins
    - ``~a``: must fail
    """

    type_name: str = "unknown"

    @abstractmethod
    def validate(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        """Validate ``value`` synchronously."""

    async def validate_async(
        self, value: Any = UNDEFINED, context: ValidationContext | None = None
    ) -> ValidationResult:
        """Validate ``value``, awaiting async strategies and children."""
        return self.validate(value, context)

    @property
    def is_async(self) -> bool:
        """True when some part of this validator needs ``validate_async``."""
        return False

    def is_valid(self, value: Any) -> bool:
        return self.validate(value).success

    async def is_valid_async(self, value: Any) -> bool:
        return (await self.validate_async(value)).success

    def describe(self) -> dict[str, Any]:
        return {"type": self.type_name}

    @staticmethod
    def _context(value: Any, context: ValidationContext | None) -> ValidationContext:
        return context if context is not None else ValidationContext.root(data=value)

    # Decorators

    def optional(self) -> OptionalValidator:
        """Accept ``UNDEFINED`` without running this validator."""
        from .decorators import OptionalValidator

        return OptionalValidator(self)

    def nullable(self) -> NullableValidator:
        """Accept ``None`` without running this validator."""
        from .decorators import NullableValidator

        return NullableValidator(self)

    def nullish(self) -> NullableValidator:
        """Accept both ``None`` and ``UNDEFINED``."""
        return self.optional().nullable()

    def default(self, value: Any) -> DefaultValidator:
        """Replace ``None``/``UNDEFINED`` input with ``value``."""
        from .decorators import DefaultValidator

        return DefaultValidator(self, value)

    def transform(self, fn: Callable[[Any], Any]) -> TransformValidator:
        """Map successful output through ``fn``."""
        from .decorators import TransformValidator

        return TransformValidator(self, fn)

    def preprocess(self, fn: Callable[[Any], Any]) -> PreprocessValidator:
        """Map input through ``fn`` before validating it."""
        from .decorators import PreprocessValidator

        return PreprocessValidator(self, fn)

    def with_message(self, message: str) -> MessageValidator:
        """Report ``message`` for every error this validator produces."""
        from .decorators import MessageValidator

        return MessageValidator(self, message)

    # Operators

    def __and__(self, other: Validator) -> AndValidator:
        from ..validators.logic import AndValidator

        if isinstance(self, AndValidator) and self.custom_message is None:
            return AndValidator([*self.validators, other])
        return AndValidator([self, other])

    def __or__(self, other: Validator) -> OrValidator:
        from ..validators.logic import OrValidator

        if isinstance(self, OrValidator) and self.custom_message is None:
            return OrValidator([*self.validators, other])
        return OrValidator([self, other])

    def __invert__(self) -> NotValidator:
        from ..validators.logic import NotValidator

        return NotValidator(self)
