"""Validation result types.

Everything that crosses the boundary between a validator and its caller lives
here: the per-call ``ValidationContext``, the ``ValidationError`` value
object, and the ``ValidationResult`` every ``validate`` call returns.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from dataclasses import field as dataclass_field
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from .core.cancellation import CancellationToken


class _Undefined:
    """Marker for a value that is absent, as opposed to present and ``None``."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Undefined:
        return self

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Any = _Undefined()

PathSegment = Union[str, int]
Path = tuple[PathSegment, ...]


def is_nil(value: Any) -> bool:
    """True for ``None`` and ``UNDEFINED``."""
    return value is None or value is UNDEFINED


@dataclass(frozen=True)
class ValidationContext:
    """Where in the validated tree a check is running.

    Contexts are immutable. Composite validators derive a child context per
    member with ``child()``, so sibling branches validated in the same pass
    never see each other's path.

    Attributes:
        path: Position in the overall tree (keys and integer indices)
        field: Leaf name, for convenience
        locale: Locale used to render messages
        data: Root value, for cross-field lookups
        metadata: Free-form caller metadata
        signal: Cancellation token of the async coordinator running this
            call, if any. Strategies that want to stop early check
            ``signal.cancelled``.
    """

    path: Path = ()
    field: str = ""
    locale: str = "en"
    data: Any = None
    metadata: Mapping[str, Any] = dataclass_field(default_factory=dict)
    signal: CancellationToken | None = None

    @classmethod
    def root(
        cls,
        data: Any = None,
        locale: str = "en",
        metadata: Mapping[str, Any] | None = None,
        signal: CancellationToken | None = None,
    ) -> ValidationContext:
        """Create the context for the top of a validation tree."""
        return cls(
            path=(),
            field="",
            locale=locale,
            data=data,
            metadata=dict(metadata or {}),
            signal=signal,
        )

    def child(self, key: PathSegment) -> ValidationContext:
        """Context for the member ``key`` of the value at this context."""
        return replace(self, path=(*self.path, key), field=str(key))

    def with_signal(self, signal: CancellationToken | None) -> ValidationContext:
        return replace(self, signal=signal)


@dataclass(frozen=True)
class ValidationError:
    """A single validation failure.

    ``code`` is a dotted ``<domain>.<rule>`` key (``string.minLength``,
    ``object.extraKeys``, ``async.timeout``). ``metadata`` holds the named
    parameters the message was interpolated with.
    """

    code: str
    message: str
    path: Path = ()
    field: str = ""
    metadata: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))
        if not self.field and self.path:
            object.__setattr__(self, "field", str(self.path[-1]))

    def with_message(self, message: str) -> ValidationError:
        return replace(self, message=message)

    def with_path(self, path: Sequence[PathSegment]) -> ValidationError:
        path = tuple(path)
        return replace(self, path=path, field=str(path[-1]) if path else "")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "path": list(self.path),
            "field": self.field,
        }
        if self.metadata is not None:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass
class ValidationResult:
    """Outcome of validating one value.

    ``data`` is only meaningful when ``success`` is true; failures carry
    ``data=None`` and a non-empty ``errors`` list. A successful result may
    legitimately carry ``None`` or ``UNDEFINED`` as its data.
    """

    success: bool
    data: Any = None
    errors: list[ValidationError] = dataclass_field(default_factory=list)

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.success

    @classmethod
    def ok(cls, data: Any = None) -> ValidationResult:
        """Create a successful result."""
        return cls(success=True, data=data, errors=[])

    @classmethod
    def fail(cls, errors: Iterable[ValidationError]) -> ValidationResult:
        """Create a failed result."""
        return cls(success=False, data=None, errors=list(errors))

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Combine two results; the second one's data wins when present."""
        data = other.data if other.data is not None else self.data
        return ValidationResult(
            success=self.success and other.success,
            data=data if self.success and other.success else None,
            errors=self.errors + other.errors,
        )

    def with_message(self, message: str) -> ValidationResult:
        """Copy of this result with every error message replaced."""
        if self.success:
            return self
        return ValidationResult(
            success=False,
            data=None,
            errors=[error.with_message(message) for error in self.errors],
        )

    @property
    def first_error(self) -> ValidationError | None:
        return self.errors[0] if self.errors else None

    def errors_for(self, path: Sequence[PathSegment] | str) -> list[ValidationError]:
        """Errors reported exactly at ``path`` (a tuple or a dotted string)."""
        from .paths import string_to_path

        target = string_to_path(path) if isinstance(path, str) else tuple(path)
        return [error for error in self.errors if error.path == target]

    def error_map(self) -> dict[str, list[str]]:
        """Messages grouped by dotted path string (``""`` for the root)."""
        from .paths import path_to_string

        grouped: dict[str, list[str]] = {}
        for error in self.errors:
            grouped.setdefault(path_to_string(error.path), []).append(error.message)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "data": None if self.data is UNDEFINED else self.data,
            "errors": [error.to_dict() for error in self.errors],
        }


def create_success_result(data: Any) -> ValidationResult:
    return ValidationResult.ok(data)


def create_failure_result(errors: Iterable[ValidationError]) -> ValidationResult:
    return ValidationResult.fail(errors)


def create_error(
    code: str,
    message: str,
    path: Sequence[PathSegment] = (),
    field: str | None = None,
    metadata: Mapping[str, Any] | None = None,
) -> ValidationError:
    """Build a ValidationError, deriving ``field`` from the path when not given."""
    path = tuple(path)
    if field is None:
        field = str(path[-1]) if path else ""
    return ValidationError(
        code=code,
        message=message,
        path=path,
        field=field,
        metadata=dict(metadata) if metadata is not None else None,
    )


def prefix_errors(
    errors: Iterable[ValidationError], prefix: Sequence[PathSegment]
) -> list[ValidationError]:
    """Re-root errors under ``prefix``.

    Errors whose path already starts with ``prefix`` are left alone, so a
    child validator that was handed a child context is not prefixed twice.
    """
    prefix = tuple(prefix)
    prefixed = []
    for error in errors:
        if error.path[: len(prefix)] == prefix:
            prefixed.append(error)
        else:
            prefixed.append(error.with_path(prefix + error.path))
    return prefixed
