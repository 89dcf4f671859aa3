"""Date validator and its strategies.

Accepts ``datetime.date`` and ``datetime.datetime`` values, ISO 8601 strings
and POSIX timestamps. Comparisons treat a plain ``date`` as midnight and a
naive ``datetime`` as local time.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any, Union

from valknobs_common.exceptions import SchemaError

from ..core.strategy import Strategy
from ..results import ValidationContext, ValidationResult
from .base import BaseValidator

DateLike = Union[date, datetime, str]


def parse_date(value: Any) -> date | datetime | None:
    """Best-effort conversion to a date or datetime; ``None`` when impossible."""
    if isinstance(value, (date, datetime)):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def to_aware(value: date | datetime) -> datetime:
    """Comparable, timezone-aware form of ``value``.

    Naive values near ``date.min`` or ``datetime.max`` cannot be converted
    through the local clock; they take the current local offset instead.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        try:
            value = value.astimezone()
        except (OverflowError, OSError, ValueError):
            value = value.replace(tzinfo=datetime.now().astimezone().tzinfo)
    return value


def local_date(value: date | datetime) -> date:
    """Calendar date of ``value`` in local time."""
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        return value.date()
    try:
        return value.astimezone().date()
    except (OverflowError, OSError, ValueError):
        return value.date()


def _bound(value: DateLike, name: str) -> date | datetime:
    parsed = parse_date(value)
    if parsed is None:
        raise SchemaError(f"{name} is not a valid date", context={name: value})
    return parsed


def age_on(birth: date, today: date) -> int:
    """Completed years between ``birth`` and ``today``."""
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


class MinDateStrategy(Strategy):
    name = "minDate"

    def __init__(self, minimum: DateLike):
        self.minimum = _bound(minimum, "min")

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if to_aware(value) < to_aware(self.minimum):
            return self.failure("date.min", context, {"date": self.minimum.isoformat()})
        return self.success(value)


class MaxDateStrategy(Strategy):
    name = "maxDate"

    def __init__(self, maximum: DateLike):
        self.maximum = _bound(maximum, "max")

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if to_aware(value) > to_aware(self.maximum):
            return self.failure("date.max", context, {"date": self.maximum.isoformat()})
        return self.success(value)


class PastStrategy(Strategy):
    name = "isPast"

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if to_aware(value) >= datetime.now().astimezone():
            return self.failure("date.past", context)
        return self.success(value)


class FutureStrategy(Strategy):
    name = "isFuture"

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if to_aware(value) <= datetime.now().astimezone():
            return self.failure("date.future", context)
        return self.success(value)


class TodayStrategy(Strategy):
    name = "isToday"

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if local_date(value) != date.today():
            return self.failure("date.today", context)
        return self.success(value)


class WeekdayStrategy(Strategy):
    """Monday to Friday."""

    name = "isWeekday"

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if value.weekday() >= 5:
            return self.failure("date.weekday", context)
        return self.success(value)


class WeekendStrategy(Strategy):
    name = "isWeekend"

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        if value.weekday() < 5:
            return self.failure("date.weekend", context)
        return self.success(value)


class MinAgeStrategy(Strategy):
    """Birth date at least ``years`` ago."""

    name = "minAge"

    def __init__(self, years: int):
        self.years = years

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        birth = value.date() if isinstance(value, datetime) else value
        if age_on(birth, date.today()) < self.years:
            return self.failure("date.minAge", context, {"years": self.years})
        return self.success(value)


class MaxAgeStrategy(Strategy):
    name = "maxAge"

    def __init__(self, years: int):
        self.years = years

    def validate(self, value: date, context: ValidationContext) -> ValidationResult:
        birth = value.date() if isinstance(value, datetime) else value
        if age_on(birth, date.today()) > self.years:
            return self.failure("date.maxAge", context, {"years": self.years})
        return self.success(value)


class DateValidator(BaseValidator):
    """Validates dates; string and timestamp input is parsed."""

    type_name = "date"

    def check_type(self, value: Any, context: ValidationContext) -> ValidationResult:
        parsed = parse_date(value)
        if parsed is None:
            return self.type_error(context)
        return ValidationResult.ok(parsed)

    def min(self, minimum: DateLike, message: str | None = None) -> DateValidator:
        return self._add_strategy(MinDateStrategy(minimum), message)

    def max(self, maximum: DateLike, message: str | None = None) -> DateValidator:
        return self._add_strategy(MaxDateStrategy(maximum), message)

    def range(self, minimum: DateLike, maximum: DateLike) -> DateValidator:
        if to_aware(_bound(minimum, "min")) > to_aware(_bound(maximum, "max")):
            raise SchemaError("date range minimum is after maximum",
                              context={"min": minimum, "max": maximum})
        return self.min(minimum).max(maximum)

    def between(self, minimum: DateLike, maximum: DateLike) -> DateValidator:
        return self.range(minimum, maximum)

    def past(self, message: str | None = None) -> DateValidator:
        return self._add_strategy(PastStrategy(), message)

    def future(self, message: str | None = None) -> DateValidator:
        return self._add_strategy(FutureStrategy(), message)

    def today(self, message: str | None = None) -> DateValidator:
        return self._add_strategy(TodayStrategy(), message)

    def weekday(self, message: str | None = None) -> DateValidator:
        return self._add_strategy(WeekdayStrategy(), message)

    def weekend(self, message: str | None = None) -> DateValidator:
        return self._add_strategy(WeekendStrategy(), message)

    def min_age(self, years: int, message: str | None = None) -> DateValidator:
        return self._add_strategy(MinAgeStrategy(years), message)

    def max_age(self, years: int, message: str | None = None) -> DateValidator:
        return self._add_strategy(MaxAgeStrategy(years), message)

    def age_range(self, min_years: int, max_years: int) -> DateValidator:
        return self.min_age(min_years).max_age(max_years)


def date_() -> DateValidator:
    """Create a date validator."""
    return DateValidator()
