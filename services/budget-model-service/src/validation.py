from __future__ import annotations

import math
from datetime import date
from numbers import Real
from typing import Any

from .errors import InvalidInputError


def require_finite(field: str, value: Any) -> float:
    """Coerce `value` to float, rejecting booleans, strings, NaN, and infinities."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidInputError(f"{field} must be a number (received {value!r})", field=field)
    number = float(value)
    if not math.isfinite(number):
        raise InvalidInputError(f"{field} must be a finite number (received {value!r})", field=field)
    return number


def require_non_negative(field: str, value: Any) -> float:
    number = require_finite(field, value)
    if number < 0:
        raise InvalidInputError(f"{field} must be zero or greater (received {value!r})", field=field)
    return number


def require_positive(field: str, value: Any) -> float:
    number = require_finite(field, value)
    if number <= 0:
        raise InvalidInputError(f"{field} must be greater than zero (received {value!r})", field=field)
    return number


def require_count(field: str, value: Any, *, minimum: int = 0) -> int:
    """
    Validate a whole-number count such as a role count or number of months.

    Integral floats (``2.0``) are accepted and returned as ints; anything with a
    fractional part or below `minimum` is rejected.
    """
    number = require_finite(field, value)
    if not number.is_integer():
        raise InvalidInputError(f"{field} must be a whole number (received {value!r})", field=field)
    if number < minimum:
        raise InvalidInputError(f"{field} must be at least {minimum} (received {value!r})", field=field)
    return int(number)


def require_text(field: str, value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidInputError(f"{field} must be text (received {value!r})", field=field)
    return value


def require_date(field: str, value: Any) -> date:
    """Accept a `date` or an ISO-8601 (YYYY-MM-DD) string."""
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidInputError(f"{field} must be an ISO date (received {value!r})", field=field) from exc
    raise InvalidInputError(f"{field} must be a date (received {value!r})", field=field)
