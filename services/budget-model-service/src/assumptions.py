from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Dict

from .errors import InvalidInputError
from .validation import require_count, require_date, require_non_negative, require_positive


@dataclass
class Assumptions:
    """
    Timeline and production-rate inputs that drive labor planning.

    `unit_goal` is the total number of billable units (e.g., doors knocked) the
    campaign expects to deliver over `timeframe_months`. Percentages are stored as
    whole numbers (15 means 15%).
    """

    timeframe_months: int
    start_date: date
    end_date: date
    unit_goal: int
    units_per_hour: float
    pay_per_hour: float
    wage_buffer_pct: float
    w2_burden_pct: float
    cleared_applicants: int = 0


_FIELD_VALIDATORS: Dict[str, Callable[[str, Any], Any]] = {
    "timeframe_months": lambda field, value: require_count(field, value, minimum=1),
    "start_date": require_date,
    "end_date": require_date,
    "unit_goal": require_count,
    "units_per_hour": require_positive,
    "pay_per_hour": require_non_negative,
    "wage_buffer_pct": require_non_negative,
    "w2_burden_pct": require_non_negative,
    "cleared_applicants": require_count,
}

ASSUMPTION_FIELDS = frozenset(_FIELD_VALIDATORS)


def edit_assumption(assumptions: Assumptions, field: str, value: Any) -> Assumptions:
    """
    Return a copy of `assumptions` with `field` set to a validated `value`.

    Raises:
        InvalidInputError: unknown field, out-of-constraint value, or a date edit
            that would place the end date before the start date.
    """
    validator = _FIELD_VALIDATORS.get(field)
    if validator is None:
        raise InvalidInputError(f"Unknown assumption '{field}'", field=field)

    updated = replace(assumptions, **{field: validator(field, value)})
    if updated.end_date < updated.start_date:
        raise InvalidInputError(
            f"end_date ({updated.end_date.isoformat()}) must not be before start_date "
            f"({updated.start_date.isoformat()})",
            field=field,
        )
    return updated


def validate_assumptions(assumptions: Assumptions) -> Assumptions:
    """Run every field validator over a fully constructed Assumptions instance."""
    for field in _FIELD_VALIDATORS:
        assumptions = edit_assumption(assumptions, field, getattr(assumptions, field))
    return assumptions


def effective_cost_multiplier(assumptions: Assumptions) -> float:
    """Combined load factor: wage buffer and W2 burden are added, not compounded."""
    return 1 + assumptions.wage_buffer_pct / 100 + assumptions.w2_burden_pct / 100
