"""Tests for assumptions.py - assumption edits and their constraints."""

from datetime import date

import pytest
from src.assumptions import Assumptions, edit_assumption, effective_cost_multiplier, validate_assumptions
from src.errors import InvalidInputError


def make_assumptions() -> Assumptions:
    return Assumptions(
        timeframe_months=3,
        start_date=date(2026, 2, 1),
        end_date=date(2026, 4, 30),
        unit_goal=65000,
        units_per_hour=22,
        pay_per_hour=25,
        wage_buffer_pct=15,
        w2_burden_pct=35,
        cleared_applicants=18,
    )


def test_edit_returns_copy():
    original = make_assumptions()

    updated = edit_assumption(original, "unit_goal", 70000)

    assert updated.unit_goal == 70000
    assert original.unit_goal == 65000


def test_iso_date_strings_are_parsed():
    updated = edit_assumption(make_assumptions(), "end_date", "2026-05-31")
    assert updated.end_date == date(2026, 5, 31)


def test_end_before_start_is_rejected():
    with pytest.raises(InvalidInputError) as excinfo:
        edit_assumption(make_assumptions(), "end_date", "2026-01-15")
    assert excinfo.value.field == "end_date"


def test_start_after_end_is_rejected():
    with pytest.raises(InvalidInputError):
        edit_assumption(make_assumptions(), "start_date", date(2026, 6, 1))


@pytest.mark.parametrize(
    "field, value",
    [
        ("timeframe_months", 0),
        ("timeframe_months", 2.5),
        ("unit_goal", -1),
        ("units_per_hour", 0),
        ("units_per_hour", float("inf")),
        ("pay_per_hour", -0.01),
        ("wage_buffer_pct", -5),
        ("w2_burden_pct", float("nan")),
        ("cleared_applicants", -1),
        ("start_date", "next tuesday"),
        ("start_date", 20260201),
    ],
)
def test_out_of_constraint_values_are_rejected(field, value):
    with pytest.raises(InvalidInputError) as excinfo:
        edit_assumption(make_assumptions(), field, value)
    assert excinfo.value.field == field


def test_unknown_assumption_is_rejected():
    with pytest.raises(InvalidInputError):
        edit_assumption(make_assumptions(), "price_per_unit", 5)


def test_validate_assumptions_accepts_seed_values():
    assert validate_assumptions(make_assumptions()) == make_assumptions()


def test_effective_cost_multiplier():
    assert effective_cost_multiplier(make_assumptions()) == pytest.approx(1.5)
