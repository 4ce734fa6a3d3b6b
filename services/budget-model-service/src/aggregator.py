from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from shared.budget_settings import BudgetSettings

from .assumptions import Assumptions, effective_cost_multiplier
from .ledger import Block


@dataclass
class LaborEstimate:
    """
    Planning estimate for production labor.

    `loaded_labor_cost` is advisory: it is not part of overhead unless the Hourly
    Labor block is seeded from it. Fields that divide by `units_per_hour` are
    `None` when the rate is zero.
    """

    labor_hours: Optional[float]
    base_labor_cost: Optional[float]
    effective_cost_multiplier: float
    loaded_labor_cost: Optional[float]
    implied_staffing: Optional[int]


@dataclass
class OverheadTotals:
    budgeted: float
    actual: float

    @property
    def delta(self) -> float:
        return self.actual - self.budgeted


def compute_labor_hours(unit_goal: float, units_per_hour: float) -> Optional[float]:
    if units_per_hour == 0:
        return None
    return unit_goal / units_per_hour


def compute_implied_staffing(
    labor_hours: Optional[float],
    timeframe_months: int,
    settings: BudgetSettings,
) -> Optional[int]:
    """
    Full-time-equivalent headcount needed to deliver `labor_hours` within the timeframe.

    Uses the configured work week (40 hours by default) and weeks-per-month
    constant (4.33 by default), rounding up to whole people.
    """
    if labor_hours is None or timeframe_months <= 0:
        return None
    hours_per_person = settings.hours_per_week * timeframe_months * settings.weeks_per_month
    return math.ceil(labor_hours / hours_per_person)


def estimate_labor(assumptions: Assumptions, settings: BudgetSettings) -> LaborEstimate:
    multiplier = effective_cost_multiplier(assumptions)
    labor_hours = compute_labor_hours(assumptions.unit_goal, assumptions.units_per_hour)

    base_labor_cost: Optional[float] = None
    loaded_labor_cost: Optional[float] = None
    if labor_hours is not None:
        base_labor_cost = labor_hours * assumptions.pay_per_hour
        loaded_labor_cost = base_labor_cost * multiplier

    return LaborEstimate(
        labor_hours=labor_hours,
        base_labor_cost=base_labor_cost,
        effective_cost_multiplier=multiplier,
        loaded_labor_cost=loaded_labor_cost,
        implied_staffing=compute_implied_staffing(labor_hours, assumptions.timeframe_months, settings),
    )


def aggregate_overhead(blocks: Iterable[Block]) -> OverheadTotals:
    """Sum block totals into the campaign's overhead, budgeted and actual."""
    budgeted = 0.0
    actual = 0.0
    for block in blocks:
        budgeted += block.total_budgeted
        actual += block.total_actual
    return OverheadTotals(budgeted=budgeted, actual=actual)
