from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from shared.budget_settings import BudgetSettings

from .aggregator import OverheadTotals


@dataclass
class Profitability:
    total_billed: float
    profit_budgeted: float
    profit_actual: float
    margin_budgeted: Optional[float]
    margin_actual: Optional[float]
    cost_per_unit: Optional[float]
    break_even_price: Optional[float]
    suggested_price_if_underwater: Optional[float] = None
    recommendations: List[str] = field(default_factory=list)

    @property
    def underwater(self) -> bool:
        return self.profit_budgeted < 0


def compute_margin(profit: float, total_billed: float) -> Optional[float]:
    """Profit as a percentage of billings; `None` when nothing is billed."""
    if total_billed == 0:
        return None
    return profit / total_billed * 100


def compute_break_even_price(total_overhead_budgeted: float, unit_goal: float) -> Optional[float]:
    """Per-unit price at which budgeted profit is exactly zero."""
    if unit_goal == 0:
        return None
    return total_overhead_budgeted / unit_goal


def compute_profitability(
    overhead: OverheadTotals,
    unit_goal: int,
    price_per_unit: float,
    settings: BudgetSettings,
) -> Profitability:
    """
    Compare overhead against the revenue model (unit goal x unit price).

    Args:
        overhead: Budgeted and actual overhead totals across all blocks.
        unit_goal: Units the campaign expects to bill.
        price_per_unit: Price charged per unit.
        settings: Supplies the markup applied to the break-even price when the
            budget is underwater.
    Returns:
        Profitability with guarded ratios (`None` instead of inf/NaN) and, when
        budgeted profit is negative, a non-binding suggested price plus the
        standard recommendations.
    """
    total_billed = unit_goal * price_per_unit
    profit_budgeted = total_billed - overhead.budgeted
    profit_actual = total_billed - overhead.actual

    # Same number as cost_per_unit; both fields are part of the summary contract.
    break_even_price = compute_break_even_price(overhead.budgeted, unit_goal)
    cost_per_unit = break_even_price

    result = Profitability(
        total_billed=total_billed,
        profit_budgeted=profit_budgeted,
        profit_actual=profit_actual,
        margin_budgeted=compute_margin(profit_budgeted, total_billed),
        margin_actual=compute_margin(profit_actual, total_billed),
        cost_per_unit=cost_per_unit,
        break_even_price=break_even_price,
    )

    if result.underwater:
        if break_even_price is not None:
            result.suggested_price_if_underwater = break_even_price * settings.underwater_markup
        result.recommendations = _underwater_recommendations(result.suggested_price_if_underwater, settings)

    return result


def _underwater_recommendations(suggested_price: Optional[float], settings: BudgetSettings) -> List[str]:
    recommendations: List[str] = []
    if suggested_price is not None:
        markup_pct = (settings.underwater_markup - 1) * 100
        recommendations.append(
            f"Increase price per unit to ${suggested_price:,.2f} ({markup_pct:.0f}% above break-even)"
        )
    recommendations.append("Reduce overhead costs")
    recommendations.append("Increase unit goal efficiency")
    return recommendations
