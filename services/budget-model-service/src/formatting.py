"""Display helpers for budget figures (USD, en-US grouping)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from .summary import BudgetSummary

UNDEFINED_MARKER = "—"


def format_currency(value: Optional[float]) -> str:
    """Whole-dollar amount, e.g. ``$282,700`` or ``-$85,700``."""
    if value is None:
        return UNDEFINED_MARKER
    sign = "-" if round(value) < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_currency_decimal(value: Optional[float]) -> str:
    """Amount with cents, e.g. ``$4.35``."""
    if value is None:
        return UNDEFINED_MARKER
    sign = "-" if round(value, 2) < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_margin(value: Optional[float]) -> str:
    if value is None:
        return UNDEFINED_MARKER
    return f"{value:.1f}%"


def format_multiplier(value: float) -> str:
    return f"{value:.2f}x"


def format_hours(value: Optional[float]) -> str:
    if value is None:
        return UNDEFINED_MARKER
    return f"{value:,.0f} hrs"


def format_summary_headlines(summary: BudgetSummary) -> Dict[str, str]:
    """Render the headline figures shown on the budget dashboard cards."""
    return {
        "labor_hours": format_hours(summary.labor_hours),
        "base_labor_cost": format_currency(summary.base_labor_cost),
        "effective_cost_multiplier": format_multiplier(summary.effective_cost_multiplier),
        "loaded_labor_cost": format_currency(summary.loaded_labor_cost),
        "implied_staffing": UNDEFINED_MARKER if summary.implied_staffing is None else f"~{summary.implied_staffing}",
        "total_overhead_budgeted": format_currency(summary.total_overhead_budgeted),
        "total_overhead_actual": format_currency(summary.total_overhead_actual),
        "total_billed": format_currency(summary.total_billed),
        "profit_budgeted": format_currency(summary.profit_budgeted),
        "profit_actual": format_currency(summary.profit_actual),
        "margin_budgeted": format_margin(summary.margin_budgeted),
        "margin_actual": format_margin(summary.margin_actual),
        "cost_per_unit": format_currency_decimal(summary.cost_per_unit),
        "break_even_price": format_currency_decimal(summary.break_even_price),
        "suggested_price_if_underwater": format_currency_decimal(summary.suggested_price_if_underwater),
        "cost_per_cleared_applicant": format_currency(summary.cost_per_cleared_applicant),
    }
