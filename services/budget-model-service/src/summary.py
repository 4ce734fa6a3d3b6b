from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from shared.budget_settings import BudgetSettings

from .aggregator import aggregate_overhead, estimate_labor
from .budget_model import BACKGROUND_CHECK_LINE_TYPE, RECRUITING, BudgetModel, get_block
from .profitability import compute_profitability


@dataclass
class BudgetSummary:
    """
    Read-only computed view of a budget version.

    Export and reporting collaborators consume `to_dict()` verbatim. Guarded
    ratios are `None` rather than inf/NaN.
    """

    project_id: str
    project_label: str
    version: str
    status: str
    locked: bool
    updated_at: str
    assumptions: Dict[str, Any]
    price_per_unit: float
    blocks: List[Dict[str, Any]]
    labor_hours: Optional[float]
    base_labor_cost: Optional[float]
    effective_cost_multiplier: float
    loaded_labor_cost: Optional[float]
    implied_staffing: Optional[int]
    total_overhead_budgeted: float
    total_overhead_actual: float
    total_billed: float
    profit_budgeted: float
    profit_actual: float
    margin_budgeted: Optional[float]
    margin_actual: Optional[float]
    cost_per_unit: Optional[float]
    break_even_price: Optional[float]
    suggested_price_if_underwater: Optional[float]
    underwater: bool
    recommendations: List[str] = field(default_factory=list)
    cost_per_cleared_applicant: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_cost_per_cleared_applicant(model: BudgetModel) -> Optional[float]:
    """Background-check spend (actual) divided by the applicants who cleared."""
    cleared = model.assumptions.cleared_applicants
    if cleared == 0:
        return None
    recruiting = get_block(model, RECRUITING)
    spend = sum(line.actual for line in recruiting.lines if line.type == BACKGROUND_CHECK_LINE_TYPE)
    return spend / cleared


def build_summary(model: BudgetModel, settings: BudgetSettings) -> BudgetSummary:
    """
    Derive every computed figure for `model` from its current inputs.

    Args:
        model: A fully recomputed BudgetModel.
        settings: Labor-planning constants and the underwater markup.
    Returns:
        BudgetSummary; building it does not mutate `model`.
    """
    labor = estimate_labor(model.assumptions, settings)
    overhead = aggregate_overhead(model.blocks)
    profitability = compute_profitability(
        overhead,
        unit_goal=model.assumptions.unit_goal,
        price_per_unit=model.price_per_unit,
        settings=settings,
    )

    assumptions = asdict(model.assumptions)
    assumptions["start_date"] = model.assumptions.start_date.isoformat()
    assumptions["end_date"] = model.assumptions.end_date.isoformat()

    return BudgetSummary(
        project_id=model.project_id,
        project_label=model.project_label,
        version=model.version,
        status=model.status,
        locked=model.locked,
        updated_at=model.updated_at.isoformat(),
        assumptions=assumptions,
        price_per_unit=model.price_per_unit,
        blocks=[block.to_dict() for block in model.blocks],
        labor_hours=labor.labor_hours,
        base_labor_cost=labor.base_labor_cost,
        effective_cost_multiplier=labor.effective_cost_multiplier,
        loaded_labor_cost=labor.loaded_labor_cost,
        implied_staffing=labor.implied_staffing,
        total_overhead_budgeted=overhead.budgeted,
        total_overhead_actual=overhead.actual,
        total_billed=profitability.total_billed,
        profit_budgeted=profitability.profit_budgeted,
        profit_actual=profitability.profit_actual,
        margin_budgeted=profitability.margin_budgeted,
        margin_actual=profitability.margin_actual,
        cost_per_unit=profitability.cost_per_unit,
        break_even_price=profitability.break_even_price,
        suggested_price_if_underwater=profitability.suggested_price_if_underwater,
        underwater=profitability.underwater,
        recommendations=list(profitability.recommendations),
        cost_per_cleared_applicant=compute_cost_per_cleared_applicant(model),
    )
