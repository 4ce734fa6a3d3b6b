from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Dict, List, Literal, Optional, Tuple

from .assumptions import Assumptions, validate_assumptions
from .errors import ImmutableBudgetError, InvalidInputError, UnknownProjectError
from .ledger import Block
from .line_items import ExpenseLine, SalaryLine, SimpleCostLine

BudgetStatus = Literal["draft", "approved", "in-flight", "closed"]

# Workflow order; statuses only ever move to the right.
STATUS_ORDER: Tuple[BudgetStatus, ...] = ("draft", "approved", "in-flight", "closed")

SALARIES = "salaries"
HOURLY_LABOR = "hourly_labor"
HOUSING_TRAVEL = "housing_travel"
RECRUITING = "recruiting"
MISC = "misc"

BLOCK_KEYS: Tuple[str, ...] = (SALARIES, HOURLY_LABOR, HOUSING_TRAVEL, RECRUITING, MISC)

BACKGROUND_CHECK_LINE_TYPE = "Background Checks"


@dataclass(frozen=True)
class ProjectProfile:
    id: str
    label: str
    timeframe_months: int
    start_date: date
    end_date: date


PROJECTS: Dict[str, ProjectProfile] = {
    "ca-45": ProjectProfile("ca-45", "CA-45", 3, date(2026, 2, 1), date(2026, 4, 30)),
    "nj-11": ProjectProfile("nj-11", "NJ-11", 4, date(2026, 2, 1), date(2026, 5, 31)),
    "va-24": ProjectProfile("va-24", "VA-24", 2, date(2026, 2, 1), date(2026, 3, 31)),
}


@dataclass
class BudgetModel:
    """
    One campaign budget version: assumptions, cost blocks, and pricing.

    The model is plain data. Commands copy it, mutate the copy, and run
    `recompute` before the copy replaces the working model, so readers only ever
    see a fully recomputed budget.
    """

    project_id: str
    project_label: str
    assumptions: Assumptions
    blocks: List[Block]
    price_per_unit: float
    status: BudgetStatus = "draft"
    version: str = "v1"
    locked: bool = False
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def get_project(project_id: str) -> ProjectProfile:
    profile = PROJECTS.get((project_id or "").strip().lower())
    if profile is None:
        raise UnknownProjectError(project_id)
    return profile


def get_block(model: BudgetModel, block_key: str) -> Block:
    for block in model.blocks:
        if block.key == block_key:
            return block
    raise InvalidInputError(f"Unknown budget block '{block_key}'", field="block")


def ensure_mutable(model: BudgetModel) -> None:
    """Raise ImmutableBudgetError when the model is locked or already closed."""
    if model.locked or model.status == "closed":
        raise ImmutableBudgetError(model.version, model.status)


def recompute(model: BudgetModel) -> BudgetModel:
    """Re-derive every line's budgeted value from the current inputs."""
    timeframe_months = model.assumptions.timeframe_months
    for block in model.blocks:
        block.recompute(timeframe_months)
    return model


def touch(model: BudgetModel) -> None:
    model.updated_at = datetime.now(timezone.utc)


def next_status(status: BudgetStatus) -> Optional[BudgetStatus]:
    index = STATUS_ORDER.index(status)
    if index + 1 >= len(STATUS_ORDER):
        return None
    return STATUS_ORDER[index + 1]


def create_default_budget(project_id: str = "ca-45") -> BudgetModel:
    """
    Build the seed budget for a project.

    The seed mirrors the field team's starting sheet: four salaried leadership
    roles, a flat production-labor estimate, housing and travel, recruiting spend,
    and miscellaneous tooling. The project's timeframe and dates replace the
    defaults.
    """
    profile = get_project(project_id)
    assumptions = validate_assumptions(
        Assumptions(
            timeframe_months=profile.timeframe_months,
            start_date=profile.start_date,
            end_date=profile.end_date,
            unit_goal=65000,
            units_per_hour=22,
            pay_per_hour=25,
            wage_buffer_pct=15,
            w2_burden_pct=35,
            cleared_applicants=18,
        )
    )
    model = BudgetModel(
        project_id=profile.id,
        project_label=profile.label,
        assumptions=assumptions,
        blocks=_seed_blocks(),
        price_per_unit=4.50,
    )
    return recompute(model)


def _seed_blocks() -> List[Block]:
    return [
        Block(
            key=SALARIES,
            label="Salaries",
            kind="salary",
            lines=[
                SalaryLine("1", "State Director", 8000, 1, actual=16000),
                SalaryLine("2", "Project Manager", 6500, 2, actual=26000),
                SalaryLine("3", "Regional Manager", 5500, 3, actual=33000),
                SalaryLine("4", "Field Director", 4500, 4, actual=36000),
            ],
            add_defaults={"position": "New Position", "pay_per_month": 5000, "role_count": 1},
        ),
        Block(
            key=HOURLY_LABOR,
            label="Hourly Labor",
            kind="simple_cost",
            lines=[SimpleCostLine("1", "Production Labor", 120000, actual=72000)],
            add_defaults={"type": "Labor Adjustment", "estimated_cost": 0},
        ),
        Block(
            key=HOUSING_TRAVEL,
            label="Housing + Travel",
            kind="expense",
            lines=[
                ExpenseLine("1", "Housing", 2000, 5, 3, actual=20000),
                ExpenseLine("2", "Travel", 800, 8, 3, actual=12800),
            ],
            add_defaults={"type": "New Expense", "monthly_cost": 1000, "units": 1},
        ),
        Block(
            key=RECRUITING,
            label="Recruiting",
            kind="simple_cost",
            lines=[
                SimpleCostLine("1", "Indeed Ads", 5000, actual=4200),
                SimpleCostLine("2", "Referral Bonuses", 3000, actual=2400),
                SimpleCostLine("3", "Gas Cards", 4000, actual=3100),
                SimpleCostLine("4", BACKGROUND_CHECK_LINE_TYPE, 2500, actual=1800),
            ],
            add_defaults={"type": "New Item", "estimated_cost": 1000},
        ),
        Block(
            key=MISC,
            label="Misc",
            kind="simple_cost",
            lines=[
                SimpleCostLine("1", "Voter Contact App", 8000, actual=8000),
                SimpleCostLine("2", "GC Cut", 15000, actual=10000),
                SimpleCostLine("3", "Misc", 5000, actual=2800),
            ],
            add_defaults={"type": "New Misc Item", "estimated_cost": 1000},
        ),
    ]
