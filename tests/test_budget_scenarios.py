"""End-to-end budget scenarios: seed -> edits -> lock -> fork -> delta."""

from __future__ import annotations

import math

import pytest
from shared.budget_settings import BudgetSettings
from src.budget_model import HOURLY_LABOR, SALARIES, create_default_budget
from src.commands import BudgetCommand
from src.errors import ImmutableBudgetError, RowNotFoundError
from src.formatting import format_summary_headlines
from src.versioning import BudgetWorkspace

SETTINGS = BudgetSettings()


def _edit_field(block: str, line_id: str, field: str, value: float) -> BudgetCommand:
    return BudgetCommand("editField", {"block": block, "line_id": line_id, "field": field, "value": value})


@pytest.mark.integration
def test_trimming_hourly_labor_brings_budget_above_water() -> None:
    workspace = BudgetWorkspace(create_default_budget("ca-45"), SETTINGS)
    assert workspace.summary().underwater is True

    workspace.dispatch(_edit_field(HOURLY_LABOR, "1", "estimated_cost", 24500))
    summary = workspace.summary()

    assert summary.total_overhead_budgeted == pytest.approx(282700.0)
    assert summary.total_billed == pytest.approx(292500.0)
    assert summary.profit_budgeted == pytest.approx(9800.0)
    assert summary.margin_budgeted == pytest.approx(3.3504, abs=1e-4)
    assert summary.break_even_price == pytest.approx(4.3492, abs=1e-4)
    assert summary.underwater is False
    assert summary.suggested_price_if_underwater is None
    assert summary.recommendations == []

    headlines = format_summary_headlines(summary)
    assert headlines["total_overhead_budgeted"] == "$282,700"
    assert headlines["margin_budgeted"] == "3.4%"


@pytest.mark.integration
def test_labor_estimate_scenario() -> None:
    summary = BudgetWorkspace(create_default_budget(), SETTINGS).summary()

    assert summary.labor_hours == pytest.approx(2954.545, abs=1e-3)
    assert summary.base_labor_cost == pytest.approx(73863.64, abs=1e-2)
    assert summary.effective_cost_multiplier == pytest.approx(1.5)
    assert summary.loaded_labor_cost == pytest.approx(110795.45, abs=1e-2)
    assert summary.implied_staffing == 6


@pytest.mark.integration
def test_full_version_lifecycle() -> None:
    workspace = BudgetWorkspace(create_default_budget("nj-11"), SETTINGS)

    workspace.dispatch(_edit_field(SALARIES, "1", "role_count", 2))
    workspace.dispatch(BudgetCommand("seedHourlyLabor", {}))
    approved = workspace.lock_version()
    assert approved.status == "approved"

    with pytest.raises(ImmutableBudgetError):
        workspace.dispatch(BudgetCommand("editPrice", {"value": 5.25}))

    workspace.fork_version()
    workspace.dispatch(BudgetCommand("editPrice", {"value": 5.25}))
    in_flight = workspace.lock_version("in-flight")

    assert [item.version for item in workspace.list_versions()] == ["v1", "v2"]
    assert in_flight.fingerprint != approved.fingerprint

    delta = workspace.version_delta()
    assert delta is not None
    assert delta.previous_version == "v1"
    assert delta.current_version == "v2"
    assert delta.total_overhead_budgeted == pytest.approx(0.0)
    assert delta.profit_budgeted == pytest.approx(65000 * 0.75)

    closed_fork = workspace.fork_version()
    assert closed_fork.version == "v3"
    assert workspace.get_version("v1").model.price_per_unit == pytest.approx(4.50)


@pytest.mark.integration
def test_rejected_edits_leave_summary_untouched() -> None:
    workspace = BudgetWorkspace(create_default_budget(), SETTINGS)
    before = workspace.summary().to_dict()

    with pytest.raises(RowNotFoundError):
        workspace.dispatch(BudgetCommand("remove", {"block": SALARIES, "line_id": "404"}))

    after = workspace.summary().to_dict()
    before.pop("updated_at")
    after.pop("updated_at")
    assert after == before


@pytest.mark.integration
def test_zero_denominators_stay_finite() -> None:
    workspace = BudgetWorkspace(create_default_budget(), SETTINGS)
    workspace.dispatch(BudgetCommand("editAssumption", {"field": "unit_goal", "value": 0}))
    workspace.dispatch(BudgetCommand("editPrice", {"value": 0}))

    payload = workspace.summary().to_dict()

    assert payload["total_billed"] == 0
    assert payload["margin_budgeted"] is None
    assert payload["break_even_price"] is None
    assert payload["suggested_price_if_underwater"] is None
    for value in payload.values():
        if isinstance(value, float):
            assert math.isfinite(value)
