"""Tests for commands.py - edit dispatch, recompute, and failed-command isolation."""

import pytest
from src.budget_model import HOURLY_LABOR, HOUSING_TRAVEL, RECRUITING, SALARIES, create_default_budget, get_block
from src.commands import BudgetCommand, apply_command
from src.errors import ImmutableBudgetError, InvalidInputError, RowNotFoundError, UnknownCommandError
from src.summary import build_summary


def run(model, op, settings, **payload):
    return apply_command(model, BudgetCommand(op=op, payload=payload), settings)


class TestEditField:
    def test_role_count_edit_flows_to_overhead(self, settings):
        model = create_default_budget()
        before = build_summary(model, settings)

        result = run(model, "editField", settings, block=SALARIES, line_id="1", field="role_count", value=2)

        after = build_summary(result.model, settings)
        assert get_block(result.model, SALARIES).find_line("1").budgeted == pytest.approx(48000.0)
        assert after.total_overhead_budgeted - before.total_overhead_budgeted == pytest.approx(24000.0)
        assert after.profit_budgeted - before.profit_budgeted == pytest.approx(-24000.0)

    def test_input_model_is_not_mutated(self, settings):
        model = create_default_budget()

        result = run(model, "editField", settings, block=SALARIES, line_id="1", field="role_count", value=2)

        assert result.model is not model
        assert get_block(model, SALARIES).find_line("1").role_count == 1

    def test_unknown_line_raises(self, settings):
        with pytest.raises(RowNotFoundError):
            run(create_default_budget(), "editField", settings, block=SALARIES, line_id="99", field="role_count", value=2)

    def test_missing_payload_key_raises(self, settings):
        with pytest.raises(InvalidInputError) as excinfo:
            run(create_default_budget(), "editField", settings, block=SALARIES, line_id="1", field="role_count")
        assert excinfo.value.field == "value"


class TestAddAndRemove:
    def test_add_returns_new_line_id(self, settings):
        result = run(create_default_budget(), "add", settings, block=RECRUITING, fields={"type": "Yard Signs"})

        block = get_block(result.model, RECRUITING)
        assert result.last_line_id == block.lines[-1].id
        assert block.lines[-1].type == "Yard Signs"
        assert block.total_budgeted == pytest.approx(15500.0)

    def test_add_rejects_non_mapping_fields(self, settings):
        with pytest.raises(InvalidInputError):
            run(create_default_budget(), "add", settings, block=RECRUITING, fields=["Yard Signs"])

    def test_remove_line(self, settings):
        result = run(create_default_budget(), "remove", settings, block=HOUSING_TRAVEL, line_id="2")
        assert get_block(result.model, HOUSING_TRAVEL).total_budgeted == pytest.approx(30000.0)

    def test_remove_unknown_line_keeps_totals(self, settings):
        model = create_default_budget()
        before = build_summary(model, settings)

        with pytest.raises(RowNotFoundError):
            run(model, "remove", settings, block=HOUSING_TRAVEL, line_id="missing")

        after = build_summary(model, settings)
        assert after.blocks == before.blocks
        assert after.total_overhead_budgeted == before.total_overhead_budgeted


class TestAssumptionAndPrice:
    def test_timeframe_edit_recomputes_every_salary_line(self, settings):
        result = run(create_default_budget(), "editAssumption", settings, field="timeframe_months", value=4)

        salaries = get_block(result.model, SALARIES)
        for line in salaries.lines:
            assert line.budgeted == pytest.approx(line.pay_per_month * line.role_count * 4)
        # Expense lines keep their own month counts.
        assert get_block(result.model, HOUSING_TRAVEL).total_budgeted == pytest.approx(49200.0)

    def test_price_edit(self, settings):
        result = run(create_default_budget(), "editPrice", settings, value=6.0)

        summary = build_summary(result.model, settings)
        assert summary.total_billed == pytest.approx(390000.0)
        assert summary.underwater is False

    def test_negative_price_rejected(self, settings):
        with pytest.raises(InvalidInputError):
            run(create_default_budget(), "editPrice", settings, value=-1)


class TestSeedHourlyLabor:
    def test_seed_copies_loaded_labor_cost(self, settings):
        result = run(create_default_budget(), "seedHourlyLabor", settings)

        block = get_block(result.model, HOURLY_LABOR)
        assert result.last_line_id == "1"
        assert block.total_budgeted == pytest.approx(110795.4545, rel=1e-6)
        assert block.total_actual == pytest.approx(72000.0)

    def test_seed_adds_line_to_empty_block(self, settings):
        emptied = run(create_default_budget(), "remove", settings, block=HOURLY_LABOR, line_id="1").model

        result = run(emptied, "seedHourlyLabor", settings)

        block = get_block(result.model, HOURLY_LABOR)
        assert len(block.lines) == 1
        assert block.lines[0].type == "Production Labor"

    def test_seed_requires_defined_labor_cost(self, settings):
        model = create_default_budget()
        model.assumptions.units_per_hour = 0

        with pytest.raises(InvalidInputError) as excinfo:
            run(model, "seedHourlyLabor", settings)
        assert excinfo.value.field == "units_per_hour"


class TestGuards:
    def test_locked_model_rejects_edits(self, settings):
        model = create_default_budget()
        model.locked = True

        with pytest.raises(ImmutableBudgetError):
            run(model, "editPrice", settings, value=5.0)

    def test_version_ops_are_not_model_edits(self, settings):
        with pytest.raises(UnknownCommandError):
            run(create_default_budget(), "lockVersion", settings)

    def test_unknown_op(self, settings):
        with pytest.raises(UnknownCommandError) as excinfo:
            run(create_default_budget(), "explode", settings)
        assert excinfo.value.field == "op"

    def test_edit_updates_timestamp(self, settings):
        model = create_default_budget()
        result = run(model, "editPrice", settings, value=5.0)
        assert result.model.updated_at >= model.updated_at


class TestOverflowGuard:
    def test_huge_price_is_rejected_before_state_changes(self, settings):
        model = create_default_budget()

        with pytest.raises(InvalidInputError) as excinfo:
            run(model, "editPrice", settings, value=1e308)

        assert excinfo.value.field == "price_per_unit"
        assert "total_billed" in excinfo.value.message
        assert model.price_per_unit == pytest.approx(4.50)

    def test_huge_salary_rate_is_rejected(self, settings):
        model = create_default_budget()

        with pytest.raises(InvalidInputError) as excinfo:
            run(model, "editField", settings, block=SALARIES, line_id="1", field="pay_per_month", value=1e308)

        assert excinfo.value.field == "pay_per_month"
        assert get_block(model, SALARIES).find_line("1").pay_per_month == 8000

    def test_huge_pay_per_hour_is_rejected(self, settings):
        with pytest.raises(InvalidInputError) as excinfo:
            run(create_default_budget(), "editAssumption", settings, field="pay_per_hour", value=1e308)
        assert excinfo.value.field == "pay_per_hour"

    def test_large_but_representable_values_are_accepted(self, settings):
        result = run(create_default_budget(), "editPrice", settings, value=1e9)
        assert build_summary(result.model, settings).total_billed == pytest.approx(6.5e13)
