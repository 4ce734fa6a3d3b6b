"""Tests for profitability.py - profit, margin, break-even, and the underwater policy."""

import pytest
from shared.budget_settings import BudgetSettings
from src.aggregator import OverheadTotals
from src.profitability import compute_break_even_price, compute_margin, compute_profitability


class TestComputeProfitability:
    def test_reference_scenario(self, settings):
        result = compute_profitability(
            OverheadTotals(budgeted=282700.0, actual=248100.0),
            unit_goal=65000,
            price_per_unit=4.50,
            settings=settings,
        )

        assert result.total_billed == pytest.approx(292500.0)
        assert result.profit_budgeted == pytest.approx(9800.0)
        assert result.margin_budgeted == pytest.approx(3.3504, rel=1e-4)
        assert result.break_even_price == pytest.approx(4.3492, rel=1e-4)
        assert result.profit_actual == pytest.approx(44400.0)
        assert result.underwater is False
        assert result.suggested_price_if_underwater is None
        assert result.recommendations == []

    def test_margin_matches_profit_over_billed(self, settings):
        result = compute_profitability(OverheadTotals(150000.0, 90000.0), 40000, 5.0, settings)

        assert result.profit_budgeted == pytest.approx(result.total_billed - 150000.0)
        assert result.margin_budgeted == pytest.approx(result.profit_budgeted / result.total_billed * 100)
        assert result.margin_actual == pytest.approx(result.profit_actual / result.total_billed * 100)

    def test_cost_per_unit_equals_break_even(self, settings):
        result = compute_profitability(OverheadTotals(378200.0, 248100.0), 65000, 4.50, settings)
        assert result.cost_per_unit == result.break_even_price

    def test_underwater_suggests_marked_up_price(self, settings):
        result = compute_profitability(OverheadTotals(378200.0, 248100.0), 65000, 4.50, settings)

        assert result.underwater is True
        assert result.profit_budgeted == pytest.approx(-85700.0)
        assert result.suggested_price_if_underwater == pytest.approx(378200.0 / 65000 * 1.15)
        assert len(result.recommendations) == 3
        assert result.recommendations[0].startswith("Increase price per unit to $6.69")

    def test_underwater_markup_comes_from_settings(self):
        result = compute_profitability(
            OverheadTotals(100000.0, 0.0), 10000, 5.0, BudgetSettings(underwater_markup=1.25)
        )
        assert result.suggested_price_if_underwater == pytest.approx(12.5)

    def test_zero_unit_goal_guards_ratios(self, settings):
        result = compute_profitability(OverheadTotals(1000.0, 500.0), 0, 4.50, settings)

        assert result.total_billed == 0
        assert result.margin_budgeted is None
        assert result.margin_actual is None
        assert result.cost_per_unit is None
        assert result.break_even_price is None
        # Underwater but with no defined break-even there is no price to suggest.
        assert result.underwater is True
        assert result.suggested_price_if_underwater is None
        assert result.recommendations == ["Reduce overhead costs", "Increase unit goal efficiency"]

    def test_zero_price_guards_margin(self, settings):
        result = compute_profitability(OverheadTotals(1000.0, 500.0), 100, 0.0, settings)
        assert result.margin_budgeted is None
        assert result.break_even_price == pytest.approx(10.0)


def test_helpers_return_none_on_zero_denominator():
    assert compute_margin(100.0, 0.0) is None
    assert compute_break_even_price(100.0, 0) is None
