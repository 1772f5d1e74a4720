"""Tests for retirement account spenddown."""

import pytest

from fire_planner.models.assumptions_registry import AUS_2025_26
from fire_planner.models.spenddown import (
    calculate_withdrawal,
    dynamic_withdrawal_rate,
    minimum_drawdown_rate,
    run_spenddown,
    spend_to_zero_payment,
    strategy_withdrawal,
)
from fire_planner.models.strategy import SpenddownStrategy, Strategy
from fire_planner.models.timeline import YearRow

START_YEAR = 2025


def with_spenddown(request, **kwargs):
    return request.model_copy(
        update={"strategy": Strategy(spenddown=SpenddownStrategy(**kwargs))}
    )


class TestMinimumDrawdown:
    """Test cases for age-banded minimum drawdown rates."""

    @pytest.mark.parametrize(
        "age,rate",
        [(59, 0.0), (60, 0.04), (64, 0.04), (67, 0.05), (77, 0.07), (85, 0.11), (99, 0.14)],
    )
    def test_rate_by_age(self, age, rate):
        assert minimum_drawdown_rate(age, AUS_2025_26) == rate


class TestSpendToZero:
    """Test cases for the level annuity payment."""

    def test_annuity_payment(self):
        """500k over 30 years at a 2% real return."""
        payment = spend_to_zero_payment(500000, 30, 0.045, 0.025)

        assert payment == pytest.approx(22325, rel=1e-3)

    def test_no_years_left_withdraws_everything(self):
        assert spend_to_zero_payment(100000, 0, 0.07, 0.025) == 100000

    def test_zero_real_return_is_straight_line(self):
        assert spend_to_zero_payment(100000, 20, 0.03, 0.03) == pytest.approx(5000)

    def test_clamped_to_ceiling(self):
        assert spend_to_zero_payment(100000, 2, 0.05, 0.0) == pytest.approx(15000)

    def test_clamped_to_floor(self):
        assert spend_to_zero_payment(100000, 100, 0.0, 0.10) == pytest.approx(2000)


class TestStrategyWithdrawal:
    """Test cases for withdrawal methods."""

    def test_dynamic_rates(self):
        assert dynamic_withdrawal_rate(130, 100) == 0.05
        assert dynamic_withdrawal_rate(70, 100) == 0.03
        assert dynamic_withdrawal_rate(100, 100) == 0.04
        assert dynamic_withdrawal_rate(100, 0) == 0.04

    def test_fixed_real_adjusts_after_first_year(self, single_request):
        person = single_request.household.people[0]

        first = strategy_withdrawal("fixed_real", 100000, 60, person, single_request, True)
        later = strategy_withdrawal("fixed_real", 100000, 61, person, single_request, False)

        assert first == pytest.approx(4000)
        assert later == pytest.approx(4100)

    def test_guardrails_stay_within_rates(self, single_request):
        request = with_spenddown(
            single_request, withdrawal_method="guardrails", guardrail_floor_rate=0.05
        )
        person = request.household.people[0]

        amount = strategy_withdrawal("guardrails", 100000, 65, person, request, False)

        assert amount == pytest.approx(5000)

    def test_unknown_method_raises(self, single_request):
        person = single_request.household.people[0]

        with pytest.raises(ValueError):
            strategy_withdrawal("lottery", 100000, 65, person, single_request, False)

    def test_min_drawdown_only_withdraws_minimum(self, single_request):
        request = with_spenddown(single_request, type="min_drawdown_only")
        person = request.household.people[0]

        amount = calculate_withdrawal(100000, 5000, 67, person, request, False)

        assert amount == 5000

    def test_withdrawal_capped_at_balance(self, single_request):
        person = single_request.household.people[0]

        assert calculate_withdrawal(1000, 5000, 90, person, single_request, False) == 1000


class TestRunSpenddown:
    """Test cases for the yearly spenddown step."""

    def test_first_year_fixed_real(self, single_request):
        result = run_spenddown(single_request, {"p1": 60}, {"p1"}, {"p1": 500000.0})

        assert result.minimum_drawdowns["p1"] == pytest.approx(20000)
        assert result.withdrawals["p1"] == pytest.approx(20000)
        assert result.remaining_balances["p1"] == pytest.approx(480000)

    def test_later_year_indexed_by_inflation(self, single_request):
        previous = YearRow(year=START_YEAR + 24, ages={"p1": 59})

        result = run_spenddown(single_request, {"p1": 60}, {"p1"}, {"p1": 500000.0}, previous)

        assert result.withdrawals["p1"] == pytest.approx(20500)

    def test_no_withdrawal_before_access(self, single_request):
        result = run_spenddown(single_request, {"p1": 50}, set(), {"p1": 500000.0})

        assert result.withdrawals["p1"] == 0
        assert result.remaining_balances["p1"] == 500000.0

    def test_withdrawal_at_least_minimum(self, single_request):
        """At 85 the 11% minimum exceeds the 4% strategy amount."""
        result = run_spenddown(single_request, {"p1": 85}, {"p1"}, {"p1": 100000.0})

        assert result.withdrawals["p1"] == pytest.approx(11000)
        assert result.withdrawals["p1"] >= result.minimum_drawdowns["p1"]

    def test_spend_to_zero_at_planning_age_empties_balance(self, single_request):
        request = with_spenddown(single_request, withdrawal_method="spend_to_zero")

        result = run_spenddown(request, {"p1": 95}, {"p1"}, {"p1": 50000.0})

        assert result.withdrawals["p1"] == pytest.approx(50000)
        assert result.remaining_balances["p1"] == 0
