"""Tests for super contributions and growth."""

import pytest

from fire_planner.models.accumulation import (
    calculate_contributions,
    grow_balance,
    is_employed,
    run_accumulation,
)
from fire_planner.models.assumptions_registry import AUS_2025_26
from fire_planner.models.timeline import YearRow

START_YEAR = 2025


class TestContributions:
    """Test cases for guarantee and voluntary contributions."""

    def test_guarantee_only(self):
        """Salary times the guarantee rate when no voluntary rate is set."""
        result = calculate_contributions(100000, None, AUS_2025_26)

        assert result.mandatory == pytest.approx(11500)
        assert result.voluntary == 0
        assert result.total == pytest.approx(11500)

    def test_voluntary_clipped_to_cap(self):
        """Voluntary contributions only fill the room left under the cap."""
        result = calculate_contributions(200000, 0.10, AUS_2025_26)

        assert result.mandatory == pytest.approx(23000)
        assert result.voluntary == pytest.approx(7000)
        assert result.total == pytest.approx(AUS_2025_26.superannuation.concessional_cap)

    def test_guarantee_above_cap_is_kept(self):
        """The guarantee itself is never reduced by the cap."""
        result = calculate_contributions(300000, 0.05, AUS_2025_26)

        assert result.mandatory == pytest.approx(34500)
        assert result.voluntary == 0

    def test_custom_rules(self):
        """An 11% guarantee on 100k against a 27,500 cap."""
        rules = AUS_2025_26.superannuation.model_copy(
            update={"superannuation_guarantee_rate": 0.11, "concessional_cap": 27500}
        )
        assumptions = AUS_2025_26.model_copy(update={"superannuation": rules})

        result = calculate_contributions(100000, None, assumptions)
        closing, investment_return = grow_balance(100000, result.total, 0.07)

        assert result.total == pytest.approx(11000)
        assert investment_return == pytest.approx(105500 * 0.07)
        assert closing == pytest.approx(111000 + 105500 * 0.07)


class TestGrowBalance:
    """Test cases for mid-year growth."""

    def test_half_of_contributions_earn_returns(self):
        closing, investment_return = grow_balance(100000, 10000, 0.07)

        assert investment_return == pytest.approx(7350)
        assert closing == pytest.approx(117350)

    def test_balance_floored_at_zero(self):
        closing, investment_return = grow_balance(1000, 0, -2.0)

        assert investment_return == pytest.approx(-2000)
        assert closing == 0.0


class TestRunAccumulation:
    """Test cases for the yearly accumulation step."""

    def test_working_person_contributes(self, single_request):
        """A 35 year old on 120k contributes the guarantee and earns growth."""
        result = run_accumulation(START_YEAR, single_request, {"p1": 35})

        assert result.contributions["p1"] == pytest.approx(13800)
        assert result.returns["p1"] == pytest.approx((300000 + 6900) * 0.07)
        assert result.balances["p1"] == pytest.approx(335283)

    def test_retired_person_does_not_contribute(self, single_request):
        result = run_accumulation(START_YEAR + 10, single_request, {"p1": 45})

        assert result.contributions["p1"] == 0
        assert result.balances["p1"] == pytest.approx(300000 * 1.07)

    def test_contributions_stop_at_age_limit(self, request_factory, person_factory):
        """Without a FIRE age, contributions still stop at 67."""
        person = person_factory(fire_age=None)
        request = request_factory()
        request.household.people[0] = person

        assert is_employed(person, 66, AUS_2025_26)
        assert not is_employed(person, 67, AUS_2025_26)

        result = run_accumulation(START_YEAR + 32, request, {"p1": 67})
        assert result.contributions["p1"] == 0

    def test_opening_balance_comes_from_previous_row(self, single_request):
        previous = YearRow(year=START_YEAR + 9, ages={"p1": 44}, super_balances={"p1": 1000.0})

        result = run_accumulation(START_YEAR + 10, single_request, {"p1": 45}, previous)

        assert result.balances["p1"] == pytest.approx(1070)
