"""Tests for Monte Carlo withdrawal strategies."""

import pytest

from fire_planner.models.simulation.config import MonteCarloConfig
from fire_planner.models.simulation.withdrawals import withdrawal_amount


def make_config(strategy):
    return MonteCarloConfig(
        simulation_runs=1,
        initial_portfolio=1_000_000,
        initial_withdrawal_rate=0.04,
        withdrawal_strategy=strategy,
    )


class TestWithdrawalAmount:
    """Test cases for each withdrawal strategy."""

    def test_fixed_real_indexed_by_cumulative_inflation(self):
        config = make_config("fixed_real")

        assert withdrawal_amount(config, 1_000_000, 1, 0.03, 1.0) == pytest.approx(40000)
        assert withdrawal_amount(config, 900_000, 3, 0.03, 1.05) == pytest.approx(42000)

    def test_fixed_nominal_constant(self):
        config = make_config("fixed_nominal")

        assert withdrawal_amount(config, 500_000, 10, 0.05, 1.6) == pytest.approx(40000)

    def test_dynamic_raises_when_ahead(self):
        config = make_config("dynamic")

        assert withdrawal_amount(config, 1_300_000, 1, 0.02, 1.0) == pytest.approx(44000)

    def test_dynamic_cuts_when_behind(self):
        config = make_config("dynamic")

        assert withdrawal_amount(config, 700_000, 1, 0.02, 1.0) == pytest.approx(36000)

    def test_dynamic_on_track_follows_inflation(self):
        config = make_config("dynamic")

        assert withdrawal_amount(config, 1_040_000, 2, 0.02, 1.02) == pytest.approx(40800)

    def test_floor_ceiling_limits(self):
        config = make_config("floor_ceiling")

        assert withdrawal_amount(config, 2_000_000, 5, 0.02, 1.1) == pytest.approx(48000)
        assert withdrawal_amount(config, 500_000, 5, 0.02, 1.1) == pytest.approx(32000)
        assert withdrawal_amount(config, 1_100_000, 5, 0.02, 1.1) == pytest.approx(44000)
