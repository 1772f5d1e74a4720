"""
Tests for Monte Carlo configuration.

This module tests:
- MonteCarloConfig validation
- Seed derivation from planning requests
- Building a run from a planning request
"""

import pytest
from pydantic import ValidationError

from fire_planner.models.household import HouseholdAssets
from fire_planner.models.request import AssetAllocation, MonteCarloSettings, ReturnModel
from fire_planner.models.simulation.config import (
    MarketAssumptions,
    MonteCarloConfig,
    config_from_request,
    derive_seed,
)


class TestMonteCarloConfig:
    """Test cases for MonteCarloConfig validation."""

    def test_defaults(self):
        config = MonteCarloConfig(
            simulation_runs=100, initial_portfolio=1_000_000, initial_withdrawal_rate=0.04
        )

        assert config.retirement_years == 30
        assert config.withdrawal_strategy == "fixed_real"
        assert config.max_workers == 1
        assert config.seed is None
        assert config.initial_withdrawal == pytest.approx(40000)

    def test_runs_must_be_positive(self):
        with pytest.raises(ValidationError):
            MonteCarloConfig(
                simulation_runs=0, initial_portfolio=1_000_000, initial_withdrawal_rate=0.04
            )

    def test_allocation_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="Asset allocation must sum to 1.0"):
            MonteCarloConfig(
                simulation_runs=10,
                initial_portfolio=1_000_000,
                initial_withdrawal_rate=0.04,
                asset_allocation=AssetAllocation(stocks=0.8, bonds=0.3, cash=0.1),
            )

    def test_negative_seed_rejected(self):
        with pytest.raises(ValidationError):
            MonteCarloConfig(
                simulation_runs=10,
                initial_portfolio=1_000_000,
                initial_withdrawal_rate=0.04,
                seed=-5,
            )

    def test_market_defaults(self):
        market = MarketAssumptions()

        assert market.mean_return == 0.07
        assert market.volatility == 0.15
        assert market.correlation_coefficient == -0.1


class TestDeriveSeed:
    """Test cases for request-derived seeds."""

    def test_stable_for_same_request(self, request_factory):
        assert derive_seed(request_factory()) == derive_seed(request_factory())

    def test_changes_with_inputs(self, request_factory, person_factory):
        household = request_factory().household.model_copy(
            update={"people": [person_factory(super_balance=123456.0)]}
        )

        assert derive_seed(request_factory()) != derive_seed(
            request_factory(household=household)
        )

    def test_fits_in_32_bits(self, single_request):
        assert 0 <= derive_seed(single_request) < 2**32


class TestConfigFromRequest:
    """Test cases for converting a planning request into a run."""

    def test_consolidated_portfolio(self, single_request):
        config, market = config_from_request(single_request, runs=50, seed=7)

        assert config.initial_portfolio == pytest.approx(700000)
        assert config.initial_withdrawal_rate == pytest.approx(50000 / 700000)
        assert config.simulation_runs == 50
        assert config.seed == 7
        assert market.mean_return == 0.07
        assert market.inflation_mean == 0.025
        assert market.volatility == 0.15

    def test_monte_carlo_settings_used(self, request_factory):
        returns = ReturnModel(
            type="monte_carlo",
            monte_carlo_settings=MonteCarloSettings(
                retirement_years=25,
                withdrawal_strategy="dynamic",
                inflation_volatility=0.02,
                correlation_coefficient=0.3,
            ),
        )

        config, market = config_from_request(
            request_factory(returns=returns), runs=10, seed=1, max_workers=3, batch_size=5
        )

        assert config.retirement_years == 25
        assert config.withdrawal_strategy == "dynamic"
        assert config.max_workers == 3
        assert config.batch_size == 5
        assert market.inflation_volatility == 0.02
        assert market.correlation_coefficient == 0.3

    def test_empty_portfolio_withdraws_nothing(self, request_factory, person_factory):
        household = request_factory().household.model_copy(
            update={
                "people": [person_factory(super_balance=0.0)],
                "assets": HouseholdAssets(non_super_investments=0.0),
            }
        )

        config, _ = config_from_request(request_factory(household=household), runs=1, seed=1)

        assert config.initial_withdrawal_rate == 0.0
