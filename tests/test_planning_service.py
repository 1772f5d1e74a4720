"""
Tests for the planning service.

This module tests:
- End-to-end runs and result assembly
- Validation and computation error handling
- Monte Carlo seeding, run limits and cancellation
"""

import threading

import pytest

from fire_planner.models.errors import (
    ComputationError,
    InvalidRequestError,
    SimulationCancelledError,
)
from fire_planner.models.projection import run_projection
from fire_planner.models.request import (
    AssetAllocation,
    MonteCarloSettings,
    ReturnModel,
    RunOptions,
)
from fire_planner.models.simulation.config import derive_seed
from fire_planner.services.planning_service import (
    ENGINE_VERSION,
    PlanningService,
    run_fire_plan,
)


@pytest.fixture
def service(settings):
    return PlanningService(settings)


class TestRunPlan:
    """Test cases for complete planning runs."""

    def test_result_fields(self, service, single_request):
        result = service.run_plan(single_request)

        assert result.request_summary.household_type == "single"
        assert result.request_summary.fire_ages == [45]
        assert result.request_summary.strategy_description == (
            "both_stop_same_year with fixed_real withdrawals"
        )
        assert result.timeline[0].year == 2025
        assert result.charts.assets_over_time.years == [row.year for row in result.timeline]
        assert result.metrics.bridge_years_needed == 15
        assert result.monte_carlo is None
        assert result.computation_info.engine_version == ENGINE_VERSION
        assert result.computation_info.assumptions_version == "AUS_2025_26"
        assert result.computation_info.deterministic_seed == derive_seed(single_request)
        assert not result.computation_info.cache_hit

    def test_timeline_omitted_when_not_detailed(self, service, request_factory):
        request = request_factory(options=RunOptions(detailed_timeline=False))

        result = service.run_plan(request)

        assert result.timeline == []
        assert len(result.charts.assets_over_time.years) == len(run_projection(request))

    def test_to_dict(self, service, single_request):
        data = service.run_plan(single_request).to_dict()

        assert data["timeline"][0]["year"] == 2025
        assert "total_bridge_income" in data["timeline"][0]["bridge_income"]
        assert data["metrics"]["fire_confidence_score"] >= 0

    def test_invalid_request_raises(self, service, request_factory, person_factory):
        household = request_factory().household.model_copy(
            update={"people": [person_factory(super_balance=-1.0)]}
        )

        with pytest.raises(InvalidRequestError) as exc_info:
            service.run_plan(request_factory(household=household))

        assert "Person 1: Super balance cannot be negative" in exc_info.value.errors
        assert exc_info.value.code == "VALIDATION_ERROR"

    def test_warnings_carried_through(self, service, request_factory, person_factory):
        household = request_factory().household.model_copy(
            update={"people": [person_factory(fire_age=70)]}
        )

        result = service.run_plan(request_factory(household=household))

        assert "Person 1: FIRE age after 67 - consider normal retirement instead" in (
            result.warnings
        )

    def test_engine_failure_wrapped(self, service, single_request, monkeypatch):
        def failing_projection(request):
            raise RuntimeError("boom")

        monkeypatch.setattr(
            "fire_planner.services.planning_service.run_projection", failing_projection
        )

        with pytest.raises(ComputationError) as exc_info:
            service.run_plan(single_request)

        assert exc_info.value.original_error == "boom"
        assert exc_info.value.request_summary["household_type"] == "single"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_computation_time_from_clock(self, settings, single_request):
        ticks = iter([1.0, 1.5])
        service = PlanningService(settings, clock=lambda: next(ticks))

        result = service.run_plan(single_request)

        assert result.computation_info.computation_time_ms == pytest.approx(500)

    def test_run_fire_plan(self, settings, single_request):
        result = run_fire_plan(single_request, settings)

        assert result.timeline[0].year == 2025


class TestMonteCarloRuns:
    """Test cases for the optional Monte Carlo stage."""

    def test_monte_carlo_included(self, service, monte_carlo_request):
        result = service.run_plan(monte_carlo_request)

        assert result.monte_carlo is not None
        assert result.monte_carlo.simulation_runs == 200
        assert result.monte_carlo.seed == 42
        assert result.computation_info.deterministic_seed == 42
        assert result.charts.monte_carlo_results is not None
        assert any("deterministic return model" in w for w in result.warnings)

    def test_same_seed_reproducible(self, service, monte_carlo_request):
        first = service.run_plan(monte_carlo_request)
        second = service.run_plan(monte_carlo_request)

        assert first.monte_carlo.summary_statistics == second.monte_carlo.summary_statistics

    def test_runs_capped_by_settings(self, service, request_factory):
        request = request_factory(
            options=RunOptions(include_monte_carlo=True, monte_carlo_runs=1000, seed=1)
        )

        result = service.run_plan(request)

        assert result.monte_carlo.simulation_runs == 500
        assert "Monte Carlo runs capped at 500 by server configuration" in result.warnings

    def test_default_runs_from_settings(self, settings, request_factory):
        service = PlanningService(settings.model_copy(update={"monte_carlo_default_runs": 30}))
        request = request_factory(options=RunOptions(include_monte_carlo=True, seed=3))

        result = service.run_plan(request)

        assert result.monte_carlo.simulation_runs == 30

    def test_stress_tests_optional(self, service, request_factory):
        request = request_factory(
            options=RunOptions(
                include_monte_carlo=True,
                monte_carlo_runs=20,
                include_stress_testing=False,
                seed=5,
            )
        )

        assert service.run_plan(request).monte_carlo.stress_test_results is None

    def test_cancellation_propagates(self, service, monte_carlo_request):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SimulationCancelledError):
            service.run_plan(monte_carlo_request, cancel_event=cancel)

    def test_invalid_allocation_rejected_before_running(self, service, request_factory):
        returns = ReturnModel(
            monte_carlo_settings=MonteCarloSettings(
                asset_allocation=AssetAllocation(stocks=0.9, bonds=0.5, cash=0.1)
            )
        )
        request = request_factory(
            returns=returns, options=RunOptions(include_monte_carlo=True, seed=1)
        )

        with pytest.raises(InvalidRequestError) as exc_info:
            service.run_plan(request)

        assert "Asset allocation must sum to 100%" in exc_info.value.errors

    def test_zero_simulation_runs_rejected(self, service, request_factory):
        returns = ReturnModel(
            type="monte_carlo", monte_carlo_settings=MonteCarloSettings(simulation_runs=0)
        )
        request = request_factory(
            returns=returns, options=RunOptions(include_monte_carlo=True, seed=1)
        )

        with pytest.raises(InvalidRequestError) as exc_info:
            service.run_plan(request)

        assert "Monte Carlo runs must be a positive integer" in exc_info.value.errors
