"""
Planning service for running complete FIRE projections.

This service coordinates the engines for one run: it validates the request,
projects the timeline, derives metrics and chart series, and optionally runs
the Monte Carlo stress test. Either a full RunResult is produced or an error
is raised; there are no partial results.
"""

import logging
import threading
import time
from typing import Callable, Optional, Tuple

from fire_planner.config import Settings, get_global_settings
from fire_planner.models.charts import build_chart_data
from fire_planner.models.errors import (
    ComputationError,
    InvalidRequestError,
    SimulationCancelledError,
)
from fire_planner.models.metrics import calculate_metrics
from fire_planner.models.projection import run_projection
from fire_planner.models.request import RunRequest
from fire_planner.models.result import ComputationInfo, RequestSummary, RunResult
from fire_planner.models.simulation.config import config_from_request, derive_seed
from fire_planner.models.simulation.engine import MonteCarloEngine
from fire_planner.models.simulation.result import MonteCarloResults
from fire_planner.models.validation import validate_run_request

ENGINE_VERSION = "2.0.0"


class PlanningService:
    """Service for running planning requests end to end."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the planning service.

        Args:
            settings: Application settings, defaults to the global settings
            clock: Monotonic clock in seconds used to time runs
        """
        self.settings = settings or get_global_settings()
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    def run_plan(
        self,
        request: RunRequest,
        reference_year: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RunResult:
        """Run a complete planning request.

        Args:
            request: The planning request
            reference_year: Calendar year used to validate current ages,
                defaults to the horizon start year
            cancel_event: Stops a Monte Carlo run between trials when set

        Returns:
            RunResult with timeline, charts, metrics and optional Monte Carlo

        Raises:
            InvalidRequestError: If validation finds any error
            SimulationCancelledError: If the Monte Carlo run is cancelled
            ComputationError: If anything fails during the computation
        """
        report = validate_run_request(request, reference_year)
        if not report.valid:
            self.logger.info(
                f"Rejected planning request with {len(report.errors)} validation errors"
            )
            raise InvalidRequestError(
                "Request validation failed", report.errors, report.warnings
            )

        started = self.clock()
        seed = request.options.seed if request.options.seed is not None else derive_seed(request)
        warnings = list(report.warnings)

        try:
            self.logger.info(
                f"Starting planning run for {request.household.structure} household "
                f"with assumptions {request.assumptions.id}"
            )
            timeline = run_projection(request)
            metrics = calculate_metrics(timeline, request)

            monte_carlo: Optional[MonteCarloResults] = None
            if request.options.include_monte_carlo:
                runs, capped = self._monte_carlo_runs(request)
                if capped:
                    warnings.append(
                        f"Monte Carlo runs capped at {runs} by server configuration"
                    )
                monte_carlo = self._run_monte_carlo(request, runs, seed, cancel_event)

            charts = build_chart_data(timeline, monte_carlo)

        except SimulationCancelledError:
            self.logger.info("Planning run cancelled during Monte Carlo simulation")
            raise
        except Exception as e:
            self.logger.error(f"Planning run failed: {str(e)}")
            raise ComputationError(
                "Engine calculation failed", str(e), request.redacted_summary()
            ) from e

        duration_ms = (self.clock() - started) * 1000
        self.logger.info(
            f"Completed planning run: {len(timeline)} years in {duration_ms:.1f} ms"
        )

        return RunResult(
            request_summary=RequestSummary.from_request(request),
            timeline=timeline if request.options.detailed_timeline else [],
            charts=charts,
            metrics=metrics,
            monte_carlo=(
                monte_carlo.to_summary(request.options.include_stress_testing)
                if monte_carlo is not None
                else None
            ),
            warnings=warnings,
            computation_info=ComputationInfo(
                engine_version=ENGINE_VERSION,
                assumptions_version=request.assumptions.id,
                computation_time_ms=max(0.0, duration_ms),
                deterministic_seed=seed,
                cache_hit=False,
            ),
        )

    def _monte_carlo_runs(self, request: RunRequest) -> Tuple[int, bool]:
        """Requested trial count, capped by configuration."""
        runs = request.options.monte_carlo_runs
        if runs is None and request.returns.monte_carlo_settings is not None:
            runs = request.returns.monte_carlo_settings.simulation_runs
        if runs is None:
            runs = self.settings.monte_carlo_default_runs

        limit = self.settings.monte_carlo_max_runs
        if runs > limit:
            return limit, True
        return runs, False

    def _run_monte_carlo(
        self,
        request: RunRequest,
        runs: int,
        seed: int,
        cancel_event: Optional[threading.Event],
    ) -> MonteCarloResults:
        config, market = config_from_request(
            request,
            runs,
            seed,
            max_workers=self.settings.monte_carlo_max_workers,
            batch_size=self.settings.monte_carlo_batch_size,
        )
        return MonteCarloEngine(config, market, cancel_event).run()


def run_fire_plan(
    request: RunRequest,
    settings: Optional[Settings] = None,
    reference_year: Optional[int] = None,
) -> RunResult:
    """Run a planning request with a fresh service."""
    return PlanningService(settings).run_plan(request, reference_year)

