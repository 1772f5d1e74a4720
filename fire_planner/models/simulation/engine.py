"""
Monte Carlo stress testing of a consolidated retirement portfolio.

Trials are independent: each one draws its own correlated return and
inflation path, applies the configured withdrawal strategy and records
whether the portfolio survived the full horizon. Trials are split into
batches and run on a thread pool. Every trial writes only to its own result
slot and owns its own generator, so results are identical for any worker
count. Cancellation is cooperative and checked between trials.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from ..errors import SimulationCancelledError
from ..time_grid import DEFAULT_FORMATTER
from .config import MarketAssumptions, MonteCarloConfig
from .result import (
    ConfidenceIntervals,
    MonteCarloResults,
    PercentileBand,
    SimulationRun,
    StressTestResults,
    SummaryStatistics,
)
from .returns import correlated_paths, spawn_generators
from .withdrawals import withdrawal_amount

BASE_SAFE_WITHDRAWAL_RATE = 0.04
SAFE_SUCCESS_TARGET = 0.90
CONSERVATIVE_SUCCESS_TARGET = 0.95
CONFIDENCE_INTERVAL_YEARS = (10, 20, 30)


def percentile(values: Sequence[float], p: float) -> float:
    """Linearly interpolated percentile, 0 for an empty sequence.

    The rank is ``p / 100 * (n - 1)`` on the sorted values, which is numpy's
    default ``linear`` method.
    """
    if len(values) == 0:
        return 0.0
    return float(np.percentile(np.asarray(values, dtype=np.float64), p))


def percentile_band(values: Sequence[float]) -> PercentileBand:
    return PercentileBand(
        p5=percentile(values, 5), p50=percentile(values, 50), p95=percentile(values, 95)
    )


def safe_withdrawal_rate(success_rate: float, target: float) -> float:
    """Base 4% rate, scaled down in proportion when success misses the target."""
    if success_rate >= target:
        return BASE_SAFE_WITHDRAWAL_RATE
    return BASE_SAFE_WITHDRAWAL_RATE * (success_rate / target)


class MonteCarloEngine:
    """Runs Monte Carlo trials for a single configuration."""

    def __init__(
        self,
        config: MonteCarloConfig,
        market: MarketAssumptions,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize the engine.

        Args:
            config: Run configuration. A missing seed is replaced by fresh
                entropy and recorded on the results.
            market: Return and inflation distribution
            cancel_event: Set by the caller to stop the run between trials
        """
        if config.seed is None:
            entropy = np.random.SeedSequence().entropy
            config = config.model_copy(update={"seed": int(entropy % (2**32))})
        self.config = config
        self.market = market
        self.cancel_event = cancel_event or threading.Event()
        self.logger = logging.getLogger(__name__)

    def run_trial(self, run_id: int, rng: np.random.Generator) -> SimulationRun:
        """Simulate one trial until the horizon or depletion."""
        config = self.config
        years = config.retirement_years
        returns, inflation = correlated_paths(rng, self.market, years)

        portfolio = config.initial_portfolio
        cumulative_inflation = 1.0
        withdrawals: List[float] = []
        values: List[float] = []
        real_total = 0.0

        for index in range(years):
            amount = withdrawal_amount(
                config, portfolio, index + 1, float(inflation[index]), cumulative_inflation
            )
            portfolio = max(0.0, portfolio * (1 + returns[index]) - amount)
            cumulative_inflation *= 1 + inflation[index]
            if cumulative_inflation > 0:
                real_total += amount / cumulative_inflation

            withdrawals.append(amount)
            values.append(float(portfolio))
            if portfolio <= 0:
                break

        lasted = len(values)
        realised_returns = returns[:lasted]
        early_years = years // 3
        sequence_risk = False
        if early_years > 0:
            early_mean = float(np.sum(realised_returns[:early_years])) / early_years
            sequence_risk = early_mean < self.market.mean_return - self.market.volatility

        return SimulationRun(
            run_id=run_id,
            success=lasted >= years and portfolio > 0,
            years_lasted=lasted,
            final_portfolio_value=float(portfolio),
            worst_year_loss=min(0.0, float(np.min(realised_returns))),
            best_year_gain=max(0.0, float(np.max(realised_returns))),
            total_withdrawals=float(sum(withdrawals)),
            inflation_adjusted_withdrawals=real_total,
            sequence_risk=sequence_risk,
            market_returns=np.array(realised_returns, dtype=np.float64),
            inflation_rates=np.array(inflation[:lasted], dtype=np.float64),
            withdrawals=np.array(withdrawals, dtype=np.float64),
            portfolio_values=np.array(values, dtype=np.float64),
        )

    def run(self) -> MonteCarloResults:
        """Run every trial and aggregate the results.

        Raises:
            SimulationCancelledError: If the cancel event is set before all
                trials have finished
        """
        config = self.config
        count = config.simulation_runs
        self.logger.info(
            f"Starting Monte Carlo run: {count} trials, {config.retirement_years} years, "
            f"strategy {config.withdrawal_strategy}, seed {config.seed}"
        )

        generators = spawn_generators(config.seed, count)
        slots: List[Optional[SimulationRun]] = [None] * count
        abort = threading.Event()

        def run_batch(indices: Iterable[int]) -> None:
            for index in indices:
                if self.cancel_event.is_set() or abort.is_set():
                    raise SimulationCancelledError(
                        f"Monte Carlo run cancelled after trial {index}",
                        {"completed_trials": sum(slot is not None for slot in slots)},
                    )
                slots[index] = self.run_trial(index + 1, generators[index])

        batches = [
            range(start, min(start + config.batch_size, count))
            for start in range(0, count, config.batch_size)
        ]

        if config.max_workers == 1 or len(batches) == 1:
            for batch in batches:
                run_batch(batch)
        else:
            with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
                futures = [pool.submit(run_batch, batch) for batch in batches]
                errors = []
                for future in futures:
                    try:
                        future.result()
                    except Exception as e:
                        abort.set()
                        errors.append(e)
                if errors:
                    raise errors[0]

        runs = [slot for slot in slots if slot is not None]
        results = self.aggregate(runs)
        self.logger.info(
            f"Completed Monte Carlo run: success rate "
            f"{results.summary_statistics.success_rate:.1%}"
        )
        return results

    def aggregate(self, runs: List[SimulationRun]) -> MonteCarloResults:
        """Summary statistics, stress tests and confidence intervals."""
        config = self.config
        count = len(runs)
        successes = sum(run.success for run in runs)
        success_rate = successes / count

        final_values = [run.final_portfolio_value for run in runs]
        years_lasted = [float(run.years_lasted) for run in runs]

        summary = SummaryStatistics(
            success_rate=success_rate,
            median_final_value=percentile(final_values, 50),
            percentile_5_final_value=percentile(final_values, 5),
            percentile_95_final_value=percentile(final_values, 95),
            median_years_lasted=percentile(years_lasted, 50),
            probability_of_ruin=(count - successes) / count,
            safe_withdrawal_rate=safe_withdrawal_rate(success_rate, SAFE_SUCCESS_TARGET),
            conservative_withdrawal_rate=safe_withdrawal_rate(
                success_rate, CONSERVATIVE_SUCCESS_TARGET
            ),
        )

        value_matrix = self._value_matrix(runs)
        yearly = np.percentile(value_matrix, [5, 50, 95], axis=0)
        solvent_by_year = np.mean(value_matrix > 0, axis=0)

        return MonteCarloResults(
            config=config,
            market_assumptions=self.market,
            simulation_runs=runs,
            summary_statistics=summary,
            stress_test_results=self._stress_tests(runs),
            confidence_intervals=self._confidence_intervals(runs, value_matrix),
            yearly_percentiles=yearly,
            success_rate_by_year=solvent_by_year,
        )

    def _value_matrix(self, runs: List[SimulationRun]) -> NDArray[np.float64]:
        """Portfolio values as (trials x years), zero after depletion."""
        matrix = np.zeros((len(runs), self.config.retirement_years))
        for row, run in enumerate(runs):
            matrix[row, : len(run.portfolio_values)] = run.portfolio_values
        return matrix

    def _confidence_intervals(
        self, runs: List[SimulationRun], value_matrix: NDArray[np.float64]
    ) -> ConfidenceIntervals:
        years = self.config.retirement_years
        bands = {}
        for mark in CONFIDENCE_INTERVAL_YEARS:
            if mark <= years:
                bands[f"portfolio_value_{mark}_years"] = percentile_band(
                    value_matrix[:, mark - 1].tolist()
                )
        sustainability = [run.years_lasted / years for run in runs]
        return ConfidenceIntervals(
            **bands, withdrawal_sustainability=percentile_band(sustainability)
        )

    def _stress_tests(self, runs: List[SimulationRun]) -> StressTestResults:
        market = self.market
        count = len(runs)

        sequence_impact = sum(run.sequence_risk for run in runs) / count

        inflation_cutoff = market.inflation_mean + market.inflation_volatility
        high_inflation = [run for run in runs if run.mean_inflation > inflation_cutoff]
        if high_inflation:
            failures = sum(not run.success for run in high_inflation)
            inflation_impact = failures / len(high_inflation)
        else:
            inflation_impact = 0.0

        arithmetic = np.mean([run.arithmetic_mean_return for run in runs])
        geometric = np.mean([run.geometric_mean_return for run in runs])

        worst = min(runs, key=lambda run: run.final_portfolio_value)
        best = max(runs, key=lambda run: run.final_portfolio_value)
        best_value = DEFAULT_FORMATTER.format_thousands(best.final_portfolio_value)
        best_gain = DEFAULT_FORMATTER.format_percentage(best.best_year_gain)

        return StressTestResults(
            sequence_risk_impact=sequence_impact,
            inflation_risk_impact=inflation_impact,
            volatility_drag_impact=float(arithmetic - geometric),
            worst_case_scenario=self._describe_worst(worst),
            best_case_scenario=(
                f"Portfolio grew to {best_value} with best year gain of {best_gain}"
            ),
        )

    @staticmethod
    def _describe_worst(run: SimulationRun) -> str:
        loss = DEFAULT_FORMATTER.format_percentage(run.worst_year_loss)
        if run.success:
            value = DEFAULT_FORMATTER.format_thousands(run.final_portfolio_value)
            return f"Portfolio fell to {value} with worst year loss of {loss}"
        return f"Portfolio depleted after {run.years_lasted} years with worst year loss of {loss}"


def run_monte_carlo(
    config: MonteCarloConfig,
    market: MarketAssumptions,
    cancel_event: Optional[threading.Event] = None,
) -> MonteCarloResults:
    return MonteCarloEngine(config, market, cancel_event).run()
