"""
Monte Carlo result models.

SimulationRun holds one trial's yearly path as numpy arrays. MonteCarloResults
keeps every trial alongside the aggregate statistics and offers helpers that
produce the compact summary returned to callers and the per-year chart bands.
"""

from typing import Dict, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field

from .config import MarketAssumptions, MonteCarloConfig


class SimulationRun(BaseModel):
    """
    One Monte Carlo trial.

    Arrays have one entry per simulated year and stop at the year the
    portfolio was depleted.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    run_id: int = Field(..., ge=1)
    success: bool
    years_lasted: int = Field(..., ge=0)
    final_portfolio_value: float = Field(..., ge=0)
    worst_year_loss: float = Field(..., description="Lowest annual return, capped at 0")
    best_year_gain: float = Field(..., description="Highest annual return, floored at 0")
    total_withdrawals: float = Field(..., ge=0)
    inflation_adjusted_withdrawals: float = Field(..., ge=0)
    sequence_risk: bool = Field(
        ..., description="Early years averaged below mean minus one volatility"
    )

    market_returns: NDArray[np.float64]
    inflation_rates: NDArray[np.float64]
    withdrawals: NDArray[np.float64]
    portfolio_values: NDArray[np.float64]

    def annual_results(self) -> List[Tuple[float, float, float, float]]:
        """(return, inflation, withdrawal, balance) for each simulated year."""
        return list(
            zip(
                self.market_returns.tolist(),
                self.inflation_rates.tolist(),
                self.withdrawals.tolist(),
                self.portfolio_values.tolist(),
            )
        )

    def value_at_year(self, year: int) -> float:
        """Portfolio value at the end of ``year`` (1-based), 0 once depleted."""
        if year <= len(self.portfolio_values):
            return float(self.portfolio_values[year - 1])
        return 0.0

    @property
    def arithmetic_mean_return(self) -> float:
        if len(self.market_returns) == 0:
            return 0.0
        return float(np.mean(self.market_returns))

    @property
    def geometric_mean_return(self) -> float:
        if len(self.market_returns) == 0:
            return 0.0
        growth = float(np.prod(np.clip(1.0 + self.market_returns, 0.0, None)))
        if growth <= 0:
            return -1.0
        return growth ** (1.0 / len(self.market_returns)) - 1.0

    @property
    def mean_inflation(self) -> float:
        if len(self.inflation_rates) == 0:
            return 0.0
        return float(np.mean(self.inflation_rates))


class PercentileBand(BaseModel):
    p5: float
    p50: float
    p95: float


class SummaryStatistics(BaseModel):
    success_rate: float = Field(..., ge=0, le=1, description="Fraction of trials that lasted")
    median_final_value: float
    percentile_5_final_value: float
    percentile_95_final_value: float
    median_years_lasted: float
    probability_of_ruin: float = Field(..., ge=0, le=1)
    safe_withdrawal_rate: float
    conservative_withdrawal_rate: float


class StressTestResults(BaseModel):
    sequence_risk_impact: float = Field(
        ..., description="Fraction of trials with poor early returns"
    )
    inflation_risk_impact: float = Field(
        ..., description="Failure rate among high-inflation trials"
    )
    volatility_drag_impact: float = Field(
        ..., description="Arithmetic minus geometric mean realised return"
    )
    worst_case_scenario: str
    best_case_scenario: str


class ConfidenceIntervals(BaseModel):
    portfolio_value_10_years: Optional[PercentileBand] = None
    portfolio_value_20_years: Optional[PercentileBand] = None
    portfolio_value_30_years: Optional[PercentileBand] = None
    withdrawal_sustainability: PercentileBand


class MonteCarloSummary(BaseModel):
    """Compact Monte Carlo output attached to a run result."""

    summary_statistics: Dict[str, float]
    stress_test_results: Optional[StressTestResults] = None
    confidence_intervals: ConfidenceIntervals
    simulation_runs: int
    seed: int


class MonteCarloChartSeries(BaseModel):
    """Per-year percentile bands and survival rates for charting."""

    confidence_intervals: Dict[str, List[float]]
    success_rate_by_year: List[float]
    risk_metrics: Dict[str, float]


class MonteCarloResults(BaseModel):
    """Every trial plus aggregate statistics for one Monte Carlo run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    config: MonteCarloConfig
    market_assumptions: MarketAssumptions
    simulation_runs: List[SimulationRun]
    summary_statistics: SummaryStatistics
    stress_test_results: StressTestResults
    confidence_intervals: ConfidenceIntervals
    yearly_percentiles: NDArray[np.float64] = Field(
        ..., description="Portfolio value p5/p50/p95 per year (3 x years)"
    )
    success_rate_by_year: NDArray[np.float64] = Field(
        ..., description="Fraction of trials still solvent at each year end"
    )

    def to_summary(self, include_stress_testing: bool = True) -> MonteCarloSummary:
        stats = self.summary_statistics
        return MonteCarloSummary(
            summary_statistics={
                "success_rate": stats.success_rate,
                "median_final_value": stats.median_final_value,
                "risk_of_ruin": stats.probability_of_ruin,
                "safe_withdrawal_rate": stats.safe_withdrawal_rate,
                "conservative_withdrawal_rate": stats.conservative_withdrawal_rate,
                "percentile_5_final_value": stats.percentile_5_final_value,
                "percentile_95_final_value": stats.percentile_95_final_value,
                "median_years_lasted": stats.median_years_lasted,
            },
            stress_test_results=self.stress_test_results if include_stress_testing else None,
            confidence_intervals=self.confidence_intervals,
            simulation_runs=len(self.simulation_runs),
            seed=self.config.seed if self.config.seed is not None else 0,
        )

    def chart_series(self) -> MonteCarloChartSeries:
        stress = self.stress_test_results
        return MonteCarloChartSeries(
            confidence_intervals={
                "p5": self.yearly_percentiles[0].tolist(),
                "p50": self.yearly_percentiles[1].tolist(),
                "p95": self.yearly_percentiles[2].tolist(),
            },
            success_rate_by_year=self.success_rate_by_year.tolist(),
            risk_metrics={
                "sequence_risk": stress.sequence_risk_impact,
                "inflation_risk": stress.inflation_risk_impact,
                "longevity_risk": self.summary_statistics.probability_of_ruin,
            },
        )
