"""
Chart series derived from a projection timeline.

Every series is aligned with the timeline: index i describes ``years[i]``.
The Monte Carlo bands are indexed by simulated retirement year instead.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .simulation.result import MonteCarloChartSeries, MonteCarloResults
from .timeline import YearRow


class AssetsOverTime(BaseModel):
    years: List[int]
    super_balances: List[float]
    non_super_balances: List[float]
    total_net_worth: List[float]


class IncomeVsExpenses(BaseModel):
    years: List[int]
    income: List[float]
    expenses: List[float]
    surplus: List[float]


class FireTimeline(BaseModel):
    years: List[int]
    feasibility_score: List[float]
    bridge_requirement: List[float]
    super_sustainability: List[float]


class ChartData(BaseModel):
    model_config = ConfigDict(frozen=True)

    assets_over_time: AssetsOverTime
    income_vs_expenses: IncomeVsExpenses
    fire_timeline: FireTimeline
    monte_carlo_results: Optional[MonteCarloChartSeries] = None


def bridge_requirement(row: YearRow) -> float:
    """Expenses left uncovered in a year that has some bridge income."""
    bridge_total = row.bridge_income.total_bridge_income
    if bridge_total <= 0:
        return 0.0
    return max(0.0, row.bridge_expenses - bridge_total)


def super_sustainability(row: YearRow) -> float:
    """Years the remaining super would last at this year's withdrawals."""
    withdrawals = row.total_withdrawals
    return row.total_super / withdrawals if withdrawals > 0 else 0.0


def build_chart_data(
    timeline: List[YearRow], monte_carlo: Optional[MonteCarloResults] = None
) -> ChartData:
    years = [row.year for row in timeline]
    return ChartData(
        assets_over_time=AssetsOverTime(
            years=years,
            super_balances=[row.total_super for row in timeline],
            non_super_balances=[row.total_non_super for row in timeline],
            total_net_worth=[row.total_net_worth for row in timeline],
        ),
        income_vs_expenses=IncomeVsExpenses(
            years=years,
            income=[row.sustainable_income for row in timeline],
            expenses=[row.required_income for row in timeline],
            surplus=[row.surplus_deficit for row in timeline],
        ),
        fire_timeline=FireTimeline(
            years=years,
            feasibility_score=[100.0 if row.fire_feasible else 0.0 for row in timeline],
            bridge_requirement=[bridge_requirement(row) for row in timeline],
            super_sustainability=[super_sustainability(row) for row in timeline],
        ),
        monte_carlo_results=monte_carlo.chart_series() if monte_carlo is not None else None,
    )
