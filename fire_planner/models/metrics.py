"""
Feasibility metrics for a completed projection.

This module post-processes the timeline into bridge phase requirements, super
longevity per person, age pension timing and value, and an overall FIRE
feasibility assessment with a 0-100 confidence score plus risk and
optimisation messages.
"""

from typing import Dict, List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .bridge_income import estimate_bridge_requirement
from .projection import EXHAUSTED_BALANCE
from .request import RunRequest
from .timeline import YearRow

FEASIBLE_YEAR_FRACTION = 0.8
BRIDGE_FUNDABLE_FRACTION = 0.8
EARLY_YEARS_WINDOW = 10
MAX_EARLY_DEFICIT_YEARS = 3
LONGEVITY_RISK_AGE = 80


class Metrics(BaseModel):
    """Summary indicators derived from the full timeline."""

    model_config = ConfigDict(frozen=True)

    # Bridge phase
    bridge_required_today: float = Field(
        ..., description="Total deficit in years before anyone can access super"
    )
    bridge_funding_estimate: float = Field(
        ..., description="Planning estimate of expenses not covered by bridge income"
    )
    bridge_years_needed: int = Field(..., ge=0)
    bridge_feasible: bool

    # Super phase
    super_lasts_to_age: Dict[str, Optional[int]]
    super_exhaustion_year: Optional[int] = None

    # Age pension
    pension_start_year: Dict[str, Optional[int]]
    lifetime_pension_value: float = Field(..., ge=0)

    # Overall assessment
    feasibility_rate: float = Field(..., ge=0, le=1)
    fire_feasible: bool
    fire_confidence_score: int = Field(..., ge=0, le=100)
    major_risks: List[str] = Field(default_factory=list)
    optimization_opportunities: List[str] = Field(default_factory=list)


def surplus_volatility(values: List[float]) -> float:
    """Population standard deviation, 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


class MetricsAnalyzer:
    """Derives feasibility metrics from a projection timeline."""

    def __init__(self, request: RunRequest):
        self.request = request

    def analyze(self, timeline: List[YearRow]) -> Metrics:
        """
        Calculate every metric for ``timeline``.

        Args:
            timeline: Full projection timeline, at least one row

        Returns:
            Metrics for the run
        """
        if not timeline:
            raise ValueError("Cannot analyze an empty timeline")

        bridge_years = self.bridge_years_needed()
        shortfall = self._bridge_shortfall(timeline)
        lasts_to_age = self._super_lasts_to_age(timeline)

        feasibility_rate = sum(row.fire_feasible for row in timeline) / len(timeline)
        fire_feasible = feasibility_rate >= FEASIBLE_YEAR_FRACTION
        score = self._confidence_score(timeline, feasibility_rate)

        return Metrics(
            bridge_required_today=shortfall,
            bridge_funding_estimate=estimate_bridge_requirement(self.request, bridge_years),
            bridge_years_needed=bridge_years,
            bridge_feasible=(
                shortfall
                <= self.request.household.assets.non_super_investments
                * BRIDGE_FUNDABLE_FRACTION
            ),
            super_lasts_to_age=lasts_to_age,
            super_exhaustion_year=self._exhaustion_year(timeline),
            pension_start_year=self._pension_start_years(timeline),
            lifetime_pension_value=sum(row.total_pension for row in timeline),
            feasibility_rate=feasibility_rate,
            fire_feasible=fire_feasible,
            fire_confidence_score=score,
            major_risks=self._major_risks(timeline, fire_feasible, lasts_to_age),
            optimization_opportunities=self._opportunities(fire_feasible, score),
        )

    def bridge_years_needed(self) -> int:
        """Years between the earliest FIRE age and the preservation age."""
        fire_ages = [
            p.fire_age for p in self.request.household.people if p.fire_age is not None
        ]
        if not fire_ages:
            return 0
        return max(0, self.request.assumptions.preservation_age - min(fire_ages))

    def _bridge_shortfall(self, timeline: List[YearRow]) -> float:
        # Bridge years are the rows where nobody can access super yet
        return sum(
            -row.surplus_deficit
            for row in timeline
            if not row.super_accessible and row.surplus_deficit < 0
        )

    def _super_lasts_to_age(self, timeline: List[YearRow]) -> Dict[str, Optional[int]]:
        lasts_to_age: Dict[str, Optional[int]] = {}
        for person in self.request.household.people:
            last_age = None
            for row in timeline:
                balance = row.balance_for(person.id)
                if balance is not None and balance > EXHAUSTED_BALANCE:
                    last_age = row.ages[person.id]
            lasts_to_age[person.id] = last_age
        return lasts_to_age

    def _exhaustion_year(self, timeline: List[YearRow]) -> Optional[int]:
        for row in timeline:
            if row.super_accessible and row.total_super <= EXHAUSTED_BALANCE:
                return row.year
        return None

    def _pension_start_years(self, timeline: List[YearRow]) -> Dict[str, Optional[int]]:
        start_years: Dict[str, Optional[int]] = {}
        for person in self.request.household.people:
            start_years[person.id] = next(
                (
                    row.year
                    for row in timeline
                    if row.age_pension_eligible.get(person.id)
                    and row.age_pension_amount.get(person.id, 0.0) > 0
                ),
                None,
            )
        return start_years

    def _confidence_score(self, timeline: List[YearRow], feasibility_rate: float) -> int:
        expenses = self.request.household.annual_expenses.current
        score = feasibility_rate * 60

        # Strong terminal position
        if timeline[-1].total_net_worth > expenses * 10:
            score += 20

        # Pension safety net
        if any(row.total_pension > 0 for row in timeline):
            score += 10

        if surplus_volatility([row.surplus_deficit for row in timeline]) > expenses * 0.5:
            score -= 10

        return int(round(max(0.0, min(100.0, score))))

    def _major_risks(
        self,
        timeline: List[YearRow],
        fire_feasible: bool,
        lasts_to_age: Dict[str, Optional[int]],
    ) -> List[str]:
        risks = []
        if not fire_feasible:
            risks.append(
                "FIRE plan not currently feasible: insufficient income to cover expenses"
            )

        window_end = self.request.horizon.start_year + EARLY_YEARS_WINDOW
        early_deficits = sum(
            1 for row in timeline if row.year < window_end and row.surplus_deficit < 0
        )
        if early_deficits > MAX_EARLY_DEFICIT_YEARS:
            risks.append("Significant bridge funding shortfall in early FIRE years")

        known_ages = [age for age in lasts_to_age.values() if age is not None]
        if known_ages and min(known_ages) < LONGEVITY_RISK_AGE:
            risks.append(
                f"Super may be exhausted before age {LONGEVITY_RISK_AGE}: longevity risk"
            )
        return risks

    def _opportunities(self, fire_feasible: bool, score: int) -> List[str]:
        household = self.request.household
        strategy = self.request.strategy
        opportunities = []

        if household.assets.non_super_investments < household.annual_expenses.current * 2:
            opportunities.append(
                "Increase non-super investments for bridge funding flexibility"
            )
        if not strategy.bridge.rental_income.use_portfolio and fire_feasible:
            opportunities.append(
                "Consider rental property investment for additional FIRE income"
            )
        if strategy.spenddown.type == "min_drawdown_only" and score > 70:
            opportunities.append(
                "Consider a dynamic withdrawal strategy to optimise super longevity"
            )
        return opportunities


def calculate_metrics(timeline: List[YearRow], request: RunRequest) -> Metrics:
    return MetricsAnalyzer(request).analyze(timeline)
