"""
Strategy configuration: retirement sequencing, bridge income and spenddown.

Rates that users enter as percentages (salary decline, rental growth, vacancy,
event probability) are stored as percentages, 5.0 meaning 5%.
"""

import datetime
from typing import Dict, List, Literal

from pydantic import BaseModel, Field

TaxTreatment = Literal["tax_free", "capital_gains", "income", "super_contribution"]
AllocationStrategy = Literal[
    "bridge_funding", "investment", "debt_reduction", "super_contribution"
]
LumpSumSource = Literal[
    "inheritance", "property_sale", "investment_exit", "windfall", "bonus", "other"
]
SpenddownType = Literal["sequential", "proportional", "tax_optimized", "min_drawdown_only"]
WithdrawalMethod = Literal[
    "fixed_real", "fixed_nominal", "dynamic", "guardrails", "spend_to_zero"
]

# Flat effective tax rate applied to a lump sum, by tax treatment
LUMP_SUM_TAX_RATES: Dict[str, float] = {
    "tax_free": 0.0,
    "capital_gains": 0.15,
    "income": 0.325,
    "super_contribution": 0.15,
}


class SalaryBridgeConfig(BaseModel):
    """Salary taper for a partner who keeps working after the other retires."""

    years_working_post_fire: int = Field(default=0)
    salary_decline_rate: float = Field(default=0.0, description="Percent per year")


class PartTimeIncome(BaseModel):
    annual_amount: float = Field(default=0.0)
    years_duration: int = Field(default=0)
    decline_rate: float = Field(default=0.0, description="Percent per year")


class RentalProperty(BaseModel):
    id: str
    name: str = ""
    weekly_rent: float = Field(default=0.0)
    annual_expenses: float = Field(default=0.0)
    rental_growth_rate: float = Field(default=0.0, description="Percent per year")
    vacancy_rate: float = Field(default=0.0, description="Percent of gross rent")
    fire_suitability_score: float = Field(default=0.0)


class RentalIncome(BaseModel):
    properties: List[RentalProperty] = Field(default_factory=list)
    use_portfolio: bool = Field(default=False)


class LumpSumEvent(BaseModel):
    """A one-off receipt, counted at its expected value in the year it lands."""

    id: str
    name: str = ""
    amount: float
    date: datetime.date
    probability: float = Field(default=100.0, description="Percent chance, 0-100")
    tax_treatment: TaxTreatment = Field(default="tax_free")
    allocation_strategy: AllocationStrategy = Field(default="bridge_funding")
    source: LumpSumSource = Field(default="other")

    @property
    def flat_tax_rate(self) -> float:
        return LUMP_SUM_TAX_RATES[self.tax_treatment]

    @property
    def expected_net_amount(self) -> float:
        """Probability-weighted amount after the flat tax for its treatment."""
        return self.amount * (self.probability / 100) * (1 - self.flat_tax_rate)


class BridgeIncome(BaseModel):
    """Income sources funding the gap between retiring and super access."""

    salary_income: Dict[str, SalaryBridgeConfig] = Field(default_factory=dict)
    part_time_income: PartTimeIncome = Field(default_factory=PartTimeIncome)
    rental_income: RentalIncome = Field(default_factory=RentalIncome)
    lump_sum_events: List[LumpSumEvent] = Field(default_factory=list)


class SpenddownStrategy(BaseModel):
    """How retirement account balances are drawn down after access age."""

    type: SpenddownType = Field(default="proportional")
    withdrawal_method: WithdrawalMethod = Field(default="fixed_real")
    longevity_planning_age: int = Field(default=95)
    use_transition_to_retirement: bool = Field(default=False)
    age_pension_optimization: bool = Field(default=False)
    guardrail_floor_rate: float = Field(default=0.03)
    guardrail_ceiling_rate: float = Field(default=0.06)


class TaxOptimization(BaseModel):
    person1_drain_first: bool = Field(default=False)
    minimize_total_tax: bool = Field(default=False)
    preserve_tax_free_component: bool = Field(default=False)


class Strategy(BaseModel):
    """Bridge income, spenddown and tax settings.

    Retirement sequencing lives on the household itself.
    """

    bridge: BridgeIncome = Field(default_factory=BridgeIncome)
    spenddown: SpenddownStrategy = Field(default_factory=SpenddownStrategy)
    tax_optimization: TaxOptimization = Field(default_factory=TaxOptimization)
