"""
Year-by-year projection snapshots.

A YearRow is immutable. The orchestrator builds each row from the previous
row plus the request, so the timeline is append-only.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class BridgeIncomeBreakdown(BaseModel):
    """Non-super income for a single year, split by source."""

    model_config = ConfigDict(frozen=True)

    salary_income: float = 0.0
    part_time_income: float = 0.0
    rental_income: float = 0.0
    lump_sum_received: float = 0.0

    @property
    def total_bridge_income(self) -> float:
        return (
            self.salary_income
            + self.part_time_income
            + self.rental_income
            + self.lump_sum_received
        )

    def to_dict(self) -> Dict[str, float]:
        data = self.model_dump()
        data["total_bridge_income"] = self.total_bridge_income
        return data


class YearRow(BaseModel):
    """Financial position of the household for one simulated year."""

    model_config = ConfigDict(frozen=True)

    year: int
    ages: Dict[str, int]

    bridge_income: BridgeIncomeBreakdown = Field(default_factory=BridgeIncomeBreakdown)
    employment_income: Dict[str, float] = Field(default_factory=dict)
    bridge_expenses: float = 0.0
    bridge_net_position: float = 0.0

    # End-of-year balances after contributions, growth and withdrawals
    super_balances: Dict[str, float] = Field(default_factory=dict)
    super_contributions: Dict[str, float] = Field(default_factory=dict)
    super_returns: Dict[str, float] = Field(default_factory=dict)
    super_accessible: Dict[str, float] = Field(default_factory=dict)

    super_withdrawals: Dict[str, float] = Field(default_factory=dict)
    minimum_drawdowns: Dict[str, float] = Field(default_factory=dict)

    age_pension_eligible: Dict[str, bool] = Field(default_factory=dict)
    age_pension_amount: Dict[str, float] = Field(default_factory=dict)

    taxable_income: Dict[str, float] = Field(default_factory=dict)
    tax_payable: Dict[str, float] = Field(default_factory=dict)

    total_super: float = 0.0
    total_non_super: float = 0.0
    total_net_worth: float = 0.0

    sustainable_income: float = 0.0
    required_income: float = 0.0
    surplus_deficit: float = 0.0
    fire_feasible: bool = False

    @property
    def total_withdrawals(self) -> float:
        return sum(self.super_withdrawals.values())

    @property
    def total_pension(self) -> float:
        return sum(self.age_pension_amount.values())

    @property
    def total_tax(self) -> float:
        return sum(self.tax_payable.values())

    @property
    def total_employment_income(self) -> float:
        return sum(self.employment_income.values())

    def balance_for(self, person_id: str) -> Optional[float]:
        return self.super_balances.get(person_id)

    def to_dict(self) -> Dict[str, object]:
        data = self.model_dump()
        data["bridge_income"] = self.bridge_income.to_dict()
        return data
