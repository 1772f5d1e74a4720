"""
Run request: the complete, self-contained input to one projection.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from .assumptions import Assumptions
from .household import Household
from .strategy import Strategy

MonteCarloWithdrawalStrategy = Literal[
    "fixed_real", "fixed_nominal", "dynamic", "floor_ceiling"
]


class ReturnAssumptions(BaseModel):
    super_return_rate: float = Field(default=0.07)
    non_super_return_rate: float = Field(default=0.06)
    inflation_rate: float = Field(default=0.025)
    volatility: Optional[float] = Field(default=None)


class AssetAllocation(BaseModel):
    stocks: float = Field(default=0.6)
    bonds: float = Field(default=0.3)
    cash: float = Field(default=0.1)

    @property
    def total(self) -> float:
        return self.stocks + self.bonds + self.cash


class MonteCarloSettings(BaseModel):
    simulation_runs: int = Field(default=1000)
    asset_allocation: AssetAllocation = Field(default_factory=AssetAllocation)
    withdrawal_strategy: MonteCarloWithdrawalStrategy = Field(default="fixed_real")
    retirement_years: int = Field(default=30)
    inflation_volatility: float = Field(default=0.01)
    correlation_coefficient: float = Field(default=-0.1)


class ReturnModel(BaseModel):
    type: Literal["deterministic", "monte_carlo"] = Field(default="deterministic")
    scenario: Literal["base", "conservative", "optimistic", "custom"] = Field(
        default="base"
    )
    assumptions: ReturnAssumptions = Field(default_factory=ReturnAssumptions)
    monte_carlo_settings: Optional[MonteCarloSettings] = Field(default=None)


class Horizon(BaseModel):
    """Simulation clock: the first projected year and the final planning age."""

    start_year: int
    end_age: int = Field(default=95)


class RunOptions(BaseModel):
    include_monte_carlo: bool = Field(default=False)
    monte_carlo_runs: Optional[int] = Field(default=None)
    include_stress_testing: bool = Field(default=True)
    detailed_timeline: bool = Field(default=True)
    seed: Optional[int] = Field(
        default=None, description="Overrides the seed derived from request parameters"
    )


class RunRequest(BaseModel):
    household: Household
    assumptions: Assumptions
    returns: ReturnModel = Field(default_factory=ReturnModel)
    strategy: Strategy = Field(default_factory=Strategy)
    horizon: Horizon
    options: RunOptions = Field(default_factory=RunOptions)

    def redacted_summary(self) -> Dict[str, Any]:
        """Diagnostic summary that carries no personal figures."""
        return {
            "household_type": self.household.structure,
            "people_count": len(self.household.people),
            "include_monte_carlo": self.options.include_monte_carlo,
        }
