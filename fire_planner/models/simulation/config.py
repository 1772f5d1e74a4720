"""
Monte Carlo configuration.

MarketAssumptions describes the joint distribution of annual returns and
inflation. MonteCarloConfig holds everything else a run needs: trial count,
horizon, the consolidated starting portfolio, the withdrawal strategy, and
the seed and worker settings that control reproducibility and parallelism.
"""

import hashlib
import json
from typing import Literal, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..request import AssetAllocation, MonteCarloSettings, RunRequest

WithdrawalStrategy = Literal["fixed_real", "fixed_nominal", "dynamic", "floor_ceiling"]


class MarketAssumptions(BaseModel):
    """Annual return and inflation distribution parameters."""

    model_config = ConfigDict(frozen=True)

    mean_return: float = Field(default=0.07, description="Expected annual return")
    volatility: float = Field(default=0.15, ge=0, description="Return std deviation")
    inflation_mean: float = Field(default=0.025, description="Expected inflation")
    inflation_volatility: float = Field(
        default=0.01, ge=0, description="Inflation std deviation"
    )
    correlation_coefficient: float = Field(
        default=-0.1, ge=-1, le=1, description="Return/inflation correlation"
    )


class MonteCarloConfig(BaseModel):
    """
    Parameters for one Monte Carlo run.

    Example:
        ```python
        config = MonteCarloConfig(
            simulation_runs=1000,
            retirement_years=30,
            initial_portfolio=1_000_000,
            initial_withdrawal_rate=0.04,
            seed=42,
        )
        ```
    """

    model_config = ConfigDict(frozen=True)

    simulation_runs: int = Field(..., gt=0, le=100000, description="Number of trials")
    retirement_years: int = Field(default=30, gt=0, le=100)
    initial_portfolio: float = Field(..., ge=0)
    initial_withdrawal_rate: float = Field(..., ge=0)
    withdrawal_strategy: WithdrawalStrategy = Field(default="fixed_real")
    asset_allocation: AssetAllocation = Field(default_factory=AssetAllocation)
    seed: Optional[int] = Field(default=None, ge=0)
    max_workers: int = Field(default=1, ge=1, le=64)
    batch_size: int = Field(default=250, ge=1)

    @model_validator(mode="after")
    def validate_allocation(self) -> "MonteCarloConfig":
        """Allocation weights must sum to 1 within 1%."""
        if not np.isclose(self.asset_allocation.total, 1.0, atol=0.01):
            raise ValueError(
                f"Asset allocation must sum to 1.0, got {self.asset_allocation.total}"
            )
        return self

    @property
    def initial_withdrawal(self) -> float:
        return self.initial_portfolio * self.initial_withdrawal_rate


def derive_seed(request: RunRequest) -> int:
    """Stable seed derived from the parameters that shape a run."""
    payload = json.dumps(
        {
            "people": [
                {
                    "birth_year": p.birth_year,
                    "super_balance": p.super_balance,
                    "fire_age": p.fire_age,
                }
                for p in request.household.people
            ],
            "expenses": request.household.annual_expenses.current,
            "strategy": request.strategy.spenddown.type,
            "scenario": request.returns.scenario,
            "assumptions": request.assumptions.id,
        },
        sort_keys=True,
    )
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return int(digest[:8], 16)


def config_from_request(
    request: RunRequest,
    runs: int,
    seed: int,
    max_workers: int = 1,
    batch_size: int = 250,
) -> Tuple[MonteCarloConfig, MarketAssumptions]:
    """Build a Monte Carlo run from a planning request.

    The portfolio consolidates every super balance with non-super investments
    and the initial withdrawal rate is current spending over that portfolio.
    Return and inflation means come from the request's return model.
    """
    household = request.household
    rates = request.returns.assumptions
    settings = request.returns.monte_carlo_settings or MonteCarloSettings()

    portfolio = household.total_super + household.assets.non_super_investments
    expenses = household.annual_expenses.current
    # An empty portfolio cannot fund any spending
    withdrawal_rate = expenses / portfolio if portfolio > 0 else 0.0

    market_defaults = MarketAssumptions()
    market = MarketAssumptions(
        mean_return=rates.super_return_rate,
        volatility=(
            rates.volatility if rates.volatility is not None else market_defaults.volatility
        ),
        inflation_mean=rates.inflation_rate,
        inflation_volatility=settings.inflation_volatility,
        correlation_coefficient=settings.correlation_coefficient,
    )
    config = MonteCarloConfig(
        simulation_runs=runs,
        retirement_years=settings.retirement_years,
        initial_portfolio=portfolio,
        initial_withdrawal_rate=withdrawal_rate,
        withdrawal_strategy=settings.withdrawal_strategy,
        asset_allocation=settings.asset_allocation,
        seed=seed,
        max_workers=max_workers,
        batch_size=batch_size,
    )
    return config, market
