"""
Run result: everything one projection returns to its caller.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .charts import ChartData
from .metrics import Metrics
from .request import RunRequest
from .simulation.result import MonteCarloSummary
from .timeline import YearRow


class RequestSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    household_type: str
    fire_ages: List[int]
    total_current_super: float
    annual_expenses: float
    strategy_description: str

    @classmethod
    def from_request(cls, request: RunRequest) -> "RequestSummary":
        household = request.household
        return cls(
            household_type=household.structure,
            fire_ages=[p.fire_age for p in household.people if p.fire_age is not None],
            total_current_super=household.total_super,
            annual_expenses=household.annual_expenses.current,
            strategy_description=(
                f"{household.strategy.type} with "
                f"{request.strategy.spenddown.withdrawal_method} withdrawals"
            ),
        )


class ComputationInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    engine_version: str
    assumptions_version: str
    computation_time_ms: float = Field(..., ge=0)
    deterministic_seed: Optional[int] = None
    cache_hit: bool = False


class RunResult(BaseModel):
    """
    Output of one planning run.

    ``timeline`` is empty when the request asked for no detailed timeline;
    charts and metrics are always computed from the full projection.
    """

    model_config = ConfigDict(frozen=True)

    request_summary: RequestSummary
    timeline: List[YearRow] = Field(default_factory=list)
    charts: ChartData
    metrics: Metrics
    monte_carlo: Optional[MonteCarloSummary] = None
    warnings: List[str] = Field(default_factory=list)
    computation_info: ComputationInfo

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        data["timeline"] = [row.to_dict() for row in self.timeline]
        return data
