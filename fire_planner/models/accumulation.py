"""
Retirement account accumulation.

Contributions arrive through the year, so growth is applied to the opening
balance plus half of the year's contributions.
"""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import Assumptions
from .household import Person
from .request import RunRequest
from .timeline import YearRow


class ContributionBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    mandatory: float = 0.0
    voluntary: float = 0.0

    @property
    def total(self) -> float:
        return self.mandatory + self.voluntary


class AccumulationResult(BaseModel):
    """Per-person balances after contributions and growth for one year."""

    model_config = ConfigDict(frozen=True)

    balances: Dict[str, float] = Field(default_factory=dict)
    contributions: Dict[str, float] = Field(default_factory=dict)
    returns: Dict[str, float] = Field(default_factory=dict)


def is_employed(person: Person, age: int, assumptions: Assumptions) -> bool:
    """Whether the person earns a salary and receives contributions this year."""
    return person.is_working(age) and age < assumptions.superannuation.contribution_age_limit


def calculate_contributions(
    salary: float, voluntary_rate: Optional[float], assumptions: Assumptions
) -> ContributionBreakdown:
    """Guarantee contribution plus voluntary, with voluntary clipped at the cap.

    The guarantee amount itself is never reduced; only the voluntary part is
    limited to whatever room remains under the concessional cap.
    """
    rules = assumptions.superannuation
    mandatory = salary * rules.superannuation_guarantee_rate
    requested = salary * (voluntary_rate or 0.0)
    room = max(0.0, rules.concessional_cap - mandatory)
    return ContributionBreakdown(mandatory=mandatory, voluntary=min(requested, room))


def grow_balance(
    opening_balance: float, contributions: float, return_rate: float
) -> Tuple[float, float]:
    """Apply one year of growth with mid-year contributions.

    Returns:
        Tuple of (closing balance floored at zero, investment return)
    """
    investment_return = (opening_balance + contributions * 0.5) * return_rate
    closing = opening_balance + contributions + investment_return
    return max(0.0, closing), investment_return


def run_accumulation(
    year: int,
    request: RunRequest,
    ages: Dict[str, int],
    previous_row: Optional[YearRow] = None,
) -> AccumulationResult:
    """Contribute and grow each person's balance for ``year``.

    Args:
        year: Projected calendar year
        request: Run request supplying people, assumptions and return rate
        ages: Person id to age in ``year``
        previous_row: Prior year's snapshot, None for the first year

    Returns:
        AccumulationResult keyed by person id
    """
    balances: Dict[str, float] = {}
    contributions: Dict[str, float] = {}
    returns: Dict[str, float] = {}
    return_rate = request.returns.assumptions.super_return_rate

    for person in request.household.people:
        age = ages[person.id]
        if previous_row is not None:
            opening = previous_row.super_balances.get(person.id, 0.0)
        else:
            opening = max(0.0, person.super_balance)

        contributed = 0.0
        if is_employed(person, age, request.assumptions):
            contributed = calculate_contributions(
                person.annual_salary, person.super_contribution_rate, request.assumptions
            ).total

        closing, investment_return = grow_balance(opening, contributed, return_rate)
        balances[person.id] = closing
        contributions[person.id] = contributed
        returns[person.id] = investment_return

    return AccumulationResult(balances=balances, contributions=contributions, returns=returns)
