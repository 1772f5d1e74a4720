"""
Retirement account spenddown after access age.

Each person at or past access age with a positive balance withdraws the
larger of the age-banded minimum drawdown and the amount chosen by the
configured withdrawal method, never more than the balance itself.
"""

from typing import Collection, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import Assumptions
from .household import Person
from .request import RunRequest
from .strategy import SpenddownStrategy, WithdrawalMethod
from .timeline import YearRow

BASE_WITHDRAWAL_RATE = 0.04
SPEND_TO_ZERO_FLOOR = 0.02
SPEND_TO_ZERO_CEILING = 0.15
DYNAMIC_TARGET_GROWTH = 0.04


class SpenddownResult(BaseModel):
    """Withdrawals, minimums and post-withdrawal balances keyed by person id."""

    model_config = ConfigDict(frozen=True)

    withdrawals: Dict[str, float] = Field(default_factory=dict)
    minimum_drawdowns: Dict[str, float] = Field(default_factory=dict)
    remaining_balances: Dict[str, float] = Field(default_factory=dict)


def minimum_drawdown_rate(age: int, assumptions: Assumptions) -> float:
    return assumptions.superannuation.minimum_drawdown_rate(age)


def spend_to_zero_payment(
    balance: float, years_remaining: int, return_rate: float, inflation_rate: float
) -> float:
    """Level payment that exhausts ``balance`` over ``years_remaining`` years.

    Uses the annuity formula at the real return, falling back to straight-line
    division when the real return is effectively zero. The result is clamped
    to between 2% and 15% of the balance.
    """
    if years_remaining <= 0:
        return balance

    real_return = return_rate - inflation_rate
    if abs(real_return) < 0.001:
        return balance / years_remaining

    growth = (1 + real_return) ** years_remaining
    payment = balance * (real_return * growth) / (growth - 1)
    return max(balance * SPEND_TO_ZERO_FLOOR, min(payment, balance * SPEND_TO_ZERO_CEILING))


def dynamic_withdrawal_rate(balance: float, target_balance: float) -> float:
    if target_balance <= 0:
        return BASE_WITHDRAWAL_RATE
    ratio = balance / target_balance
    if ratio > 1.2:
        return 0.05
    if ratio < 0.8:
        return 0.03
    return BASE_WITHDRAWAL_RATE


def strategy_withdrawal(
    method: WithdrawalMethod,
    balance: float,
    age: int,
    person: Person,
    request: RunRequest,
    is_first_year: bool,
) -> float:
    """Amount requested by the withdrawal method before the minimum is applied."""
    spenddown = request.strategy.spenddown
    rates = request.returns.assumptions

    if method == "fixed_real":
        adjustment = 1.0 if is_first_year else 1 + rates.inflation_rate
        return balance * BASE_WITHDRAWAL_RATE * adjustment
    elif method == "fixed_nominal":
        return balance * BASE_WITHDRAWAL_RATE
    elif method == "spend_to_zero":
        return spend_to_zero_payment(
            balance,
            spenddown.longevity_planning_age - age,
            rates.super_return_rate,
            rates.inflation_rate,
        )
    elif method == "dynamic":
        start_age = person.age_in(request.horizon.start_year)
        target = person.super_balance * (1 + DYNAMIC_TARGET_GROWTH) ** (age - start_age)
        return balance * dynamic_withdrawal_rate(balance, target)
    elif method == "guardrails":
        return _guardrail_withdrawal(balance, spenddown)
    raise ValueError(f"Unsupported withdrawal method: {method}")


def _guardrail_withdrawal(balance: float, spenddown: SpenddownStrategy) -> float:
    base = balance * BASE_WITHDRAWAL_RATE
    floor = balance * spenddown.guardrail_floor_rate
    ceiling = balance * spenddown.guardrail_ceiling_rate
    return max(floor, min(ceiling, base))


def calculate_withdrawal(
    balance: float,
    minimum: float,
    age: int,
    person: Person,
    request: RunRequest,
    is_first_year: bool,
) -> float:
    """Final withdrawal: at least the minimum and at most the balance."""
    spenddown = request.strategy.spenddown
    if spenddown.type == "min_drawdown_only":
        requested = minimum
    else:
        requested = strategy_withdrawal(
            spenddown.withdrawal_method, balance, age, person, request, is_first_year
        )
    return min(balance, max(minimum, requested))


def run_spenddown(
    request: RunRequest,
    ages: Dict[str, int],
    accessible_ids: Collection[str],
    balances: Dict[str, float],
    previous_row: Optional[YearRow] = None,
) -> SpenddownResult:
    """Withdraw from each accessible balance.

    Args:
        request: Run request
        ages: Person id to age for the year
        accessible_ids: People at or past access age
        balances: Balances after this year's accumulation
        previous_row: Prior snapshot, None in the first projected year

    Returns:
        SpenddownResult keyed by person id
    """
    withdrawals: Dict[str, float] = {}
    minimums: Dict[str, float] = {}
    remaining: Dict[str, float] = {}

    for person in request.household.people:
        balance = balances.get(person.id, 0.0)
        withdrawals[person.id] = 0.0
        minimums[person.id] = 0.0
        remaining[person.id] = balance

        if person.id not in accessible_ids or balance <= 0:
            continue

        age = ages[person.id]
        minimum = balance * minimum_drawdown_rate(age, request.assumptions)
        withdrawal = calculate_withdrawal(
            balance, minimum, age, person, request, is_first_year=previous_row is None
        )
        minimums[person.id] = minimum
        withdrawals[person.id] = withdrawal
        remaining[person.id] = max(0.0, balance - withdrawal)

    return SpenddownResult(
        withdrawals=withdrawals, minimum_drawdowns=minimums, remaining_balances=remaining
    )
