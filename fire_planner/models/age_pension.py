"""
Age pension means test.

The payment is the lower of the assets test and the income test. Each test
starts from the maximum payment (halved per person for couples) and is
floored at zero independently before the minimum is taken.
"""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from .assumptions import AgePensionRules, Assumptions
from .household import HouseholdAssets
from .request import RunRequest


class MeansTestResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    assets_test_amount: float
    income_test_amount: float

    @property
    def amount(self) -> float:
        return min(self.assets_test_amount, self.income_test_amount)

    @property
    def eligible(self) -> bool:
        return self.amount > 0


class AgePensionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    eligible: Dict[str, bool] = Field(default_factory=dict)
    amounts: Dict[str, float] = Field(default_factory=dict)


def assessable_assets(
    super_balance: float,
    non_super_balance: float,
    assets: HouseholdAssets,
    assumptions: Assumptions,
) -> float:
    """Assets counted by the means test, floored at zero.

    The family home is excluded for homeowners.
    """
    total = super_balance + non_super_balance + assets.other_assets
    if not assumptions.policy_settings.homeowner_status:
        total += assets.home_value or 0.0
    total -= assets.mortgage_balance or 0.0
    return max(0.0, total)


def deemed_income(assets_value: float, rules: AgePensionRules) -> float:
    """Income deemed to be earned on assessable assets."""
    if assets_value <= rules.deeming_threshold:
        return assets_value * rules.deeming_rate_lower
    return (
        rules.deeming_threshold * rules.deeming_rate_lower
        + (assets_value - rules.deeming_threshold) * rules.deeming_rate_upper
    )


def apply_means_tests(
    assets_value: float, income: float, rules: AgePensionRules, is_couple: bool
) -> MeansTestResult:
    if is_couple:
        max_payment = rules.maximum_payment_couple / 2
        assets_threshold = rules.assets_test_threshold_couple
        income_threshold = rules.income_test_threshold_couple / 2
        assets_taper = rules.assets_taper_couple
    else:
        max_payment = rules.maximum_payment_single
        assets_threshold = rules.assets_test_threshold_single
        income_threshold = rules.income_test_threshold_single
        assets_taper = rules.assets_taper_single

    assets_amount = max_payment - max(0.0, assets_value - assets_threshold) * assets_taper
    income_amount = max_payment - max(0.0, income - income_threshold) * rules.income_taper
    return MeansTestResult(
        assets_test_amount=max(0.0, assets_amount),
        income_test_amount=max(0.0, income_amount),
    )


def run_age_pension(
    request: RunRequest,
    ages: Dict[str, int],
    super_balances: Dict[str, float],
    non_super_balance: float,
) -> AgePensionResult:
    """Pension eligibility and annual amount per person.

    Args:
        request: Run request
        ages: Person id to age for the year
        super_balances: Balances after this year's withdrawals
        non_super_balance: Household investments outside super
    """
    rules = request.assumptions.age_pension
    household = request.household
    eligible: Dict[str, bool] = {}
    amounts: Dict[str, float] = {}

    for person in household.people:
        if ages[person.id] < rules.pension_age:
            eligible[person.id] = False
            amounts[person.id] = 0.0
            continue

        assets_value = assessable_assets(
            super_balances.get(person.id, 0.0),
            non_super_balance,
            household.assets,
            request.assumptions,
        )
        result = apply_means_tests(
            assets_value, deemed_income(assets_value, rules), rules, household.is_couple
        )
        eligible[person.id] = result.eligible
        amounts[person.id] = result.amount

    return AgePensionResult(eligible=eligible, amounts=amounts)
