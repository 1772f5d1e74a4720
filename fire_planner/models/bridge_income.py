"""
Bridge income: non-super income that carries the household from stopping
work until retirement accounts can be accessed.

Four independent sources are summed for each year:

1. Salary of a partner who keeps working under a staggered strategy
2. Part-time or consulting income
3. Net rental income
4. Lump-sum events, counted at expected value after a flat tax
"""

from typing import Collection, Dict, Optional

from .household import Person
from .request import RunRequest
from .strategy import BridgeIncome, PartTimeIncome, RentalIncome
from .timeline import BridgeIncomeBreakdown


def find_working_partner(
    request: RunRequest, ages: Dict[str, int], retired_ids: Collection[str]
) -> Optional[Person]:
    """Partner still working while the other has retired, if the strategy has one."""
    household = request.household
    if not household.is_couple or not household.strategy.is_staggered:
        return None
    if not retired_ids:
        return None

    access_age = request.assumptions.preservation_age
    for person in household.people:
        if person.id not in retired_ids and ages[person.id] < access_age:
            return person
    return None


def working_partner_salary(
    person: Person, age: int, bridge: BridgeIncome, access_age: int
) -> float:
    """Declining salary of the working partner.

    The decline compounds over the configured years of post-FIRE work, capped
    at the years left until the partner reaches access age.
    """
    config = bridge.salary_income.get(person.id)
    if config is None:
        return person.annual_salary

    years_working = min(config.years_working_post_fire, access_age - age)
    if years_working <= 0:
        return 0.0
    return person.annual_salary * (1 - config.salary_decline_rate / 100) ** years_working


def part_time_income_for(config: PartTimeIncome, years_since_start: int) -> float:
    if config.annual_amount <= 0 or years_since_start >= config.years_duration:
        return 0.0
    declined = config.annual_amount * (1 - config.decline_rate / 100) ** years_since_start
    return max(0.0, declined)


def rental_income_for(config: RentalIncome, years_since_start: int) -> float:
    """Net rent across the portfolio, each property floored at zero."""
    if not config.use_portfolio:
        return 0.0

    total = 0.0
    for prop in config.properties:
        gross = prop.weekly_rent * 52 * (1 + prop.rental_growth_rate / 100) ** years_since_start
        vacancy_loss = gross * (prop.vacancy_rate / 100)
        total += max(0.0, gross - vacancy_loss - prop.annual_expenses)
    return total


def lump_sums_for(bridge: BridgeIncome, year: int) -> float:
    """Expected after-tax value of bridge-funding events landing in ``year``."""
    return sum(
        event.expected_net_amount
        for event in bridge.lump_sum_events
        if event.date.year == year and event.allocation_strategy == "bridge_funding"
    )


def run_bridge_income(
    year: int,
    request: RunRequest,
    ages: Dict[str, int],
    retired_ids: Collection[str],
    years_since_start: int,
) -> BridgeIncomeBreakdown:
    """Bridge income by source for one projected year."""
    bridge = request.strategy.bridge
    access_age = request.assumptions.preservation_age

    salary = 0.0
    partner = find_working_partner(request, ages, retired_ids)
    if partner is not None:
        salary = working_partner_salary(partner, ages[partner.id], bridge, access_age)

    return BridgeIncomeBreakdown(
        salary_income=salary,
        part_time_income=part_time_income_for(bridge.part_time_income, years_since_start),
        rental_income=rental_income_for(bridge.rental_income, years_since_start),
        lump_sum_received=lump_sums_for(bridge, year),
    )


def estimate_bridge_requirement(request: RunRequest, years_until_access: int) -> float:
    """Planning estimate of the funding gap before super can be accessed.

    Expenses are inflated at the model's inflation rate. Bridge income is a
    rough projection: part-time income, rent at 90% of gross and lump sums at
    80% of expected value.
    """
    expenses = request.household.annual_expenses.current
    inflation = request.returns.assumptions.inflation_rate
    bridge = request.strategy.bridge
    start_year = request.horizon.start_year
    properties = bridge.rental_income.properties

    required = 0.0
    estimated_income = 0.0
    for offset in range(max(0, years_until_access)):
        required += expenses * (1 + inflation) ** offset
        estimated_income += part_time_income_for(bridge.part_time_income, offset)

        if bridge.rental_income.use_portfolio and properties:
            weekly = sum(prop.weekly_rent for prop in properties)
            growth = sum(prop.rental_growth_rate for prop in properties) / len(properties) / 100
            estimated_income += weekly * 52 * (1 + growth) ** offset * 0.9

        for event in bridge.lump_sum_events:
            if (
                event.date.year - start_year == offset
                and event.allocation_strategy == "bridge_funding"
            ):
                estimated_income += event.amount * (event.probability / 100) * 0.8

    return max(0.0, required - estimated_income)
