"""
Year-by-year projection of a household's finances.

Each year is computed from the previous YearRow plus the request, in a fixed
order: ages and status, bridge income, accumulation, spenddown (on the
accumulated balances), age pension, tax, expenses. Sub-calculator failures are
not caught here; the planning service turns them into computation errors.
"""

import logging
from typing import Dict, List, Optional, Set

from .accumulation import is_employed, run_accumulation
from .age_pension import run_age_pension
from .bridge_income import find_working_partner, run_bridge_income
from .request import RunRequest
from .spenddown import run_spenddown
from .tax import run_tax
from .time_grid import TimeGrid
from .timeline import YearRow

logger = logging.getLogger(__name__)

# Balances at or below this are treated as exhausted
EXHAUSTED_BALANCE = 1000.0


def projection_grid(request: RunRequest) -> TimeGrid:
    """Years from the horizon start until the youngest person reaches end age."""
    start_year = request.horizon.start_year
    return TimeGrid.for_horizon(
        start_year,
        request.horizon.end_age,
        request.household.youngest_age_in(start_year),
    )


def household_expenses(
    request: RunRequest, retired_ids: Set[str], accessible_ids: Set[str]
) -> float:
    """Required spending for the year under the household's expense model."""
    household = request.household
    expenses = household.annual_expenses
    mode = household.strategy.expense_modeling

    if mode == "household_throughout":
        return expenses.couple if household.is_couple else expenses.single_person
    elif mode == "single_then_household":
        if len(retired_ids) < 2 and not accessible_ids:
            return expenses.single_person
        return expenses.couple
    elif mode == "dynamic_optimization":
        if len(retired_ids) == len(household.people) or accessible_ids:
            return expenses.couple
        return expenses.single_person
    return expenses.current


def should_terminate(row: YearRow, request: RunRequest) -> bool:
    """Stop once everyone has outlived their life expectancy or the plan is dead.

    A dead plan has exhausted super, no bridge income, no pension and nobody
    still earning a salary.
    """
    people = request.household.people
    all_deceased = all(row.ages[p.id] > p.life_expectancy for p in people)
    dead_plan = (
        row.total_super <= EXHAUSTED_BALANCE
        and row.bridge_income.total_bridge_income <= 0
        and row.total_pension <= 0
        and row.total_employment_income <= 0
    )
    return all_deceased or dead_plan


def project_year(
    year: int,
    request: RunRequest,
    grid: TimeGrid,
    previous_row: Optional[YearRow] = None,
) -> YearRow:
    """Build the snapshot for ``year`` from the previous snapshot."""
    household = request.household
    assumptions = request.assumptions
    rates = request.returns.assumptions

    ages = household.ages_in(year)
    retired_ids = {p.id for p in household.people if p.is_retired(ages[p.id])}
    accessible_ids = {
        p.id for p in household.people if ages[p.id] >= assumptions.preservation_age
    }

    bridge = run_bridge_income(
        year, request, ages, retired_ids, grid.years_since_start(year)
    )

    # A staggered working partner's salary is reported as bridge income
    partner = find_working_partner(request, ages, retired_ids)
    employment: Dict[str, float] = {}
    earned: Dict[str, float] = {}
    for person in household.people:
        salary = person.annual_salary if is_employed(person, ages[person.id], assumptions) else 0.0
        if partner is not None and person.id == partner.id:
            employment[person.id] = 0.0
            earned[person.id] = bridge.salary_income
        else:
            employment[person.id] = salary
            earned[person.id] = salary

    accumulation = run_accumulation(year, request, ages, previous_row)
    spenddown = run_spenddown(
        request, ages, accessible_ids, accumulation.balances, previous_row
    )

    opening_non_super = (
        previous_row.total_non_super
        if previous_row is not None
        else max(0.0, household.assets.non_super_investments)
    )
    pension = run_age_pension(
        request, ages, spenddown.remaining_balances, opening_non_super
    )
    tax = run_tax(assumptions, ages, earned, spenddown.withdrawals)
    expenses = household_expenses(request, retired_ids, accessible_ids)

    gross_income = (
        sum(employment.values())
        + bridge.total_bridge_income
        + sum(spenddown.withdrawals.values())
        + sum(pension.amounts.values())
    )
    net_income = gross_income - sum(tax.tax_payable.values())
    surplus = net_income - expenses

    closing_non_super = max(
        0.0, opening_non_super * (1 + rates.non_super_return_rate) + surplus
    )
    total_super = sum(spenddown.remaining_balances.values())

    return YearRow(
        year=year,
        ages=ages,
        bridge_income=bridge,
        employment_income=employment,
        bridge_expenses=expenses,
        bridge_net_position=bridge.total_bridge_income - expenses,
        super_balances=dict(spenddown.remaining_balances),
        super_contributions=dict(accumulation.contributions),
        super_returns=dict(accumulation.returns),
        super_accessible={
            pid: spenddown.remaining_balances[pid] for pid in sorted(accessible_ids)
        },
        super_withdrawals=dict(spenddown.withdrawals),
        minimum_drawdowns=dict(spenddown.minimum_drawdowns),
        age_pension_eligible=dict(pension.eligible),
        age_pension_amount=dict(pension.amounts),
        taxable_income=dict(tax.taxable_income),
        tax_payable=dict(tax.tax_payable),
        total_super=total_super,
        total_non_super=closing_non_super,
        total_net_worth=total_super + closing_non_super,
        sustainable_income=net_income,
        required_income=expenses,
        surplus_deficit=surplus,
        fire_feasible=surplus >= 0,
    )


def run_projection(request: RunRequest) -> List[YearRow]:
    """Project the household until the horizon or an early termination.

    Args:
        request: A validated run request

    Returns:
        Ordered timeline with one row per projected year
    """
    grid = projection_grid(request)
    timeline: List[YearRow] = []
    previous: Optional[YearRow] = None

    for year in grid.get_years():
        row = project_year(year, request, grid, previous)
        timeline.append(row)
        previous = row
        if should_terminate(row, request):
            logger.debug(f"Projection terminated early in {year}")
            break

    logger.debug(
        f"Projected {len(timeline)} years from {grid.start_year} to {timeline[-1].year}"
    )
    return timeline
