"""
Request validation for the planning engine.

Validation runs every check and collects all violations before returning.
Errors are fatal and stop the run; warnings are advisory and are passed
through to the result.

Ages are measured against a reference year. When the caller does not supply
one, the horizon's start year is used so validation stays independent of the
wall clock.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .household import STAGGERED_STRATEGIES, Household, Person
from .request import Horizon, MonteCarloSettings, ReturnModel, RunRequest
from .strategy import Strategy

# Bounds accepted by the Monte Carlo configuration
MAX_SIMULATION_RUNS = 100_000
MAX_RETIREMENT_YEARS = 100


class ValidationReport(BaseModel):
    """Collected validation outcome."""

    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationReport") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)


def validate_run_request(
    request: RunRequest, reference_year: Optional[int] = None
) -> ValidationReport:
    """Validate a run request.

    Args:
        request: The request to check
        reference_year: Calendar year used to derive current ages. Defaults to
            the horizon start year.

    Returns:
        ValidationReport with every error and warning found
    """
    year = reference_year if reference_year is not None else request.horizon.start_year

    report = ValidationReport()
    report.extend(validate_household(request.household, year))
    report.extend(
        validate_return_model(request.returns, request.options.include_monte_carlo)
    )
    report.extend(validate_strategy(request.strategy, request.household, year))
    report.extend(validate_horizon(request.horizon, request.household, year))
    report.extend(validate_cross_constraints(request))
    if not request.assumptions.id:
        report.errors.append("Assumptions must have an ID")
    if not request.assumptions.financial_year:
        report.errors.append("Assumptions must specify financial year")
    runs = request.options.monte_carlo_runs
    if runs is not None and runs <= 0:
        report.errors.append("Monte Carlo runs must be a positive integer")
    elif runs is not None and runs > MAX_SIMULATION_RUNS:
        report.errors.append("Monte Carlo runs cannot exceed 100,000")
    if request.options.seed is not None and request.options.seed < 0:
        report.errors.append("Monte Carlo seed must be non-negative")
    return report


def validate_household(household: Household, reference_year: int) -> ValidationReport:
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings
    people = household.people

    if not people:
        errors.append("Household must have at least one person")
    if len(people) > 2:
        errors.append("Household cannot have more than 2 people")
    if household.structure == "couple" and len(people) != 2:
        errors.append("Couple household must have exactly 2 people")
    if household.structure == "single" and len(people) != 1:
        errors.append("Single household must have exactly 1 person")

    ids = [person.id for person in people]
    if len(set(ids)) != len(ids):
        errors.append("Person IDs must be unique")

    for index, person in enumerate(people, start=1):
        report.extend(validate_person(person, index, reference_year))

    expenses = household.annual_expenses
    if expenses.single_person <= 0:
        errors.append("Single person expenses must be positive")
    if expenses.couple <= 0:
        errors.append("Couple expenses must be positive")
    if expenses.couple < expenses.single_person:
        warnings.append(
            "Couple expenses are less than single person expenses - this may be unrealistic"
        )
    if expenses.current <= 0:
        errors.append("Current expenses must be positive")

    assets = household.assets
    if assets.non_super_investments < 0:
        errors.append("Non-super investments cannot be negative")
    if assets.other_assets < 0:
        errors.append("Other assets cannot be negative")
    if assets.mortgage_balance is not None and assets.mortgage_balance < 0:
        errors.append("Mortgage balance cannot be negative")
    if (
        assets.home_value
        and assets.mortgage_balance
        and assets.mortgage_balance > assets.home_value
    ):
        warnings.append("Mortgage balance exceeds home value - negative equity situation")

    return report


def validate_person(person: Person, index: int, reference_year: int) -> ValidationReport:
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings
    label = f"Person {index}"
    age = reference_year - person.birth_year

    if not person.id.strip():
        errors.append(f"{label}: ID is required")
    if not person.name.strip():
        errors.append(f"{label}: Name is required")

    if person.birth_year < 1900 or person.birth_year > reference_year:
        errors.append(f"{label}: Birth year must be between 1900 and {reference_year}")
    if age < 18:
        errors.append(f"{label}: Must be at least 18 years old")
    if age > 100:
        warnings.append(f"{label}: Age over 100 - please verify birth year")

    if person.super_balance < 0:
        errors.append(f"{label}: Super balance cannot be negative")
    if person.super_balance > 10_000_000:
        warnings.append(
            f"{label}: Super balance over $10M - may trigger additional tax considerations"
        )

    if person.annual_salary < 0:
        errors.append(f"{label}: Annual salary cannot be negative")
    if person.annual_salary > 1_000_000:
        warnings.append(
            f"{label}: Annual salary over $1M - may trigger additional tax considerations"
        )

    rate = person.super_contribution_rate
    if rate is not None and not 0 <= rate <= 1:
        errors.append(f"{label}: Super contribution rate must be between 0 and 100%")

    if person.fire_age is not None:
        if person.fire_age <= age:
            errors.append(f"{label}: FIRE age must be in the future")
        if person.fire_age > 67:
            warnings.append(f"{label}: FIRE age after 67 - consider normal retirement instead")
        if person.fire_age < 35:
            warnings.append(f"{label}: FIRE age before 35 - very aggressive timeline")

    if person.life_expectancy < 70:
        warnings.append(
            f"{label}: Life expectancy below 70 - may want to consider longevity risk"
        )
    if person.life_expectancy > 110:
        warnings.append(f"{label}: Life expectancy above 110 - please verify")
    if person.life_expectancy <= age:
        errors.append(f"{label}: Life expectancy must be greater than current age")

    return report


def validate_return_model(
    returns: ReturnModel, include_monte_carlo: bool = False
) -> ValidationReport:
    """Rate bounds, plus Monte Carlo settings whenever a simulation could use them."""
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings
    rates = returns.assumptions

    if not 0 <= rates.super_return_rate <= 0.20:
        errors.append("Super return rate must be between 0% and 20%")
    if not 0 <= rates.non_super_return_rate <= 0.20:
        errors.append("Non-super return rate must be between 0% and 20%")
    if not 0 <= rates.inflation_rate <= 0.15:
        errors.append("Inflation rate must be between 0% and 15%")

    if rates.super_return_rate - rates.inflation_rate < -0.05:
        warnings.append(
            "Super real return is significantly negative - consider adjusting assumptions"
        )
    if rates.non_super_return_rate - rates.inflation_rate < -0.05:
        warnings.append(
            "Non-super real return is significantly negative - consider adjusting assumptions"
        )

    if rates.volatility is not None and not 0 <= rates.volatility <= 0.50:
        errors.append("Volatility must be between 0% and 50%")

    settings = returns.monte_carlo_settings
    if settings is None and include_monte_carlo:
        settings = MonteCarloSettings()
    if settings is not None:
        runs = settings.simulation_runs
        if runs <= 0:
            errors.append("Monte Carlo runs must be a positive integer")
        elif runs > MAX_SIMULATION_RUNS:
            errors.append("Monte Carlo runs cannot exceed 100,000")
        elif runs < 100:
            warnings.append("Monte Carlo runs below 100 - results may be unreliable")
        elif runs > 10_000:
            warnings.append("Monte Carlo runs above 10,000 - computation may be slow")

        allocation = settings.asset_allocation
        if abs(allocation.total - 1.0) > 0.01:
            errors.append("Asset allocation must sum to 100%")
        for name in ("stocks", "bonds", "cash"):
            weight = getattr(allocation, name)
            if not 0 <= weight <= 1:
                errors.append(f"{name.capitalize()} allocation must be between 0% and 100%")

        if not 1 <= settings.retirement_years <= MAX_RETIREMENT_YEARS:
            errors.append("Monte Carlo retirement years must be between 1 and 100")
        if settings.inflation_volatility < 0:
            errors.append("Inflation volatility cannot be negative")
        if not -1 <= settings.correlation_coefficient <= 1:
            errors.append("Correlation coefficient must be between -1 and 1")

    return report


def validate_strategy(
    strategy: Strategy, household: Household, reference_year: int
) -> ValidationReport:
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings

    if household.structure == "single" and household.strategy.type in STAGGERED_STRATEGIES:
        errors.append("Single person household cannot use couple-specific strategies")

    planning_age = strategy.spenddown.longevity_planning_age
    if planning_age < 70:
        warnings.append("Longevity planning age below 70 - consider longevity risk")
    if planning_age > 110:
        warnings.append("Longevity planning age above 110 - may be overly conservative")

    for index, event in enumerate(strategy.bridge.lump_sum_events, start=1):
        if event.amount <= 0:
            errors.append(f"Lump sum event {index}: Amount must be positive")
        if not 0 <= event.probability <= 100:
            errors.append(f"Lump sum event {index}: Probability must be between 0% and 100%")
        if event.date.year < reference_year:
            warnings.append(f"Lump sum event {index}: Date is in the past")

    known_ids = {person.id for person in household.people}
    for person_id in strategy.bridge.salary_income:
        if person_id not in known_ids:
            warnings.append(f"Salary bridge configured for unknown person '{person_id}'")

    return report


def validate_horizon(
    horizon: Horizon, household: Household, reference_year: int
) -> ValidationReport:
    report = ValidationReport()
    errors, warnings = report.errors, report.warnings

    if horizon.start_year < reference_year - 1:
        errors.append("Start year cannot be more than 1 year in the past")
    if horizon.start_year > reference_year + 5:
        warnings.append("Start year more than 5 years in the future - results may be speculative")
    if horizon.end_age < 70:
        warnings.append("Planning horizon ends before age 70 - consider longevity risk")
    if horizon.end_age > 110:
        warnings.append("Planning horizon extends beyond age 110 - may be overly conservative")

    if household.people:
        youngest_age = min(reference_year - person.birth_year for person in household.people)
        planning_years = horizon.end_age - youngest_age
        if planning_years > 80:
            warnings.append("Planning horizon exceeds 80 years - computation may be slow")
        if planning_years < 10:
            warnings.append(
                "Planning horizon less than 10 years - may be too short for FIRE planning"
            )

    return report


def validate_cross_constraints(request: RunRequest) -> ValidationReport:
    report = ValidationReport()
    household = request.household
    total_super = household.total_super
    expenses = household.annual_expenses.current

    if total_super < expenses * 5:
        report.warnings.append(
            "Current super balance is less than 5x annual expenses - "
            "FIRE may require significant bridge funding"
        )

    fire_ages = [p.fire_age for p in household.people if p.fire_age is not None]
    if fire_ages and total_super < expenses * (min(fire_ages) - 40) * 0.25:
        report.warnings.append(
            "Current super balance may be insufficient for target FIRE age - "
            "consider more aggressive savings or later FIRE date"
        )

    if request.options.include_monte_carlo and request.returns.type != "monte_carlo":
        report.warnings.append(
            "Monte Carlo requested with a deterministic return model - "
            "default market assumptions will be used"
        )

    return report
