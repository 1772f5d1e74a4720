"""
Household models for FIRE planning requests.

These models only enforce types. Domain rules (positive expenses, FIRE age in
the future, household size matching its structure) are checked by the
validation layer so that every violation is reported in one batch.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

HouseholdStrategyType = Literal[
    "both_stop_same_year",
    "person1_fire_first",
    "person2_fire_first",
    "staggered_retirement",
]
ExpenseModeling = Literal[
    "household_throughout", "single_then_household", "dynamic_optimization", "current"
]
WithdrawalSequencing = Literal["sequential", "proportional", "tax_optimized"]

STAGGERED_STRATEGIES = ("person1_fire_first", "person2_fire_first", "staggered_retirement")


class Person(BaseModel):
    """A member of the household."""

    id: str = Field(..., description="Opaque identifier, used as the key in year rows")
    name: str = Field(..., description="Display name")
    birth_year: int = Field(..., description="Calendar year of birth")
    super_balance: float = Field(
        default=0.0, description="Current retirement account balance"
    )
    annual_salary: float = Field(default=0.0, description="Current gross salary")
    super_contribution_rate: Optional[float] = Field(
        default=None, description="Voluntary contribution rate on top of the guarantee"
    )
    fire_age: Optional[int] = Field(
        default=None, description="Age at which this person stops paid work"
    )
    life_expectancy: int = Field(default=90, description="Expected age at death")

    def age_in(self, year: int) -> int:
        """Age reached during the given calendar year."""
        return year - self.birth_year

    def is_retired(self, age: int) -> bool:
        return self.fire_age is not None and age >= self.fire_age

    def is_working(self, age: int) -> bool:
        return self.fire_age is None or age < self.fire_age


class AnnualExpenses(BaseModel):
    """Expense schedule in today's dollars."""

    single_person: float = Field(..., description="Annual spend for one person")
    couple: float = Field(..., description="Annual spend for a couple")
    current: float = Field(..., description="Current household spend")


class HouseholdAssets(BaseModel):
    """Snapshot of assets held outside retirement accounts."""

    non_super_investments: float = Field(default=0.0)
    home_value: Optional[float] = Field(default=None)
    mortgage_balance: Optional[float] = Field(default=None)
    other_assets: float = Field(default=0.0)


class HouseholdStrategy(BaseModel):
    """How the household sequences retirement and models spending."""

    type: HouseholdStrategyType = Field(default="both_stop_same_year")
    expense_modeling: ExpenseModeling = Field(default="household_throughout")
    withdrawal_sequencing: WithdrawalSequencing = Field(default="proportional")

    @property
    def is_staggered(self) -> bool:
        return self.type in STAGGERED_STRATEGIES


class Household(BaseModel):
    """One or two people plus their shared expenses and assets."""

    people: List[Person] = Field(default_factory=list)
    structure: Literal["single", "couple"] = Field(default="single")
    annual_expenses: AnnualExpenses
    assets: HouseholdAssets = Field(default_factory=HouseholdAssets)
    strategy: HouseholdStrategy = Field(default_factory=HouseholdStrategy)

    @property
    def is_couple(self) -> bool:
        return self.structure == "couple"

    @property
    def total_super(self) -> float:
        return sum(person.super_balance for person in self.people)

    def ages_in(self, year: int) -> Dict[str, int]:
        """Map of person id to age for a calendar year."""
        return {person.id: person.age_in(year) for person in self.people}

    def youngest_age_in(self, year: int) -> int:
        return min(person.age_in(year) for person in self.people)

    def get_person(self, person_id: str) -> Person:
        for person in self.people:
            if person.id == person_id:
                return person
        raise KeyError(f"Unknown person id: {person_id}")
