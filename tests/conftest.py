"""
Pytest configuration and shared fixtures for the FIRE planner tests.
"""

from typing import Any, Dict

import pytest

from fire_planner import create_app
from fire_planner.config import Settings
from fire_planner.models.assumptions_registry import AUS_2025_26
from fire_planner.models.household import (
    AnnualExpenses,
    Household,
    HouseholdAssets,
    HouseholdStrategy,
    Person,
)
from fire_planner.models.request import Horizon, RunOptions, RunRequest

START_YEAR = 2025


def make_person(**overrides: Any) -> Person:
    """A 35 year old planning to retire at 45."""
    values: Dict[str, Any] = {
        "id": "p1",
        "name": "Alex",
        "birth_year": START_YEAR - 35,
        "super_balance": 300000.0,
        "annual_salary": 120000.0,
        "fire_age": 45,
        "life_expectancy": 90,
    }
    values.update(overrides)
    return Person(**values)


def make_request(**overrides: Any) -> RunRequest:
    """A valid single-person request starting in 2025."""
    values: Dict[str, Any] = {
        "household": Household(
            people=[make_person()],
            structure="single",
            annual_expenses=AnnualExpenses(single_person=50000, couple=75000, current=50000),
            assets=HouseholdAssets(non_super_investments=400000),
        ),
        "assumptions": AUS_2025_26,
        "horizon": Horizon(start_year=START_YEAR, end_age=95),
    }
    values.update(overrides)
    return RunRequest(**values)


def make_couple_request(**overrides: Any) -> RunRequest:
    """A couple where the first partner retires at 45 and the second keeps working."""
    people = [
        make_person(),
        make_person(
            id="p2",
            name="Sam",
            birth_year=START_YEAR - 33,
            super_balance=200000.0,
            annual_salary=90000.0,
            fire_age=50,
        ),
    ]
    values: Dict[str, Any] = {
        "household": Household(
            people=people,
            structure="couple",
            annual_expenses=AnnualExpenses(single_person=50000, couple=80000, current=80000),
            assets=HouseholdAssets(non_super_investments=500000),
            strategy=HouseholdStrategy(type="person1_fire_first"),
        ),
    }
    values.update(overrides)
    return make_request(**values)


@pytest.fixture
def request_factory():
    """Build a valid request with selected fields replaced."""
    return make_request


@pytest.fixture
def person_factory():
    return make_person


@pytest.fixture
def single_request() -> RunRequest:
    return make_request()


@pytest.fixture
def couple_request() -> RunRequest:
    return make_couple_request()


@pytest.fixture
def monte_carlo_request() -> RunRequest:
    return make_request(
        options=RunOptions(include_monte_carlo=True, monte_carlo_runs=200, seed=42)
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Test settings with storage under a temporary directory."""
    return Settings(
        APP_ENV="testing",
        SECRET_KEY="test-secret-key-123",
        STORAGE_BASE_PATH=str(tmp_path / "storage"),
        MONTE_CARLO_DEFAULT_RUNS=200,
        MONTE_CARLO_MAX_RUNS=500,
        MONTE_CARLO_MAX_WORKERS=2,
        MONTE_CARLO_BATCH_SIZE=50,
        _env_file=None,
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    return app.test_client()
