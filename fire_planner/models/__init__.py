"""Data models and calculators for FIRE planning."""

from .assumptions import Assumptions
from .assumptions_registry import AUS_2025_26, get_assumptions, list_assumptions
from .errors import (
    ComputationError,
    EngineError,
    InvalidRequestError,
    SimulationCancelledError,
)
from .household import Household, Person
from .metrics import Metrics, calculate_metrics
from .projection import run_projection
from .request import RunOptions, RunRequest
from .result import RunResult
from .strategy import Strategy
from .timeline import YearRow
from .validation import ValidationReport, validate_run_request

__all__ = [
    "AUS_2025_26",
    "Assumptions",
    "ComputationError",
    "EngineError",
    "Household",
    "InvalidRequestError",
    "Metrics",
    "Person",
    "RunOptions",
    "RunRequest",
    "RunResult",
    "SimulationCancelledError",
    "Strategy",
    "ValidationReport",
    "YearRow",
    "calculate_metrics",
    "get_assumptions",
    "list_assumptions",
    "run_projection",
    "validate_run_request",
]
