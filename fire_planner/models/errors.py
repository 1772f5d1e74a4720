"""
Error types raised by the planning engine.

Validation failures are detected before any projection runs and carry every
collected error and warning. Computation failures wrap whatever went wrong
during the year loop or the Monte Carlo trials together with a redacted
summary of the request.
"""

from typing import Any, Dict, List, Optional


class EngineError(Exception):
    """Base class for planning engine errors."""

    code = "ENGINE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses."""
        return {"error": self.message, "code": self.code, "details": self.details}


class InvalidRequestError(EngineError):
    """Raised when a run request fails validation."""

    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
    ):
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])
        super().__init__(message, {"errors": self.errors, "warnings": self.warnings})


class ComputationError(EngineError):
    """Raised when the projection or simulation fails part way through."""

    code = "COMPUTATION_ERROR"

    def __init__(
        self,
        message: str,
        original_error: str,
        request_summary: Optional[Dict[str, Any]] = None,
    ):
        self.original_error = original_error
        self.request_summary = request_summary or {}
        super().__init__(
            message,
            {
                "original_error": original_error,
                "request_summary": self.request_summary,
            },
        )


class SimulationCancelledError(EngineError):
    """Raised when a Monte Carlo run is cancelled between trials."""

    code = "SIMULATION_CANCELLED"
