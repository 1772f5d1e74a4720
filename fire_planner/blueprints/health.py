"""Health and readiness check blueprint."""

from typing import Any

from flask import Blueprint, current_app, jsonify

from fire_planner.models.assumptions_registry import get_assumptions

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Any:
    """Liveness check.

    Returns:
        JSON response with status information
    """
    return jsonify({"status": "ok"})


@health_bp.route("/readyz")
def readiness_check() -> Any:
    """Readiness check: the default assumptions bundle must be registered."""
    assumptions_id = current_app.extensions["settings"].default_assumptions_id
    if get_assumptions(assumptions_id) is None:
        current_app.logger.error(f"Default assumptions {assumptions_id} not registered")
        return jsonify({"status": "unavailable", "assumptions": assumptions_id}), 503
    return jsonify({"status": "ready", "assumptions": assumptions_id})
