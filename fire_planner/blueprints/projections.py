"""
Projection blueprint for running planning requests and saved scenarios.

Requests are validated against the real calendar year here; the engine itself
only ever uses the request's own simulation clock.
"""

from datetime import date
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from fire_planner.models.assumptions import Assumptions
from fire_planner.models.assumptions_registry import get_assumptions
from fire_planner.models.errors import ComputationError, InvalidRequestError
from fire_planner.models.request import RunRequest
from fire_planner.storage import StorageError, StorageNotFoundError

projections_bp = Blueprint("projections", __name__, url_prefix="/api")


def _validation_messages(error: ValidationError) -> list:
    return [
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" for e in error.errors()
    ]


def _resolve_assumptions(data: Dict[str, Any]) -> Optional[Assumptions]:
    """Expand a missing or string ``assumptions`` field into a full bundle."""
    value = data.get("assumptions")
    if isinstance(value, dict):
        return None
    if value is None:
        value = current_app.extensions["settings"].default_assumptions_id
    if not isinstance(value, str):
        raise ValueError("assumptions must be an object or an assumptions id")

    bundle = get_assumptions(value)
    if bundle is None:
        bundle = current_app.extensions["scenario_store"].get_assumptions(value)
    if bundle is None:
        raise ValueError(f"Unknown assumptions id: {value}")
    return bundle


def _parse_run_request(data: Any) -> RunRequest:
    """Build a RunRequest from a JSON body.

    Raises:
        ValueError: If the body is not a valid request
    """
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    data = dict(data)
    bundle = _resolve_assumptions(data)
    if bundle is not None:
        data["assumptions"] = bundle.model_dump()
    return RunRequest.model_validate(data)


def _run(run_request: RunRequest) -> Tuple[Any, int]:
    """Run a request and map engine errors onto HTTP responses."""
    service = current_app.extensions["planning_service"]
    try:
        result = service.run_plan(run_request, reference_year=date.today().year)
    except InvalidRequestError as e:
        return jsonify(e.to_dict() | {"errors": e.errors, "warnings": e.warnings}), 400
    except ComputationError as e:
        current_app.logger.error(f"Projection failed: {e.original_error}")
        return (
            jsonify(
                {
                    "error": e.message,
                    "code": e.code,
                    "message": e.original_error,
                    "request_summary": e.request_summary,
                }
            ),
            500,
        )
    return jsonify(result.to_dict()), 200


@projections_bp.route("/projections", methods=["POST"])
def create_projection() -> Any:
    """Run a planning request.

    Returns:
        JSON RunResult, or validation errors with status 400
    """
    try:
        run_request = _parse_run_request(request.get_json(silent=True))
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "errors": _validation_messages(e)}), 400
    except ValueError as e:
        return jsonify({"error": "Invalid request", "errors": [str(e)]}), 400
    except StorageError as e:
        current_app.logger.error(f"Error resolving assumptions: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    return _run(run_request)


@projections_bp.route("/scenarios", methods=["POST"])
def create_scenario() -> Any:
    """Save a named planning request.

    Expects ``{"name": ..., "description": ..., "request": {...}}``.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data.get("name"):
        return jsonify({"error": "Scenario name and request are required"}), 400

    try:
        run_request = _parse_run_request(data.get("request"))
    except ValidationError as e:
        return jsonify({"error": "Invalid request", "errors": _validation_messages(e)}), 400
    except ValueError as e:
        return jsonify({"error": "Invalid request", "errors": [str(e)]}), 400

    try:
        record = current_app.extensions["scenario_store"].save_scenario(
            data["name"], run_request, data.get("description")
        )
    except StorageError as e:
        current_app.logger.error(f"Error saving scenario: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    return (
        jsonify(
            {
                "id": record.id,
                "name": record.name,
                "created_at": record.created_at.isoformat(),
            }
        ),
        201,
    )


@projections_bp.route("/scenarios", methods=["GET"])
def list_scenarios() -> Any:
    try:
        summaries = current_app.extensions["scenario_store"].list_scenarios()
    except StorageError as e:
        current_app.logger.error(f"Error listing scenarios: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"scenarios": [s.model_dump(mode="json") for s in summaries]}), 200


@projections_bp.route("/scenarios/<scenario_id>", methods=["GET"])
def get_scenario(scenario_id: str) -> Any:
    try:
        record = current_app.extensions["scenario_store"].get_scenario(scenario_id)
    except StorageNotFoundError:
        return jsonify({"error": "Scenario not found"}), 404
    except StorageError as e:
        current_app.logger.error(f"Error loading scenario {scenario_id}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(record.model_dump(mode="json")), 200


@projections_bp.route("/scenarios/<scenario_id>/projections", methods=["POST"])
def run_scenario(scenario_id: str) -> Any:
    """Run a saved scenario's request."""
    try:
        record = current_app.extensions["scenario_store"].get_scenario(scenario_id)
    except StorageNotFoundError:
        return jsonify({"error": "Scenario not found"}), 404
    except StorageError as e:
        current_app.logger.error(f"Error loading scenario {scenario_id}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    return _run(record.request)
