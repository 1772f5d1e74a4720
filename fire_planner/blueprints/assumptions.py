"""Assumptions blueprint: registered bundles and stored custom bundles."""

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from fire_planner.models.assumptions import Assumptions
from fire_planner.models.assumptions_registry import (
    get_assumptions_metadata,
    list_assumptions,
    validate_assumptions,
)
from fire_planner.storage import StorageError

assumptions_bp = Blueprint("assumptions", __name__, url_prefix="/api")


@assumptions_bp.route("/assumptions", methods=["GET"])
def list_bundles() -> Any:
    return jsonify({"assumptions": [entry.summary() for entry in list_assumptions()]}), 200


@assumptions_bp.route("/assumptions/<assumptions_id>", methods=["GET"])
def get_bundle(assumptions_id: str) -> Any:
    """A registered bundle with its metadata, or a stored custom bundle."""
    entry = get_assumptions_metadata(assumptions_id)
    if entry is not None:
        return jsonify(entry.model_dump(mode="json")), 200

    try:
        custom = current_app.extensions["scenario_store"].get_assumptions(assumptions_id)
    except StorageError as e:
        current_app.logger.error(f"Error loading assumptions {assumptions_id}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    if custom is None:
        return jsonify({"error": "Assumptions not found"}), 404
    return jsonify({"id": assumptions_id, "data": custom.model_dump(mode="json")}), 200


@assumptions_bp.route("/assumptions", methods=["POST"])
def create_bundle() -> Any:
    """Store a custom assumptions bundle after consistency checks."""
    try:
        bundle = Assumptions.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return jsonify({"error": "Invalid assumptions", "errors": [str(e)]}), 400

    errors = validate_assumptions(bundle)
    if errors:
        return jsonify({"error": "Invalid assumptions", "errors": errors}), 400

    try:
        stored_id = current_app.extensions["scenario_store"].save_assumptions(bundle)
    except StorageError as e:
        current_app.logger.error(f"Error saving assumptions: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify({"id": stored_id}), 201
