"""FIRE Planner Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from fire_planner.config import Settings, get_global_settings


def configure_logging(settings: Settings) -> None:
    """Apply the configured log level to the package loggers."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("fire_planner").setLevel(settings.log_level)


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        settings: Settings to use instead of the global environment settings

    Returns:
        Flask: Configured Flask application instance
    """
    from fire_planner.services.planning_service import PlanningService
    from fire_planner.storage import ScenarioStore, create_storage_service

    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = settings or get_global_settings()
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["DEBUG"] = settings.app_env == "development"
    app.config["TESTING"] = settings.app_env == "testing"

    configure_logging(settings)
    app.logger.setLevel(settings.log_level)

    app.extensions["settings"] = settings
    app.extensions["planning_service"] = PlanningService(settings)
    app.extensions["scenario_store"] = ScenarioStore(create_storage_service(settings))

    # Register blueprints
    from fire_planner.blueprints.assumptions import assumptions_bp
    from fire_planner.blueprints.health import health_bp
    from fire_planner.blueprints.projections import projections_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(assumptions_bp)
    app.register_blueprint(projections_bp)

    return app
