"""API blueprints for Assembly Inventory."""

from flask import Blueprint

# Create main API blueprint
api_bp = Blueprint("api", __name__, url_prefix="/api")


# Import and register all resource blueprints
# Note: Imports are done after api_bp creation to avoid circular imports
from app.api.health import health_bp  # noqa: E402
from app.api.metrics import metrics_bp  # noqa: E402
from app.api.parts import parts_bp  # noqa: E402

api_bp.register_blueprint(health_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(metrics_bp)  # type: ignore[attr-defined]
api_bp.register_blueprint(parts_bp)  # type: ignore[attr-defined]
