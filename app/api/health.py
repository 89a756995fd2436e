"""Health check endpoints for Kubernetes probes."""

import logging

from flask import Blueprint, jsonify
from spectree import Response as SpectreeResponse

from app.database import check_db_connection
from app.schemas.common import HealthResponse
from app.utils.spectree_config import api

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("/readyz", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=HealthResponse, HTTP_503=HealthResponse))
def readyz():
    """Readiness probe endpoint for Kubernetes.

    Returns 503 when the database cannot be reached so the pod is removed
    from service endpoints until it recovers.
    """
    if not check_db_connection():
        logger.warning("Readiness check failed: database unavailable")
        return jsonify({"status": "database unavailable", "ready": False}), 503

    return jsonify({"status": "ready", "ready": True}), 200


@health_bp.route("/healthz", methods=["GET"])
@api.validate(resp=SpectreeResponse(HTTP_200=HealthResponse))
def healthz():
    """Liveness probe endpoint for Kubernetes.

    Always returns 200 to indicate the application is alive.
    """
    return jsonify({"status": "alive", "ready": True}), 200
