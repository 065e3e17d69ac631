"""
Health check blueprint.

Reports application liveness and database connectivity for load balancers and
container orchestration probes.
"""

from datetime import datetime, timezone

from flask import Blueprint, jsonify

from ..services import get_service
from ..utils.database import ConnectionProvider
from ..utils.logging import LogCategory, get_logger

logger = get_logger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("", methods=["GET"])
def health():
    """Return 200 when the database answers, 503 otherwise."""
    database_ok = get_service(ConnectionProvider).health_check()
    status = "healthy" if database_ok else "unhealthy"
    if not database_ok:
        logger.warning("Health check failed", category=LogCategory.INFRASTRUCTURE)

    return jsonify({
        "status": status,
        "database": "connected" if database_ok else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200 if database_ok else 503
