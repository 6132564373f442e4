"""
Health check endpoints for the rental API.

Provides liveness and readiness probes; both are exempt from rate limiting.
"""

import logging
from datetime import datetime, timezone
from flask import Blueprint, jsonify

from core.db import get_db

logger = logging.getLogger(__name__)

# Create blueprint
health_bp = Blueprint('health', __name__)

SERVICE_NAME = "rental-api"


# =============================================================================
# Liveness Probe
# =============================================================================

@health_bp.route('/healthz')
def liveness():
    """
    Liveness probe - is the process running?
    """
    return jsonify({
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    })


# =============================================================================
# Readiness Probe
# =============================================================================

@health_bp.route('/readyz')
def readiness():
    """
    Readiness probe - can the service reach its database?
    """
    db_ok = get_db().ping()
    checks = {"database": {"status": "ok" if db_ok else "error"}}

    if not db_ok:
        logger.warning("Readiness check failed: database unreachable")
        return jsonify({"status": "not_ready", "checks": checks}), 503

    return jsonify({"status": "ready", "checks": checks})
