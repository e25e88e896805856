"""Dashboard statistics endpoint."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from pymongo.errors import PyMongoError

from ..config import ConfigError
from ..services import compute_dashboard_stats
from .common import get_services, handle_config_error, json_error

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")

logger = logging.getLogger(__name__)


@dashboard_bp.get("/stats")
def stats():
    services = get_services()
    try:
        payload = compute_dashboard_stats(
            services["student_repository"], services["course_repository"]
        )
    except ConfigError as exc:
        return handle_config_error(exc)
    except PyMongoError:
        logger.exception("Error retrieving dashboard stats")
        return json_error("Error retrieving dashboard stats", 400)

    logger.info("Dashboard statistics retrieved successfully", extra=payload)
    return jsonify(payload)


__all__ = ["dashboard_bp"]
