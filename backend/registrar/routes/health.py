"""Liveness and detailed health probes."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify

from .. import health
from .common import get_services

health_bp = Blueprint("health", __name__, url_prefix="/health")

logger = logging.getLogger(__name__)


@health_bp.get("")
def liveness():
    return jsonify(health.liveness(get_services()["environment"])), 200


@health_bp.get("/detailed")
def detailed():
    services = get_services()
    try:
        report = health.detailed(services["environment"], services["database_status"])
    except Exception as exc:
        logger.exception("Detailed health check failed")
        return jsonify(health.down(exc)), 500
    return jsonify(report), 200


__all__ = ["health_bp"]
