"""Helpers shared by the route blueprints."""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import current_app, jsonify

from ..config import ConfigError
from ..errors import RegistrarError

logger = logging.getLogger(__name__)

EXTENSION_KEY = "registrar"


def json_error(message: str, status: int, details: Dict[str, Any] | None = None):
    payload: Dict[str, Any] = {"message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def error_response(exc: RegistrarError):
    return json_error(exc.message, exc.status, exc.details)


def handle_config_error(exc: ConfigError):
    logger.exception("Missing configuration for MongoDB")
    return json_error(str(exc), 500)


def get_services() -> Dict[str, Any]:
    """Return the services registered on the current app by ``create_app``."""

    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    "EXTENSION_KEY",
    "error_response",
    "get_services",
    "handle_config_error",
    "json_error",
]
