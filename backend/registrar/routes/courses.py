"""Course CRUD endpoints."""

from __future__ import annotations

import logging

from bson.errors import InvalidId
from flask import Blueprint, jsonify, request
from pymongo.errors import PyMongoError

from ..config import ConfigError
from ..errors import RegistrarError
from .common import error_response, get_services, handle_config_error, json_error

courses_bp = Blueprint("courses", __name__, url_prefix="/api/courses")

logger = logging.getLogger(__name__)


@courses_bp.get("")
def list_courses():
    try:
        return jsonify(get_services()["courses"].list_courses())
    except ConfigError as exc:
        return handle_config_error(exc)
    except PyMongoError:
        logger.exception("Error while retrieving courses")
        return json_error("Error while retrieving courses", 500)


@courses_bp.post("")
def create_course():
    data = request.get_json(silent=True)
    try:
        course = get_services()["courses"].create_course(data)
        return jsonify(course), 201
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except PyMongoError:
        logger.exception("Error creating course")
        return json_error("Error creating course", 400)


@courses_bp.get("/<course_id>")
def get_course(course_id: str):
    try:
        return jsonify(get_services()["courses"].get_course(course_id))
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except (InvalidId, PyMongoError):
        logger.exception("Error getting course")
        return json_error("Error getting course", 400)


@courses_bp.put("/<course_id>")
def update_course(course_id: str):
    data = request.get_json(silent=True)
    try:
        return jsonify(get_services()["courses"].update_course(course_id, data))
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except (InvalidId, PyMongoError):
        logger.exception("Error updating course")
        return json_error("Error updating course", 400)


@courses_bp.delete("/<course_id>")
def delete_course(course_id: str):
    try:
        get_services()["courses"].delete_course(course_id)
        return jsonify({"message": "Course deleted successfully"})
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except (InvalidId, PyMongoError):
        logger.exception("Error deleting course")
        return json_error("Error deleting course", 400)


__all__ = ["courses_bp"]
