"""Student CRUD and search endpoints."""

from __future__ import annotations

import logging

from bson.errors import InvalidId
from flask import Blueprint, jsonify, request
from pymongo.errors import PyMongoError

from ..config import ConfigError
from ..errors import RegistrarError
from .common import error_response, get_services, handle_config_error, json_error

students_bp = Blueprint("students", __name__, url_prefix="/api/students")

logger = logging.getLogger(__name__)


@students_bp.get("")
def list_students():
    try:
        return jsonify(get_services()["students"].list_students())
    except ConfigError as exc:
        return handle_config_error(exc)
    except PyMongoError:
        logger.exception("Error getting students")
        return json_error("Error getting students", 500)


@students_bp.post("")
def create_student():
    data = request.get_json(silent=True)
    try:
        student = get_services()["students"].create_student(data)
        return jsonify(student), 201
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except PyMongoError:
        logger.exception("Error creating student")
        return json_error("Error creating student", 400)


@students_bp.get("/search")
def search_students():
    try:
        return jsonify(get_services()["students"].search_students(request.args.get("q")))
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except PyMongoError:
        logger.exception("Error searching students")
        return json_error("Error searching students", 400)


@students_bp.get("/<student_id>")
def get_student(student_id: str):
    try:
        return jsonify(get_services()["students"].get_student(student_id))
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except (InvalidId, PyMongoError):
        logger.exception("Error fetching student")
        return json_error("Error fetching student", 500)


@students_bp.put("/<student_id>")
def update_student(student_id: str):
    data = request.get_json(silent=True)
    try:
        return jsonify(get_services()["students"].update_student(student_id, data))
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except (InvalidId, PyMongoError):
        logger.exception("Error updating student")
        return json_error("Error updating student", 400)


@students_bp.delete("/<student_id>")
def delete_student(student_id: str):
    try:
        get_services()["students"].delete_student(student_id)
        return jsonify({"message": "Student deleted successfully"})
    except RegistrarError as exc:
        return error_response(exc)
    except ConfigError as exc:
        return handle_config_error(exc)
    except (InvalidId, PyMongoError):
        logger.exception("Error deleting student")
        return json_error("Error deleting student", 400)


__all__ = ["students_bp"]
