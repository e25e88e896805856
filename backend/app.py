from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from registrar import config
from registrar.db import Database
from registrar.observability import LogManager, init_request_logging, request_context
from registrar.repositories import MongoCourseRepository, MongoStudentRepository
from registrar.routes import courses_bp, dashboard_bp, health_bp, students_bp
from registrar.routes.common import EXTENSION_KEY
from registrar.services import CourseService, StudentService

logger = logging.getLogger(__name__)


def create_app(
    *,
    database: Database | None = None,
    course_repository=None,
    student_repository=None,
    database_status: Callable[[], Dict[str, Any]] | None = None,
    log_manager: LogManager | None = None,
    environment: str | None = None,
) -> Flask:
    """Build the Flask application.

    Repositories default to MongoDB-backed ones sharing ``database``; tests
    pass in-memory repositories and a stub ``database_status`` instead.
    """

    if log_manager is None:
        log_manager = LogManager(level=config.get_log_level(), log_dir=config.get_log_dir())
    log_manager.start()

    if course_repository is None or student_repository is None:
        database = database or Database()
        course_repository = course_repository or MongoCourseRepository(database)
        student_repository = student_repository or MongoStudentRepository(database)
    if database_status is None:
        if database is None:
            raise ValueError("database_status is required when no database is given.")
        database_status = database.connection_status

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = {
        "courses": CourseService(course_repository, student_repository),
        "students": StudentService(student_repository, course_repository),
        "course_repository": course_repository,
        "student_repository": student_repository,
        "database": database,
        "database_status": database_status,
        "environment": environment or config.get_environment(),
        "log_manager": log_manager,
    }

    CORS(app)
    init_request_logging(app)
    app.register_blueprint(courses_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        fields = request_context()
        fields["error"] = str(exc)
        logger.error("Unhandled error while processing request", exc_info=exc, extra=fields)
        return jsonify({"message": "Internal Server Error"}), 500

    return app


def shutdown(app: Flask) -> None:
    """Close the MongoDB client and flush log handlers."""

    services = app.extensions[EXTENSION_KEY]
    if services.get("database") is not None:
        services["database"].close()
    services["log_manager"].close()


def main() -> None:
    app = create_app()
    port = config.get_port()
    logger.info("Server is running on port %s", port)
    try:
        app.run(host="0.0.0.0", port=port)
    finally:
        shutdown(app)


if __name__ == "__main__":
    main()
