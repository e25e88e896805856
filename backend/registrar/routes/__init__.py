"""Application route blueprints and helpers."""

from .courses import courses_bp
from .dashboard import dashboard_bp
from .health import health_bp
from .students import students_bp

__all__ = ["courses_bp", "dashboard_bp", "health_bp", "students_bp"]
