"""Domain errors raised by the course and student services."""

from __future__ import annotations

from typing import Dict


class RegistrarError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status = 400
    message = "Request failed."

    def __init__(self, message: str | None = None, details: Dict[str, str] | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.details = details or {}


class ValidationError(RegistrarError):
    """A required field is missing, malformed, duplicated or out of range."""

    message = "Validation failed."


class InvalidReferenceError(RegistrarError):
    """A student's course reference does not resolve to a stored course."""

    message = "Invalid course ID"


class NotFoundError(RegistrarError):
    status = 404
    message = "Not found"


class ConflictError(RegistrarError):
    """The course still has enrolled students and cannot be deleted.

    Shares status 400 with validation failures; clients tell them apart by
    message.
    """

    message = "Cannot delete course with enrolled students"


__all__ = [
    "RegistrarError",
    "ValidationError",
    "InvalidReferenceError",
    "NotFoundError",
    "ConflictError",
]
