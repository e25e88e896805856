"""Payload validation for course and student writes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

STATUSES = ("active", "inactive")


@dataclass
class ValidationResult:
    cleaned: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _clean_string(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _parse_number(value: Any) -> int | float:
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    if isinstance(value, (int, float)):
        number = value
    else:
        text = _clean_string(value)
        try:
            number = int(text)
        except ValueError:
            number = float(text)
    if not math.isfinite(number):
        raise ValueError("number must be finite")
    return number


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 date or datetime, normalised to UTC."""

    if isinstance(value, datetime):
        parsed = value
    else:
        text = _clean_string(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _check_status(payload: Dict[str, Any], result: ValidationResult) -> None:
    if "status" not in payload:
        return
    status = _clean_string(payload.get("status")).lower()
    if status not in STATUSES:
        result.errors["status"] = "Status must be one of: active, inactive."
    else:
        result.cleaned["status"] = status


def validate_course_payload(
    payload: Dict[str, Any] | None, *, require_all: bool
) -> ValidationResult:
    if not isinstance(payload, dict):
        return ValidationResult(errors={"_global": "Request body must be JSON."})

    result = ValidationResult()

    def require_field(name: str, message: str) -> bool:
        if name not in payload or _clean_string(payload.get(name)) == "":
            result.errors[name] = message
            return False
        return True

    if require_all or "name" in payload:
        if require_field("name", "Course name is required."):
            result.cleaned["name"] = _clean_string(payload.get("name"))

    if require_all or "description" in payload:
        if require_field("description", "Description is required."):
            result.cleaned["description"] = _clean_string(payload.get("description"))

    if require_all or "duration" in payload:
        if require_field("duration", "Duration is required."):
            try:
                result.cleaned["duration"] = _parse_number(payload.get("duration"))
            except (TypeError, ValueError, OverflowError):
                result.errors["duration"] = "Duration must be a number."

    _check_status(payload, result)
    return result


def validate_student_payload(
    payload: Dict[str, Any] | None, *, require_all: bool
) -> ValidationResult:
    if not isinstance(payload, dict):
        return ValidationResult(errors={"_global": "Request body must be JSON."})

    result = ValidationResult()

    def require_field(name: str, message: str) -> bool:
        if name not in payload or _clean_string(payload.get(name)) == "":
            result.errors[name] = message
            return False
        return True

    if require_all or "name" in payload:
        if require_field("name", "Name is required."):
            result.cleaned["name"] = _clean_string(payload.get("name"))

    if require_all or "email" in payload:
        if require_field("email", "Email is required."):
            email = _clean_string(payload.get("email"))
            if "@" not in email or "." not in email.split("@")[-1]:
                result.errors["email"] = "Enter a valid email address."
            else:
                result.cleaned["email"] = email

    if require_all or "course" in payload:
        if require_field("course", "Course is required."):
            result.cleaned["course"] = _clean_string(payload.get("course"))

    if payload.get("enrollmentDate") not in (None, ""):
        try:
            result.cleaned["enrollmentDate"] = parse_datetime(payload["enrollmentDate"])
        except (TypeError, ValueError):
            result.errors["enrollmentDate"] = "Enrollment date must be an ISO-8601 date."

    _check_status(payload, result)
    return result


__all__ = [
    "STATUSES",
    "ValidationResult",
    "parse_datetime",
    "validate_course_payload",
    "validate_student_payload",
]
