"""Course and student operations, including the referential-integrity rules.

Services depend only on the repository interface (``list_all``, ``get``,
``insert``, ``update``, ``delete``, ``count``, ``exists`` plus the search
helpers), so they run against MongoDB in production and in-memory
repositories in tests.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from .db import serialize_course, serialize_student
from .errors import (
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)
from .validation import (
    ValidationResult,
    validate_course_payload,
    validate_student_payload,
)

logger = logging.getLogger(__name__)

UNKNOWN_COURSE = "Unknown Course"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def canonical_id(record_id: str) -> str:
    """Lowercase hex form of an ObjectId string; other values pass through."""

    if ObjectId.is_valid(record_id):
        return str(ObjectId(record_id))
    return record_id


def _raise_for_errors(result: ValidationResult) -> None:
    if result.ok:
        return
    details = {k: v for k, v in result.errors.items() if k != "_global"}
    raise ValidationError(result.errors.get("_global"), details)


class CourseService:
    def __init__(self, courses, students):
        self.courses = courses
        self.students = students

    def list_courses(self) -> List[Dict[str, Any]]:
        return [serialize_course(doc) for doc in self.courses.list_all()]

    def create_course(self, payload: Dict[str, Any] | None) -> Dict[str, Any]:
        result = validate_course_payload(payload, require_all=True)
        _raise_for_errors(result)
        self._ensure_unique_name(result.cleaned["name"])

        now = _utcnow()
        document = {"status": "active", **result.cleaned, "createdAt": now, "updatedAt": now}
        course_id = self.courses.insert(document)
        stored = self.courses.get(course_id) or {**document, "_id": course_id}

        logger.info(
            "New course created",
            extra={"courseId": course_id, "courseName": stored.get("name")},
        )
        return serialize_course(stored)

    def get_course(self, course_id: str) -> Dict[str, Any]:
        course = self.courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        return serialize_course(course)

    def update_course(self, course_id: str, payload: Dict[str, Any] | None) -> Dict[str, Any]:
        result = validate_course_payload(payload, require_all=False)
        _raise_for_errors(result)
        if "name" in result.cleaned:
            self._ensure_unique_name(result.cleaned["name"], exclude_id=course_id)

        updated = self.courses.update(course_id, {**result.cleaned, "updatedAt": _utcnow()})
        if updated is None:
            logger.warning("Course not found for update", extra={"courseId": course_id})
            raise NotFoundError("Course not found")

        logger.info(
            "Course updated successfully",
            extra={"courseId": course_id, "courseName": updated.get("name")},
        )
        return serialize_course(updated)

    def delete_course(self, course_id: str) -> None:
        """Delete a course unless any student still references it.

        The enrollment count and the delete are separate round-trips; a
        student created in between is left with a dangling reference.
        """
        enrolled = self.students.count({"course": canonical_id(course_id)})
        if enrolled > 0:
            logger.warning(
                "Cannot delete course with enrolled students",
                extra={"courseId": course_id, "enrolledStudents": enrolled},
            )
            raise ConflictError()

        deleted = self.courses.delete(course_id)
        if deleted is None:
            logger.warning("Course not found for deletion", extra={"courseId": course_id})
            raise NotFoundError("Course not found")

        logger.info(
            "Course deleted successfully",
            extra={"courseId": course_id, "courseName": deleted.get("name")},
        )

    def _ensure_unique_name(self, name: str, exclude_id: str | None = None) -> None:
        if self.courses.exists("name", name, exclude_id=exclude_id):
            raise ValidationError(
                "A course with this name already exists.",
                {"name": "Course name already in use."},
            )


class StudentService:
    def __init__(self, students, courses):
        self.students = students
        self.courses = courses

    def _find_course(self, course_ref: Any) -> Optional[Dict[str, Any]]:
        if not course_ref:
            return None
        try:
            return self.courses.get(str(course_ref))
        except InvalidId:
            return None

    def _with_course_name(self, student: Dict[str, Any], course=None) -> Dict[str, Any]:
        # One course lookup per student; a batched lookup by id would give the
        # same result with fewer round-trips.
        if course is None:
            course = self._find_course(student.get("course"))
        payload = serialize_student(student)
        payload["courseName"] = course.get("name") if course else UNKNOWN_COURSE
        return payload

    def list_students(self) -> List[Dict[str, Any]]:
        students = self.students.list_all()
        logger.info("Retrieved %s students", len(students))
        return [self._with_course_name(doc) for doc in students]

    def create_student(self, payload: Dict[str, Any] | None) -> Dict[str, Any]:
        result = validate_student_payload(payload, require_all=True)
        _raise_for_errors(result)

        course = self._find_course(result.cleaned["course"])
        if course is None:
            raise InvalidReferenceError()
        self._ensure_unique_email(result.cleaned["email"])

        now = _utcnow()
        document = {
            "enrollmentDate": now,
            "status": "active",
            **result.cleaned,
            "course": str(course["_id"]),
            "createdAt": now,
            "updatedAt": now,
        }
        student_id = self.students.insert(document)
        stored = self.students.get(student_id) or {**document, "_id": student_id}

        logger.info(
            "Student created successfully",
            extra={
                "studentId": student_id,
                "studentName": stored.get("name"),
                "course": stored.get("course"),
            },
        )
        return self._with_course_name(stored, course)

    def get_student(self, student_id: str) -> Dict[str, Any]:
        student = self.students.get(student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return self._with_course_name(student)

    def update_student(self, student_id: str, payload: Dict[str, Any] | None) -> Dict[str, Any]:
        result = validate_student_payload(payload, require_all=False)
        _raise_for_errors(result)

        if "course" in result.cleaned:
            course = self._find_course(result.cleaned["course"])
            if course is None:
                raise InvalidReferenceError()
            result.cleaned["course"] = str(course["_id"])
        if "email" in result.cleaned:
            self._ensure_unique_email(result.cleaned["email"], exclude_id=student_id)

        updated = self.students.update(student_id, {**result.cleaned, "updatedAt": _utcnow()})
        if updated is None:
            logger.warning("Student not found for update", extra={"studentId": student_id})
            raise NotFoundError("Student not found")

        logger.info(
            "Student updated successfully",
            extra={
                "studentId": student_id,
                "studentName": updated.get("name"),
                "course": updated.get("course"),
            },
        )
        return self._with_course_name(updated)

    def delete_student(self, student_id: str) -> None:
        deleted = self.students.delete(student_id)
        if deleted is None:
            logger.warning("Student not found for delete", extra={"studentId": student_id})
            raise NotFoundError("Student not found")

        logger.info(
            "Student deleted successfully",
            extra={
                "studentId": student_id,
                "studentName": deleted.get("name"),
                "course": deleted.get("course"),
            },
        )

    def search_students(self, term: str | None) -> List[Dict[str, Any]]:
        if not term:
            raise ValidationError("Search term is required")

        logger.info("Student search initiated", extra={"searchTerm": term})
        course_ids = self.courses.find_ids_by_name(term)
        students = self.students.search(term, course_ids)
        logger.info(
            "Student search results",
            extra={"searchTerm": term, "resultsCount": len(students)},
        )
        return [self._with_course_name(doc) for doc in students]

    def _ensure_unique_email(self, email: str, exclude_id: str | None = None) -> None:
        if self.students.exists("email", email, exclude_id=exclude_id):
            raise ValidationError(
                "A student with this email already exists.",
                {"email": "Email already in use."},
            )


def success_rate(graduates: int, total_students: int) -> int:
    """Percentage of students marked inactive, rounded half up; 0 when empty."""

    if total_students <= 0:
        return 0
    return int(graduates * 100 / total_students + 0.5)


def compute_dashboard_stats(students, courses) -> Dict[str, int]:
    total_students = students.count()
    active_students = students.count({"status": "active"})
    total_courses = courses.count()
    active_courses = courses.count({"status": "active"})
    graduates = students.count({"status": "inactive"})

    return {
        "totalStudents": total_students,
        "activeStudents": active_students,
        "totalCourses": total_courses,
        "activeCourses": active_courses,
        "graduates": graduates,
        "successRate": success_rate(graduates, total_students),
    }


__all__ = [
    "UNKNOWN_COURSE",
    "CourseService",
    "StudentService",
    "compute_dashboard_stats",
    "success_rate",
]
