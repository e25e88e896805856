"""In-memory repositories and app builders used by the test suite."""

from __future__ import annotations

import copy
import itertools
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import PyMongoError

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app import create_app  # noqa: E402
from registrar.errors import ValidationError  # noqa: E402
from registrar.observability import LogManager  # noqa: E402


class InMemoryRepository:
    """Dict-backed stand-in for the MongoDB repositories."""

    unique_fields: tuple = ()

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self._sequence = itertools.count()
        self._order: Dict[str, int] = {}

    def _check_id(self, record_id: str) -> str:
        if not ObjectId.is_valid(record_id):
            raise InvalidId(f"{record_id!r} is not a valid ObjectId")
        return str(ObjectId(record_id))

    def _sorted(self, documents: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return list(documents)

    def list_all(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self._sorted(self.documents.values())]

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        doc = self.documents.get(self._check_id(record_id))
        return copy.deepcopy(doc) if doc is not None else None

    def insert(self, document: Dict[str, Any]) -> str:
        for field in self.unique_fields:
            if self.exists(field, document.get(field)):
                raise ValidationError(f"A record with this {field} already exists.")
        record_id = str(ObjectId())
        self.documents[record_id] = {**copy.deepcopy(document), "_id": record_id}
        self._order[record_id] = next(self._sequence)
        return record_id

    def update(self, record_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        record_id = self._check_id(record_id)
        if record_id not in self.documents:
            return None
        self.documents[record_id].update(copy.deepcopy(fields))
        return copy.deepcopy(self.documents[record_id])

    def delete(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.documents.pop(self._check_id(record_id), None)

    def count(self, filters: Dict[str, Any] | None = None) -> int:
        filters = filters or {}
        return sum(
            1
            for doc in self.documents.values()
            if all(doc.get(key) == value for key, value in filters.items())
        )

    def exists(self, field: str, value: Any, exclude_id: str | None = None) -> bool:
        if exclude_id is not None:
            exclude_id = self._check_id(exclude_id)
        return any(
            doc.get(field) == value and doc_id != exclude_id
            for doc_id, doc in self.documents.items()
        )


class InMemoryCourseRepository(InMemoryRepository):
    unique_fields = ("name",)

    def _sorted(self, documents):
        return sorted(documents, key=lambda doc: doc.get("name") or "")

    def find_ids_by_name(self, term: str) -> List[str]:
        needle = term.lower()
        return [
            doc_id
            for doc_id, doc in self.documents.items()
            if needle in (doc.get("name") or "").lower()
        ]


class InMemoryStudentRepository(InMemoryRepository):
    unique_fields = ("email",)

    def _sorted(self, documents):
        return sorted(
            documents,
            key=lambda doc: (doc.get("createdAt"), self._order[doc["_id"]]),
            reverse=True,
        )

    def search(self, term: str, course_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
        needle = term.lower()
        course_ids = set(course_ids)
        matches = [
            doc
            for doc in self.documents.values()
            if any(needle in str(doc.get(key) or "").lower() for key in ("name", "course", "email"))
            or doc.get("course") in course_ids
        ]
        return [copy.deepcopy(doc) for doc in self._sorted(matches)]


class FailingRepository:
    """Every call raises a store error, as if MongoDB were unreachable."""

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise PyMongoError("connection refused")

        return fail


def connected_status():
    return {"status": "connected", "name": "MongoDB", "host": "localhost:27017"}


def make_app(courses=None, students=None, database_status=connected_status):
    app = create_app(
        course_repository=courses if courses is not None else InMemoryCourseRepository(),
        student_repository=students if students is not None else InMemoryStudentRepository(),
        database_status=database_status,
        log_manager=LogManager(console=False),
        environment="test",
    )
    app.config["TESTING"] = True
    return app
