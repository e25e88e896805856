"""Repository classes encapsulating MongoDB operations.

Each repository is small and focused on a single collection. Methods take
and return plain documents (dicts); identities are passed in as strings and
converted to ``ObjectId`` here, so a malformed id raises
``bson.errors.InvalidId`` from any lookup, update or delete.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from .db import Database
from .errors import ValidationError


def _contains(term: str) -> Dict[str, str]:
    return {"$regex": re.escape(term), "$options": "i"}


def _duplicate_key_error(exc: DuplicateKeyError) -> ValidationError:
    key_value = (exc.details or {}).get("keyValue") or {}
    field = next(iter(key_value), "_id")
    return ValidationError(
        f"A record with this {field} already exists.",
        {field: f"{field.capitalize()} already in use."},
    )


class _MongoRepository:
    collection_getter = ""
    default_sort: List[tuple] = []

    def __init__(self, database: Database):
        self.database = database

    @property
    def collection(self):
        return getattr(self.database, self.collection_getter)()

    def list_all(self) -> List[Dict[str, Any]]:
        return list(self.collection.find({}, sort=self.default_sort))

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"_id": ObjectId(record_id)})

    def insert(self, document: Dict[str, Any]) -> str:
        """Insert a new document and return its generated id."""
        try:
            result = self.collection.insert_one(dict(document))
        except DuplicateKeyError as exc:
            raise _duplicate_key_error(exc) from exc
        return str(result.inserted_id)

    def update(self, record_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply a partial ``$set`` and return the updated document, if any."""
        try:
            return self.collection.find_one_and_update(
                {"_id": ObjectId(record_id)},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise _duplicate_key_error(exc) from exc

    def delete(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one_and_delete({"_id": ObjectId(record_id)})

    def count(self, filters: Dict[str, Any] | None = None) -> int:
        return self.collection.count_documents(filters or {})

    def exists(self, field: str, value: Any, exclude_id: str | None = None) -> bool:
        filters: Dict[str, Any] = {field: value}
        if exclude_id is not None:
            filters["_id"] = {"$ne": ObjectId(exclude_id)}
        return self.collection.find_one(filters, projection={"_id": 1}) is not None


class MongoCourseRepository(_MongoRepository):
    """CRUD operations for course documents."""

    collection_getter = "get_courses_collection"
    default_sort = [("name", ASCENDING)]

    def find_ids_by_name(self, term: str) -> List[str]:
        """Return ids of courses whose name contains ``term``, ignoring case."""
        cursor = self.collection.find({"name": _contains(term)}, projection={"_id": 1})
        return [str(doc["_id"]) for doc in cursor]


class MongoStudentRepository(_MongoRepository):
    """CRUD and search operations for student documents."""

    collection_getter = "get_students_collection"
    default_sort = [("createdAt", DESCENDING)]

    def search(self, term: str, course_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
        """Students whose name, email or course reference contains ``term``.

        ``course_ids`` widens the match to students referencing any of those
        courses.
        """
        clauses: List[Dict[str, Any]] = [
            {"name": _contains(term)},
            {"course": _contains(term)},
            {"email": _contains(term)},
        ]
        course_ids = list(course_ids)
        if course_ids:
            clauses.append({"course": {"$in": course_ids}})
        return list(self.collection.find({"$or": clauses}, sort=self.default_sort))


__all__ = ["MongoCourseRepository", "MongoStudentRepository"]
