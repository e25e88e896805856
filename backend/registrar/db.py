"""MongoDB helpers for the application."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from pymongo import ASCENDING, DESCENDING, IndexModel, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .config import get_db_name, get_mongo_uri


class Database:
    """Owns the MongoDB client and hands out indexed collections."""

    def __init__(self, uri: str | None = None, db_name: str | None = None):
        self._uri = uri
        self._db_name = db_name
        self._client: MongoClient | None = None
        self._db = None
        self._courses_indexes_created = False
        self._students_indexes_created = False

    def _get_client(self) -> MongoClient:
        """Create (or reuse) a MongoDB client using the configured URI."""

        if self._client is None:
            self._client = MongoClient(
                self._uri or get_mongo_uri(),
                serverSelectionTimeoutMS=5000,
                tz_aware=True,
            )
        return self._client

    def get_db(self):
        """Return the application's MongoDB database instance."""

        if self._db is None:
            self._db = self._get_client()[self._db_name or get_db_name()]
        return self._db

    def get_courses_collection(self) -> Collection:
        """Return the courses collection and ensure supporting indexes."""

        collection = self.get_db()["courses"]
        if not self._courses_indexes_created:
            collection.create_indexes(
                [
                    IndexModel(
                        [("name", ASCENDING)],
                        name="unique_name",
                        unique=True,
                    ),
                    IndexModel(
                        [("status", ASCENDING)],
                        name="status_idx",
                        background=True,
                    ),
                ]
            )
            self._courses_indexes_created = True
        return collection

    def get_students_collection(self) -> Collection:
        """Return the collection that stores student documents."""

        collection = self.get_db()["students"]
        if not self._students_indexes_created:
            collection.create_index("email", unique=True, name="unique_email")
            collection.create_indexes(
                [
                    IndexModel(
                        [("course", ASCENDING)],
                        name="course_idx",
                        background=True,
                    ),
                    IndexModel(
                        [("createdAt", DESCENDING)],
                        name="created_desc",
                        background=True,
                    ),
                ]
            )
            self._students_indexes_created = True
        return collection

    def connection_status(self) -> Dict[str, Any]:
        """Ping the server and report whether it is reachable."""

        client = self._get_client()
        host = None
        try:
            client.admin.command("ping")
            status = "connected"
            address = client.address
            if address:
                host = f"{address[0]}:{address[1]}"
        except PyMongoError:
            status = "disconnected"
        return {"status": status, "name": "MongoDB", "host": host}

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None


def _isoformat(value: Any) -> Any:
    if not isinstance(value, datetime):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_course(document):
    """Serialize a raw Mongo course document to JSON-friendly dict."""

    return {
        "_id": str(document.get("_id", "")),
        "name": document.get("name"),
        "description": document.get("description"),
        "duration": document.get("duration"),
        "status": document.get("status"),
        "createdAt": _isoformat(document.get("createdAt")),
        "updatedAt": _isoformat(document.get("updatedAt")),
    }


def serialize_student(document):
    """Convert a MongoDB student document into a JSON-serialisable dict."""

    return {
        "_id": str(document.get("_id", "")),
        "name": document.get("name"),
        "email": document.get("email"),
        "course": document.get("course"),
        "enrollmentDate": _isoformat(document.get("enrollmentDate")),
        "status": document.get("status"),
        "createdAt": _isoformat(document.get("createdAt")),
        "updatedAt": _isoformat(document.get("updatedAt")),
    }


__all__ = ["Database", "serialize_course", "serialize_student"]
