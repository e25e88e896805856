"""Seed helper that loads sample courses and students into MongoDB."""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv
from pymongo import MongoClient
from pymongo.errors import PyMongoError

ROOT_DIR = Path(__file__).resolve().parent.parent
BACKEND_DIR = ROOT_DIR / "backend"
ENV_PATH = BACKEND_DIR / ".env"
SEED_PATH = Path(__file__).resolve().parent / "seed.json"

if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from registrar.config import ConfigError, get_db_name, get_mongo_uri  # noqa: E402
from registrar.validation import parse_datetime  # noqa: E402


def load_env() -> None:
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH)


def read_seed_file() -> Dict[str, List[Dict[str, Any]]]:
    with SEED_PATH.open("r", encoding="utf-8") as seed_file:
        data = json.load(seed_file)
    if not isinstance(data, dict):
        raise ValueError("Seed file must contain an object of collections")
    for collection_name in ("courses", "students"):
        if not isinstance(data.get(collection_name, []), list):
            raise ValueError(
                f"Seed data for collection '{collection_name}' must be a list"
            )
    return data


def build_student_documents(
    students: List[Dict[str, Any]], course_ids: Dict[str, str], now: datetime
) -> List[Dict[str, Any]]:
    """Resolve each student's course name to the seeded course id."""

    documents = []
    for student in students:
        course_name = student.get("course")
        if course_name not in course_ids:
            raise ValueError(f"Student {student.get('email')!r} references unknown course {course_name!r}")
        document = {
            "status": "active",
            **student,
            "course": course_ids[course_name],
            "createdAt": now,
            "updatedAt": now,
        }
        document["enrollmentDate"] = (
            parse_datetime(student["enrollmentDate"]) if student.get("enrollmentDate") else now
        )
        documents.append(document)
    return documents


def main() -> None:
    load_env()
    try:
        uri = get_mongo_uri()
        db_name = get_db_name()
    except ConfigError as exc:  # pragma: no cover - simple CLI utility
        print(f"Configuration error: {exc}")
        raise SystemExit(1)

    client = MongoClient(uri, serverSelectionTimeoutMS=5000)
    database = client[db_name]

    try:
        seed_data = read_seed_file()
        now = datetime.now(timezone.utc)

        database["students"].delete_many({})
        database["courses"].delete_many({})

        courses = [
            {"status": "active", **course, "createdAt": now, "updatedAt": now}
            for course in seed_data.get("courses", [])
        ]
        course_ids: Dict[str, str] = {}
        if courses:
            result = database["courses"].insert_many(courses)
            course_ids = {
                course["name"]: str(inserted_id)
                for course, inserted_id in zip(courses, result.inserted_ids)
            }
        print(f"Loaded {len(courses)} document(s) into 'courses' collection")

        students = build_student_documents(seed_data.get("students", []), course_ids, now)
        if students:
            database["students"].insert_many(students)
        print(f"Loaded {len(students)} document(s) into 'students' collection")

        print(f"Seeding complete for database '{db_name}'.")
    except PyMongoError as exc:  # pragma: no cover - requires Mongo connection
        print(f"MongoDB error: {exc}")
        raise SystemExit(1)
    finally:
        client.close()


if __name__ == "__main__":
    main()
