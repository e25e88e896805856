"""Query construction in the MongoDB repositories."""

from __future__ import annotations

import unittest
from unittest import mock

import fakes  # noqa: F401  (puts the backend directory on sys.path)
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from registrar.errors import ValidationError
from registrar.repositories import MongoCourseRepository, MongoStudentRepository

COURSE_ID = "507f1f77bcf86cd799439011"


def _database(collection):
    database = mock.Mock()
    database.get_courses_collection.return_value = collection
    database.get_students_collection.return_value = collection
    return database


class MongoRepositoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.collection = mock.MagicMock()
        self.courses = MongoCourseRepository(_database(self.collection))
        self.students = MongoStudentRepository(_database(self.collection))

    def test_list_sort_orders(self) -> None:
        self.collection.find.return_value = []

        self.courses.list_all()
        self.assertEqual([("name", ASCENDING)], self.collection.find.call_args.kwargs["sort"])

        self.students.list_all()
        self.assertEqual(
            [("createdAt", DESCENDING)], self.collection.find.call_args.kwargs["sort"]
        )

    def test_get_converts_id(self) -> None:
        self.courses.get(COURSE_ID)

        self.collection.find_one.assert_called_once_with({"_id": ObjectId(COURSE_ID)})

    def test_malformed_id(self) -> None:
        with self.assertRaises(InvalidId):
            self.courses.get("CS101")

    def test_search_escapes_term_and_widens_to_courses(self) -> None:
        self.collection.find.return_value = []

        self.students.search("a.b", [COURSE_ID])

        query = self.collection.find.call_args.args[0]
        self.assertEqual(
            [
                {"name": {"$regex": r"a\.b", "$options": "i"}},
                {"course": {"$regex": r"a\.b", "$options": "i"}},
                {"email": {"$regex": r"a\.b", "$options": "i"}},
                {"course": {"$in": [COURSE_ID]}},
            ],
            query["$or"],
        )

    def test_count_and_exists(self) -> None:
        self.collection.count_documents.return_value = 2
        self.collection.find_one.return_value = None

        self.assertEqual(2, self.students.count({"course": COURSE_ID}))
        self.assertFalse(self.courses.exists("name", "CS101", exclude_id=COURSE_ID))
        self.collection.find_one.assert_called_once_with(
            {"name": "CS101", "_id": {"$ne": ObjectId(COURSE_ID)}}, projection={"_id": 1}
        )

    def test_duplicate_key_becomes_validation_error(self) -> None:
        self.collection.insert_one.side_effect = DuplicateKeyError(
            "E11000", 11000, {"keyValue": {"email": "a@x.com"}}
        )

        with self.assertRaises(ValidationError) as ctx:
            self.students.insert({"email": "a@x.com"})

        self.assertIn("email", ctx.exception.details)


if __name__ == "__main__":
    unittest.main()
