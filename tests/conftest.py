from itertools import count
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from database import RecordStore
from profiles import build_profiles
from schemas import GradeEntry, Student
from seed import demo_students
from service import ClassificationService


class FakeCollection:
    """The slice of pymongo's Collection API that RecordStore uses."""

    _ids = count(1)

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []
        self.indexes = []

    @staticmethod
    def _matches(doc, filter_dict):
        return all(doc.get(key) == value for key, value in (filter_dict or {}).items())

    def insert_one(self, doc):
        doc = dict(doc)
        doc["_id"] = next(self._ids)
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def find(self, filter_dict=None):
        return [dict(doc) for doc in self.docs if self._matches(doc, filter_dict)]

    def find_one(self, filter_dict=None):
        found = self.find(filter_dict)
        return found[0] if found else None

    def count_documents(self, filter_dict):
        return len(self.find(filter_dict))

    def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))


class FakeDatabase(dict):
    def __missing__(self, name):
        collection = self[name] = FakeCollection()
        return collection

    def list_collection_names(self):
        return sorted(self)


def make_student(student_id: str, **fields) -> Student:
    return Student(student_id=student_id, **fields)


def make_grades(student_id: str, *grades: float) -> List[GradeEntry]:
    return [
        GradeEntry(student_id=student_id, term=1, subject=f"Subject {i + 1}", grade=grade)
        for i, grade in enumerate(grades)
    ]


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def store(fake_db):
    return RecordStore(fake_db)


@pytest.fixture
def service(store):
    return ClassificationService(store, auto_rebuild=False)


@pytest.fixture
def two_student_profiles():
    # A has grades 60 and 80, B has no history
    students = [make_student("A"), make_student("B")]
    return build_profiles(students, make_grades("A", 60, 80))


@pytest.fixture
def demo_profiles():
    students, grades = [], []
    for student, entries in demo_students():
        students.append(student)
        grades.extend(entries)
    return build_profiles(students, grades)
