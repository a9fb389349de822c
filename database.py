import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError

from config import DATABASE_NAME, DATABASE_URL
from errors import DuplicateIdentity
from schemas import GradeEntry, Student

logger = logging.getLogger(__name__)

STUDENT_COLLECTION = "student"
GRADE_COLLECTION = "grade_entry"

client = None
_db = None

try:
    client = MongoClient(DATABASE_URL)
    _db = client[DATABASE_NAME]
except Exception:
    logger.exception("Could not create MongoDB client for %s", DATABASE_URL)
    client = None
    _db = None

# Expose db for other modules
db = _db


def _strip_meta(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc = dict(doc)
    for key in ("_id", "created_at", "updated_at"):
        doc.pop(key, None)
    return doc


class RecordStore:
    """Student and grade records kept in two MongoDB collections.

    Students are unique by ``student_id``. Grade entries are append-only and
    reference their student by id only.
    """

    def __init__(self, database: Optional[Any] = None):
        self._db = database if database is not None else db

    def _collection(self, name: str):
        if self._db is None:
            raise RuntimeError("Database not initialized")
        return self._db[name]

    def _insert(self, collection_name: str, data: Dict[str, Any]) -> str:
        data = dict(data)
        now = datetime.utcnow()
        if "created_at" not in data:
            data["created_at"] = now
        data["updated_at"] = now
        result = self._collection(collection_name).insert_one(data)
        return str(result.inserted_id)

    def ensure_indexes(self) -> None:
        self._collection(STUDENT_COLLECTION).create_index([("student_id", ASCENDING)], unique=True)
        self._collection(GRADE_COLLECTION).create_index([("student_id", ASCENDING)])

    def list_students(self) -> List[Student]:
        cursor = self._collection(STUDENT_COLLECTION).find({})
        return [Student(**_strip_meta(doc)) for doc in cursor]

    def list_grades(self) -> List[GradeEntry]:
        cursor = self._collection(GRADE_COLLECTION).find({})
        return [GradeEntry(**_strip_meta(doc)) for doc in cursor]

    def count_students(self) -> int:
        return self._collection(STUDENT_COLLECTION).count_documents({})

    def student_exists(self, student_id: str) -> bool:
        return self._collection(STUDENT_COLLECTION).find_one({"student_id": student_id}) is not None

    def add_student(self, student: Student) -> str:
        if self.student_exists(student.student_id):
            logger.info("Rejected duplicate student %s", student.student_id)
            raise DuplicateIdentity(student.student_id)
        try:
            doc_id = self._insert(STUDENT_COLLECTION, student.model_dump())
        except DuplicateKeyError:
            # unique index on student_id
            raise DuplicateIdentity(student.student_id)
        logger.info("Stored student %s", student.student_id)
        return doc_id

    def add_grade(self, entry: GradeEntry) -> str:
        doc_id = self._insert(GRADE_COLLECTION, entry.model_dump())
        logger.debug("Stored grade for %s: term %s %s", entry.student_id, entry.term, entry.subject)
        return doc_id
