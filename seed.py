"""Seed the record store with demo students and grades"""
import logging

from database import RecordStore
from schemas import GradeEntry, Student

logger = logging.getLogger(__name__)

GENDERS = ["Male", "Female"]
RESIDENCES = ["San Jose", "Alajuela", "Cartago", "Heredia"]
SCHOOL_TYPES = ["Public", "Private", "Technical"]
MARITAL_STATUSES = ["Single", "Married"]
SCHOOLS = ["Central High School", "Technical College", "Modern Institute"]

DEMO_STUDENTS = 30
ENTRIES_PER_STUDENT = 4


def demo_students():
    for i in range(DEMO_STUDENTS):
        student = Student(
            student_id=f"A{i + 1:03d}",
            gender=GENDERS[i % len(GENDERS)],
            residence=RESIDENCES[i % len(RESIDENCES)],
            age=18 + (i % 15),
            school_of_origin=SCHOOLS[i % len(SCHOOLS)],
            school_type=SCHOOL_TYPES[i % len(SCHOOL_TYPES)],
            employed=(i % 3 == 0),
            marital_status=MARITAL_STATUSES[i % len(MARITAL_STATUSES)],
        )
        entries = [
            GradeEntry(
                student_id=student.student_id,
                term=1 + (j % 4),
                subject=f"Subject {j + 1}",
                grade=55.0 + (i * 3 + j * 5) % 45,
            )
            for j in range(ENTRIES_PER_STUDENT)
        ]
        yield student, entries


def seed_demo_data(store: RecordStore) -> bool:
    """Insert demo records when the store has no students. Returns True if it seeded."""
    if store.count_students() > 0:
        logger.info("Students already exist, skipping seed")
        return False

    for student, entries in demo_students():
        store.add_student(student)
        for entry in entries:
            store.add_grade(entry)
    logger.info("Seeded %d demo students", DEMO_STUDENTS)
    return True
