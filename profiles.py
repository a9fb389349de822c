import logging
from collections import defaultdict
from statistics import mean
from typing import Dict, Iterable, List

from config import PASS_THRESHOLD
from schemas import GradeEntry, Profile, Student

logger = logging.getLogger(__name__)


def build_profile(student: Student, entries: List[GradeEntry], pass_threshold: float = PASS_THRESHOLD) -> Profile:
    if not entries:
        return Profile(student=student, entries=[])
    grades = [entry.grade for entry in entries]
    passed = sum(1 for grade in grades if grade >= pass_threshold)
    return Profile(
        student=student,
        entries=list(entries),
        mean=float(mean(grades)),
        pass_ratio=passed / len(grades),
    )


def build_profiles(
    students: Iterable[Student],
    grades: Iterable[GradeEntry],
    pass_threshold: float = PASS_THRESHOLD,
) -> List[Profile]:
    """Join every student with its grade entries, keeping the student order.

    Entries whose student id matches no student are dropped. The drop is
    logged but never raised: the student list is the source of truth.
    """
    by_student: Dict[str, List[GradeEntry]] = defaultdict(list)
    for entry in grades:
        by_student[entry.student_id].append(entry)

    profiles = []
    for student in students:
        profiles.append(build_profile(student, by_student.pop(student.student_id, []), pass_threshold))

    orphaned = sum(len(entries) for entries in by_student.values())
    if orphaned:
        logger.warning(
            "Dropped %d grade entries referencing unknown students: %s",
            orphaned,
            ", ".join(sorted(by_student)),
        )
    return profiles


def describe_profile(profile: Profile) -> str:
    student = profile.student
    lines = [
        f"Id: {student.student_id} | Gender: {student.gender} | Residence: {student.residence}"
        f" | Age: {student.age} | School of origin: {student.school_of_origin}"
        f" | School type: {student.school_type} | Employed: {'Yes' if student.employed else 'No'}"
        f" | Marital status: {student.marital_status}"
    ]
    if not profile.entries:
        lines.append("  History: no records.")
        return "\n".join(lines)

    lines.append(f"  History ({len(profile.entries)} records):")
    for entry in profile.entries:
        lines.append(f"    - Term {entry.term} | Subject: {entry.subject} | Grade: {entry.grade:.2f}")
    lines.append(f"  Average: {profile.mean:.2f}")
    lines.append(f"  Pass rate: {profile.pass_ratio * 100.0:.2f}%")
    return "\n".join(lines)
