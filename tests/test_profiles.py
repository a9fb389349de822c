import logging

import pytest
from pydantic import ValidationError

from profiles import build_profile, build_profiles, describe_profile
from schemas import Profile
from tests.conftest import make_grades, make_student


def test_mean_and_pass_ratio(two_student_profiles):
    a, b = two_student_profiles
    assert a.student.student_id == "A"
    assert a.mean == 70.0
    assert a.pass_ratio == 0.5
    assert b.entries == []
    assert b.mean is None
    assert b.pass_ratio is None


def test_keeps_student_order():
    students = [make_student(sid) for sid in ("C", "A", "B")]
    profiles = build_profiles(students, make_grades("B", 90) + make_grades("C", 10))
    assert [p.student.student_id for p in profiles] == ["C", "A", "B"]


def test_grade_at_threshold_passes():
    profile = build_profile(make_student("A"), make_grades("A", 70, 69.99))
    assert profile.pass_ratio == 0.5


def test_custom_threshold():
    profile = build_profile(make_student("A"), make_grades("A", 50, 60), pass_threshold=50)
    assert profile.pass_ratio == 1.0


def test_orphaned_entries_are_dropped_and_logged(caplog):
    students = [make_student("A")]
    grades = make_grades("A", 100) + make_grades("ghost", 10, 20)
    with caplog.at_level(logging.WARNING, logger="profiles"):
        profiles = build_profiles(students, grades)
    assert len(profiles) == 1
    assert profiles[0].mean == 100.0
    assert "Dropped 2 grade entries" in caplog.text
    assert "ghost" in caplog.text


def test_presence_invariant(demo_profiles, two_student_profiles):
    for profile in demo_profiles + two_student_profiles:
        has_entries = len(profile.entries) > 0
        assert (profile.mean is not None) == (profile.pass_ratio is not None) == has_entries


def test_profile_rejects_stats_without_entries():
    with pytest.raises(ValidationError):
        Profile(student=make_student("A"), mean=50.0, pass_ratio=0.0)
    with pytest.raises(ValidationError):
        Profile(student=make_student("A"), entries=make_grades("A", 50))


def test_describe_profile(two_student_profiles):
    a, b = two_student_profiles
    text = describe_profile(a)
    assert "Id: A" in text
    assert "History (2 records):" in text
    assert "Average: 70.00" in text
    assert "Pass rate: 50.00%" in text
    assert "History: no records." in describe_profile(b)
