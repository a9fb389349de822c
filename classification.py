"""
Classification variables and the labels they assign to a profile.

Labels are pure functions of a single profile, so the same profile always
lands in the same group.
"""
from enum import Enum
from typing import Dict, List, Optional

from schemas import Profile

NO_RECORD = "no record"
NO_HISTORY = "no history"


class ClassificationVariable(str, Enum):
    GENDER = "gender"
    RESIDENCE = "residence"
    SCHOOL_TYPE = "school_type"
    AGE_RANGE = "age_range"
    GRADE_RANGE = "grade_range"
    PASS_RATE_RANGE = "pass_rate_range"
    EMPLOYED = "employed"
    MARITAL_STATUS = "marital_status"
    SCHOOL_OF_ORIGIN = "school_of_origin"

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]

    @property
    def option(self) -> int:
        return list(ClassificationVariable).index(self) + 1


DISPLAY_NAMES: Dict[ClassificationVariable, str] = {
    ClassificationVariable.GENDER: "Gender",
    ClassificationVariable.RESIDENCE: "Residence",
    ClassificationVariable.SCHOOL_TYPE: "School type",
    ClassificationVariable.AGE_RANGE: "Age range",
    ClassificationVariable.GRADE_RANGE: "Average grade",
    ClassificationVariable.PASS_RATE_RANGE: "Pass rate",
    ClassificationVariable.EMPLOYED: "Employed",
    ClassificationVariable.MARITAL_STATUS: "Marital status",
    ClassificationVariable.SCHOOL_OF_ORIGIN: "School of origin",
}


def variable_from_option(option: int) -> Optional[ClassificationVariable]:
    """Map a 1-based menu option to its variable, None when out of range."""
    variables = list(ClassificationVariable)
    if 1 <= option <= len(variables):
        return variables[option - 1]
    return None


def variable_catalog() -> List[Dict[str, object]]:
    return [
        {"option": variable.option, "variable": variable.value, "name": variable.display_name}
        for variable in ClassificationVariable
    ]


def age_range(age: int) -> str:
    if age <= 0:
        return "unknown"
    if age < 18:
        return "under 18"
    if age <= 30:
        return "18-30"
    if age <= 64:
        return "31-64"
    return "65+"


def grade_range(average: Optional[float]) -> str:
    if average is None:
        return NO_HISTORY
    value = min(max(average, 0.0), 100.0)
    if value < 60.0:
        return "0-59"
    if value < 80.0:
        return "60-79"
    return "80-100"


def pass_rate_range(ratio: Optional[float]) -> str:
    if ratio is None:
        return NO_HISTORY
    percentage = min(max(ratio * 100.0, 0.0), 100.0)
    if percentage <= 50.0:
        return "0-50%"
    if percentage <= 75.0:
        return "51-75%"
    return "76-100%"


def _or_no_record(value: str) -> str:
    return value if value else NO_RECORD


def label(variable: ClassificationVariable, profile: Profile) -> str:
    student = profile.student
    if variable is ClassificationVariable.GENDER:
        return _or_no_record(student.gender)
    if variable is ClassificationVariable.RESIDENCE:
        return _or_no_record(student.residence)
    if variable is ClassificationVariable.SCHOOL_TYPE:
        return _or_no_record(student.school_type)
    if variable is ClassificationVariable.AGE_RANGE:
        return age_range(student.age)
    if variable is ClassificationVariable.GRADE_RANGE:
        return grade_range(profile.mean)
    if variable is ClassificationVariable.PASS_RATE_RANGE:
        return pass_rate_range(profile.pass_ratio)
    if variable is ClassificationVariable.EMPLOYED:
        return "yes" if student.employed else "no"
    if variable is ClassificationVariable.MARITAL_STATUS:
        return _or_no_record(student.marital_status)
    if variable is ClassificationVariable.SCHOOL_OF_ORIGIN:
        return _or_no_record(student.school_of_origin)
    raise ValueError(f"Unknown classification variable: {variable!r}")
