"""
Database Schemas for the Student Classification App

Student and GradeEntry each map to a collection in MongoDB ("student" and
"grade_entry"). Profile is derived in memory and never stored.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional


class Student(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    student_id: str = Field(..., min_length=1, description="Unique student id (carne)")
    gender: str = Field("", description="Gender as entered")
    residence: str = Field("", description="Place of residence")
    age: int = Field(0, ge=0, le=130, description="Age in years, 0 when unknown")
    school_of_origin: str = Field("", description="Secondary school the student comes from")
    school_type: str = Field("", description="Public, private, technical...")
    employed: bool = Field(False, description="Whether the student works")
    marital_status: str = Field("", description="Marital status")


class GradeEntry(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    student_id: str = Field(..., min_length=1, description="Id of the student this grade belongs to")
    term: int = Field(..., ge=1, le=20, description="Term number")
    subject: str = Field(..., min_length=1, description="Subject name")
    grade: float = Field(..., ge=0, le=100, description="Grade 0-100")


class Profile(BaseModel):
    model_config = ConfigDict(frozen=True)

    student: Student
    entries: List[GradeEntry] = Field(default_factory=list)
    mean: Optional[float] = None
    pass_ratio: Optional[float] = None

    @model_validator(mode="after")
    def _stats_follow_entries(self) -> "Profile":
        has_entries = len(self.entries) > 0
        if (self.mean is not None) != has_entries or (self.pass_ratio is not None) != has_entries:
            raise ValueError("mean and pass_ratio must be present exactly when entries exist")
        return self
