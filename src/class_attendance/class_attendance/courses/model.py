from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Course:
    course_code: str
    course_name: str

    def to_dict(self) -> dict:
        return {"course_code": self.course_code, "course_name": self.course_name}


@dataclass(frozen=True)
class Section:
    """One teaching group of a course, owned by a single lecturer."""

    section_id: int
    section_name: str
    course_code: str
    lecturer_id: int
    course_name: Optional[str] = None
    lecturer_name: Optional[str] = None
    student_count: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        data = {
            "section_id": self.section_id,
            "section_name": self.section_name,
            "course_code": self.course_code,
            "course_name": self.course_name,
            "lecturer_id": self.lecturer_id,
            "lecturer_name": self.lecturer_name,
        }
        if self.student_count is not None:
            data["student_count"] = self.student_count
        return data


@dataclass(frozen=True)
class EnrolledStudent:
    """Read-model: a student as seen through one enrollment edge."""

    student_id: str
    student_name: str
    email: Optional[str] = None
    section_id: Optional[int] = None
    section_name: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"student_id": self.student_id, "student_name": self.student_name}
        if self.email is not None:
            data["email"] = self.email
        if self.section_id is not None:
            data["enrolled_section_id"] = self.section_id
            data["enrolled_section_name"] = self.section_name
        return data
