from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_date, format_timestamp


@dataclass(frozen=True)
class SectionDayCount:
    """Read-model: distinct students present in one section on one day."""

    report_date: date
    section_id: int
    section_name: str
    course_code: str
    course_name: Optional[str]
    present_students: int


@dataclass(frozen=True)
class SectionDayRate:
    report_date: date
    section_id: int
    section_name: str
    course_code: str
    course_name: Optional[str]
    present_students: int
    total_students: int
    attendance_percentage: float

    @property
    def report_id(self) -> str:
        return f"{self.section_id}-{format_date(self.report_date)}"

    def to_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "report_date": format_date(self.report_date),
            "course_code": self.course_code,
            "course_name": self.course_name,
            "section_id": self.section_id,
            "section_name": self.section_name,
            "present_students": self.present_students,
            "total_students": self.total_students,
            "attendance_percentage": self.attendance_percentage,
        }


@dataclass(frozen=True)
class StudentPresenceRatio:
    """Coarse at-risk metric: presence rows per distinct enrolled section."""

    student_id: str
    name: str
    email: str
    presence_count: int
    enrolled_sections: int
    ratio: float = 0.0

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "email": self.email,
            "presence_count": self.presence_count,
            "enrolled_sections": self.enrolled_sections,
            "ratio": round(self.ratio, 3),
        }


@dataclass(frozen=True)
class CourseRecordCount:
    course_code: str
    course_name: str
    record_count: int
    enrolled_students: int


@dataclass(frozen=True)
class ReportFilters:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    course_code: Optional[str] = None
    lecturer_id: Optional[int] = None
    section_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceReportRow:
    record_id: int
    attended_at: datetime
    student_id: str
    student_name: str
    section_id: int
    section_name: str
    course_code: str
    course_name: str
    lecturer_id: int
    lecturer_name: str
    is_manual_override: bool

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "attended_at": format_timestamp(self.attended_at),
            "student_id": self.student_id,
            "student_name": self.student_name,
            "section_id": self.section_id,
            "section_name": self.section_name,
            "course_code": self.course_code,
            "course_name": self.course_name,
            "lecturer_id": self.lecturer_id,
            "lecturer_name": self.lecturer_name,
            "is_present": True,
            "is_manual_override": self.is_manual_override,
        }


@dataclass(frozen=True)
class CourseSectionDetail:
    section_id: int
    section_name: str
    lecturer_id: Optional[int]
    lecturer_name: Optional[str]

    def to_dict(self) -> dict:
        return {
            "id": self.section_id,
            "section": self.section_name,
            "lecturer_id": self.lecturer_id,
            "lecturer": self.lecturer_name,
        }


@dataclass(frozen=True)
class AuditRow:
    """Latest create/update stamps of one student, lecturer, course or section."""

    entity_id: str
    name: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    email: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "entity_id": self.entity_id,
            "name": self.name,
            "timestamp": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
        }
        if self.email is not None:
            data["email"] = self.email
        return data
