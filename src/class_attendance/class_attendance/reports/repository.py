from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Protocol, Sequence, Tuple

from ..attendance.model import PresenceRecord
from .model import (
    AttendanceReportRow,
    AuditRow,
    CourseRecordCount,
    CourseSectionDetail,
    ReportFilters,
    SectionDayCount,
    StudentPresenceRatio,
)


class ReportRepository(Protocol):
    def present_counts(
        self,
        section_ids: Sequence[int],
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        course_code: Optional[str] = None,
    ) -> Sequence[SectionDayCount]:
        raise NotImplementedError

    def enrolled_counts(self, section_ids: Sequence[int]) -> Dict[int, int]:
        raise NotImplementedError

    def distinct_enrolled_students(self, section_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def present_students_on(self, section_ids: Sequence[int], on_date: date) -> int:
        raise NotImplementedError

    def recent_records(self, section_ids: Sequence[int], limit: int) -> Sequence[PresenceRecord]:
        raise NotImplementedError

    def student_presence_counts(self) -> Sequence[StudentPresenceRatio]:
        """Every enrolled student with presence rows and distinct enrolled sections."""

        raise NotImplementedError

    def entity_counts(self) -> Dict[str, int]:
        raise NotImplementedError

    def day_presence(self, on_date: date) -> Tuple[int, int]:
        """(present enrolled pairs, enrollments of the sections held that day)."""

        raise NotImplementedError

    def daily_record_counts(self, since: date) -> Sequence[Tuple[date, int]]:
        raise NotImplementedError

    def course_record_counts(self) -> Sequence[CourseRecordCount]:
        raise NotImplementedError

    def attendance_rows(self, filters: ReportFilters) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError

    def course_details(self, course_code: str) -> Sequence[CourseSectionDetail]:
        raise NotImplementedError

    def audit_rows(self, log_type: str, limit: int) -> Sequence[AuditRow]:
        """Most recently updated rows of one entity table, newest first."""

        raise NotImplementedError
