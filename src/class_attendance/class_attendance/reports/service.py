from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import List, Optional, Sequence

from ..common.datetime_utils import format_date, format_timestamp, now_local
from ..common.validators import require_non_empty
from ..core.constants import (
    AT_RISK_RATIO_THRESHOLD,
    AUDIT_LOG_LIMIT,
    AUDIT_LOG_TYPES,
    DEFAULT_LOWEST_COURSES_LIMIT,
    DEFAULT_OVERVIEW_DAYS,
    DEFAULT_RECENT_LIMIT,
)
from ..core.enums import Action
from ..core.exceptions import NotFoundError, ValidationError
from ..courses.repository import SectionRepository
from ..users.model import Actor
from ..users.policy import AccessPolicy
from .calculator.base import RateCalculator
from .calculator.standard_calculator import StandardRateCalculator
from .model import (
    AttendanceReportRow,
    AuditRow,
    CourseSectionDetail,
    ReportFilters,
    SectionDayRate,
    StudentPresenceRatio,
)
from .repository import ReportRepository

logger = logging.getLogger(__name__)


class AttendanceReportService:
    """Rollups over stored presence rows.

    Percentages divide by a static enrollment count; the at-risk ratio is a
    separate, coarser metric and is never mixed with them.
    """

    def __init__(
        self,
        reports: ReportRepository,
        sections: SectionRepository,
        policy: AccessPolicy,
        *,
        calculator: Optional[RateCalculator] = None,
    ):
        self._reports = reports
        self._sections = sections
        self._policy = policy
        self._calculator = calculator or StandardRateCalculator()

    def rates_for_sections(
        self,
        section_ids: Sequence[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        course_code: Optional[str] = None,
    ) -> List[SectionDayRate]:
        if not section_ids:
            return []

        counts = self._reports.present_counts(
            section_ids, start_date=start_date, end_date=end_date, course_code=course_code
        )
        enrolled = self._reports.enrolled_counts(sorted({c.section_id for c in counts}))

        rates = []
        for c in counts:
            total = enrolled.get(c.section_id, 0)
            rates.append(
                SectionDayRate(
                    report_date=c.report_date,
                    section_id=c.section_id,
                    section_name=c.section_name,
                    course_code=c.course_code,
                    course_name=c.course_name,
                    present_students=c.present_students,
                    total_students=total,
                    attendance_percentage=self._calculator.percentage(c.present_students, total),
                )
            )
        rates.sort(key=lambda r: (r.course_code, r.section_name))
        rates.sort(key=lambda r: r.report_date, reverse=True)
        return rates

    def lecturer_attendance_reports(
        self,
        actor: Actor,
        lecturer_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        section_id: Optional[int] = None,
        course_code: Optional[str] = None,
    ) -> List[SectionDayRate]:
        self._policy.require(actor, Action.VIEW_LECTURER_REPORTS, lecturer_id)

        sections = self._sections.list_by_lecturer(int(lecturer_id))
        if not sections:
            raise NotFoundError("No sections found for this lecturer")

        if section_id is not None:
            sections = [s for s in sections if s.section_id == int(section_id)]
        if course_code:
            sections = [s for s in sections if s.course_code == course_code]
        if not sections:
            raise NotFoundError("No sections match the given filters")

        return self.rates_for_sections(
            [s.section_id for s in sections],
            start_date=start_date,
            end_date=end_date,
            course_code=course_code,
        )

    def at_risk_students(self) -> List[StudentPresenceRatio]:
        at_risk = []
        for s in self._reports.student_presence_counts():
            ratio = self._calculator.coarse_ratio(s.presence_count, s.enrolled_sections)
            if ratio < AT_RISK_RATIO_THRESHOLD:
                at_risk.append(replace(s, ratio=ratio))
        return at_risk

    def _day_rate(self, on_date: date) -> float:
        present, enrolled = self._reports.day_presence(on_date)
        return round(self._calculator.percentage(present, enrolled), 1)

    def dashboard_summary(self, today: Optional[date] = None) -> dict:
        today = today or now_local().date()
        counts = self._reports.entity_counts()

        lowest = []
        for c in self._reports.course_record_counts():
            lowest.append(
                {
                    "course_code": c.course_code,
                    "course_name": c.course_name,
                    "attendance_percentage": self._calculator.coarse_ratio(c.record_count, c.enrolled_students) * 100,
                }
            )
        lowest.sort(key=lambda c: c["attendance_percentage"])

        return {
            "total_students": counts["students"],
            "total_lecturers": counts["lecturers"],
            "total_courses": counts["courses"],
            "total_sections": counts["sections"],
            "today_attendance": {
                "percentage": self._day_rate(today),
                "vs_yesterday": self._day_rate(today - timedelta(days=1)),
            },
            "at_risk_student_count": len(self.at_risk_students()),
            "charts": {
                "overview_7d": [
                    {"date": format_date(day), "count": n}
                    for day, n in self._reports.daily_record_counts(today - timedelta(days=DEFAULT_OVERVIEW_DAYS))
                ],
                "lowest_attendance_courses": lowest[:DEFAULT_LOWEST_COURSES_LIMIT],
            },
        }

    def lecturer_dashboard_summary(self, actor: Actor, lecturer_id: int, today: Optional[date] = None) -> dict:
        self._policy.require(actor, Action.VIEW_LECTURER_REPORTS, lecturer_id)
        today = today or now_local().date()

        section_ids = [s.section_id for s in self._sections.list_by_lecturer(int(lecturer_id))]
        if not section_ids:
            return {
                "total_sections": 0,
                "total_enrolled_students": 0,
                "today_attendance_rate": 0.0,
                "recent_attendance": [],
            }

        enrolled = self._reports.distinct_enrolled_students(section_ids)
        present = self._reports.present_students_on(section_ids, today)
        recent = self._reports.recent_records(section_ids, DEFAULT_RECENT_LIMIT)

        return {
            "total_sections": len(section_ids),
            "total_enrolled_students": enrolled,
            "today_attendance_rate": round(self._calculator.percentage(present, enrolled), 1),
            "recent_attendance": [
                {
                    "section_name": r.section_name,
                    "student_name": r.student_name,
                    "attended_at": format_timestamp(r.attended_at),
                }
                for r in recent
            ],
        }

    def attendance_report(self, filters: ReportFilters) -> Sequence[AttendanceReportRow]:
        rows = self._reports.attendance_rows(filters)
        logger.info("Attendance report: %s rows for %s", len(rows), filters)
        return rows

    def course_details(self, actor: Actor, course_code: str) -> Sequence[CourseSectionDetail]:
        self._policy.require(actor, Action.VIEW_ADMIN_REPORTS)
        return self._reports.course_details(require_non_empty(course_code, "course_code"))

    def audit_log(self, actor: Actor, log_type: str) -> Sequence[AuditRow]:
        """Latest changed students, lecturers, courses or sections."""

        self._policy.require(actor, Action.VIEW_ADMIN_REPORTS)
        if log_type not in AUDIT_LOG_TYPES:
            raise ValidationError("Invalid log type specified.")
        return self._reports.audit_rows(log_type, AUDIT_LOG_LIMIT)
