from datetime import date, datetime, timedelta

import pytest

from src.class_attendance.class_attendance.core.enums import Role
from src.class_attendance.class_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.class_attendance.class_attendance.courses.model import Section
from src.class_attendance.class_attendance.reports.model import (
    AuditRow,
    CourseSectionDetail,
    CourseRecordCount,
    SectionDayCount,
    StudentPresenceRatio,
)
from src.class_attendance.class_attendance.reports.service import AttendanceReportService
from src.class_attendance.class_attendance.users.model import Actor
from src.class_attendance.class_attendance.users.policy import AccessPolicy
from tests.fakes import InMemorySections

LECTURER = Actor(user_id="7", role=Role.LECTURER)
ADMIN = Actor(user_id="1", role=Role.ADMIN)
TODAY = date(2025, 3, 10)


class FakeReports:
    def __init__(self):
        self.counts = []
        self.enrolled = {}
        self.ratios = []
        self.day = {}
        self.courses = []
        self.details = {}
        self.audit = {}
        self.audit_calls = []

    def present_counts(self, section_ids, *, start_date=None, end_date=None, course_code=None):
        return [
            c
            for c in self.counts
            if c.section_id in section_ids
            and (start_date is None or c.report_date >= start_date)
            and (end_date is None or c.report_date <= end_date)
        ]

    def enrolled_counts(self, section_ids):
        return {sid: n for sid, n in self.enrolled.items() if sid in section_ids}

    def distinct_enrolled_students(self, section_ids):
        return sum(n for sid, n in self.enrolled.items() if sid in section_ids)

    def present_students_on(self, section_ids, on_date):
        return sum(c.present_students for c in self.counts if c.section_id in section_ids and c.report_date == on_date)

    def recent_records(self, section_ids, limit):
        return []

    def student_presence_counts(self):
        return self.ratios

    def entity_counts(self):
        return {"students": 3, "lecturers": 2, "courses": 2, "sections": 2}

    def day_presence(self, on_date):
        return self.day.get(on_date, (0, 0))

    def daily_record_counts(self, since):
        return [(TODAY, 4)]

    def course_record_counts(self):
        return self.courses

    def course_details(self, course_code):
        return self.details.get(course_code, [])

    def audit_rows(self, log_type, limit):
        self.audit_calls.append((log_type, limit))
        return self.audit.get(log_type, [])[:limit]


def _setup():
    sections = InMemorySections(
        [
            Section(section_id=1, section_name="A", course_code="CS101", lecturer_id=7),
            Section(section_id=2, section_name="B", course_code="CS201", lecturer_id=7),
            Section(section_id=3, section_name="C", course_code="CS101", lecturer_id=8),
        ]
    )
    reports = FakeReports()
    return AttendanceReportService(reports, sections, AccessPolicy(sections)), reports


def _count(section_id, day, present, course_code="CS101", name="A"):
    return SectionDayCount(
        report_date=day,
        section_id=section_id,
        section_name=name,
        course_code=course_code,
        course_name=None,
        present_students=present,
    )


def test_rates_divide_by_enrollment_and_sort_newest_first():
    svc, reports = _setup()
    reports.counts = [
        _count(1, TODAY - timedelta(days=1), 3),
        _count(2, TODAY, 1, course_code="CS201", name="B"),
        _count(1, TODAY, 2),
    ]
    reports.enrolled = {1: 4, 2: 2}

    rates = svc.lecturer_attendance_reports(LECTURER, 7)

    assert [(r.report_date, r.course_code) for r in rates] == [
        (TODAY, "CS101"),
        (TODAY, "CS201"),
        (TODAY - timedelta(days=1), "CS101"),
    ]
    assert rates[0].attendance_percentage == 50.0
    assert rates[0].total_students == 4
    assert rates[1].attendance_percentage == 50.0
    assert rates[2].attendance_percentage == 75.0
    assert rates[0].report_id == "1-2025-03-10"


def test_rate_for_section_without_enrollment_is_zero():
    svc, reports = _setup()
    reports.counts = [_count(1, TODAY, 2)]

    (rate,) = svc.rates_for_sections([1])

    assert rate.total_students == 0
    assert rate.attendance_percentage == 0.0


def test_lecturer_reports_access_and_filters():
    svc, reports = _setup()
    reports.counts = [_count(1, TODAY, 1)]
    reports.enrolled = {1: 1}

    with pytest.raises(AuthorizationError):
        svc.lecturer_attendance_reports(LECTURER, 8)
    with pytest.raises(NotFoundError):
        svc.lecturer_attendance_reports(Actor(user_id="1", role=Role.ADMIN), 99)
    with pytest.raises(NotFoundError):
        svc.lecturer_attendance_reports(LECTURER, 7, section_id=3)

    assert svc.lecturer_attendance_reports(LECTURER, 7, start_date=TODAY + timedelta(days=1)) == []


def test_at_risk_uses_coarse_ratio_and_includes_students_without_records():
    svc, reports = _setup()
    reports.ratios = [
        StudentPresenceRatio("S1", "Alice", "a@x", presence_count=10, enrolled_sections=2),
        StudentPresenceRatio("S2", "Bob", "b@x", presence_count=1, enrolled_sections=2),
        StudentPresenceRatio("S3", "Cara", "c@x", presence_count=0, enrolled_sections=1),
    ]

    at_risk = svc.at_risk_students()

    assert [s.student_id for s in at_risk] == ["S2", "S3"]
    assert at_risk[0].ratio == 0.5


def test_dashboard_summary_shapes_today_and_lowest_courses():
    svc, reports = _setup()
    reports.day = {TODAY: (3, 4), TODAY - timedelta(days=1): (1, 3)}
    reports.courses = [
        CourseRecordCount("CS101", "Intro", record_count=9, enrolled_students=3),
        CourseRecordCount("CS201", "Data", record_count=1, enrolled_students=2),
    ]

    summary = svc.dashboard_summary(today=TODAY)

    assert summary["total_students"] == 3
    assert summary["today_attendance"] == {"percentage": 75.0, "vs_yesterday": 33.3}
    assert summary["at_risk_student_count"] == 0
    assert summary["charts"]["overview_7d"] == [{"date": "2025-03-10", "count": 4}]
    lowest = summary["charts"]["lowest_attendance_courses"]
    assert [c["course_code"] for c in lowest] == ["CS201", "CS101"]
    assert lowest[0]["attendance_percentage"] == 50.0


def test_lecturer_dashboard_for_lecturer_without_sections():
    svc, _ = _setup()
    nobody = Actor(user_id="9", role=Role.LECTURER)

    summary = svc.lecturer_dashboard_summary(nobody, 9, today=TODAY)

    assert summary["total_sections"] == 0
    assert summary["today_attendance_rate"] == 0.0


def test_lecturer_dashboard_rate():
    svc, reports = _setup()
    reports.counts = [_count(1, TODAY, 2), _count(2, TODAY, 1, course_code="CS201", name="B")]
    reports.enrolled = {1: 4, 2: 2}

    summary = svc.lecturer_dashboard_summary(LECTURER, 7, today=TODAY)

    assert summary["total_sections"] == 2
    assert summary["total_enrolled_students"] == 6
    assert summary["today_attendance_rate"] == 50.0


def test_course_details_lists_sections_with_lecturers_for_admin():
    svc, reports = _setup()
    reports.details["CS101"] = [
        CourseSectionDetail(section_id=1, section_name="A", lecturer_id=7, lecturer_name="Dr. Lim"),
        CourseSectionDetail(section_id=3, section_name="B", lecturer_id=None, lecturer_name=None),
    ]

    details = [d.to_dict() for d in svc.course_details(ADMIN, " CS101 ")]

    assert details[0] == {"id": 1, "section": "A", "lecturer_id": 7, "lecturer": "Dr. Lim"}
    assert details[1]["lecturer"] is None
    with pytest.raises(AuthorizationError):
        svc.course_details(LECTURER, "CS101")
    with pytest.raises(ValidationError):
        svc.course_details(ADMIN, "  ")


def test_audit_log_returns_latest_rows_for_known_types_only():
    svc, reports = _setup()
    stamp = datetime(2025, 3, 1, 8, 30)
    reports.audit["students"] = [
        AuditRow(entity_id="S1", name="Ana", email="ana@example.com", created_at=stamp, updated_at=stamp)
    ]
    reports.audit["courses"] = [AuditRow(entity_id="CS101", name="Intro", created_at=stamp, updated_at=None)]

    student = svc.audit_log(ADMIN, "students")[0].to_dict()
    course = svc.audit_log(ADMIN, "courses")[0].to_dict()

    assert student["entity_id"] == "S1"
    assert student["email"] == "ana@example.com"
    assert student["timestamp"] == "2025-03-01T08:30:00.000"
    assert "email" not in course
    assert course["updated_at"] is None
    assert reports.audit_calls == [("students", 20), ("courses", 20)]

    with pytest.raises(ValidationError, match="Invalid log type"):
        svc.audit_log(ADMIN, "attendance_records")
    with pytest.raises(AuthorizationError):
        svc.audit_log(LECTURER, "students")
