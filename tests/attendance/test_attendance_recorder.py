from datetime import timedelta

import pytest

from src.class_attendance.class_attendance.attendance.service import AttendanceRecorder
from src.class_attendance.class_attendance.core.constants import ATTENDANCE_UPDATE_EVENT
from src.class_attendance.class_attendance.core.enums import RecordOrigin, Role, ScanStatus
from src.class_attendance.class_attendance.core.exceptions import (
    AuthorizationError,
    CourseMismatch,
    DuplicatePresenceError,
    NotEnrolled,
    SectionNotFound,
    TokenExpired,
)
from src.class_attendance.class_attendance.courses.model import Section
from src.class_attendance.class_attendance.qrcodes.service import QrTokenService
from src.class_attendance.class_attendance.users.model import Actor, Student
from src.class_attendance.class_attendance.users.policy import AccessPolicy
from tests.fakes import (
    InMemoryAttendance,
    InMemoryEnrollments,
    InMemoryQrCodes,
    InMemorySections,
    InMemoryStudents,
    RecordingBroadcaster,
)

ALICE = Actor(user_id="S1", role=Role.STUDENT, name="Alice")


def _setup(broadcaster=None):
    sections = InMemorySections(
        [
            Section(section_id=1, section_name="A", course_code="CS101", lecturer_id=7),
            Section(section_id=2, section_name="A", course_code="CS201", lecturer_id=7),
        ]
    )
    enrollments = InMemoryEnrollments(sections, [Student("S1", "Alice", "a@x"), Student("S2", "Bob", "b@x")])
    enrollments.enroll(1, "S1")
    enrollments.enroll(2, "S1", "S2")
    students = InMemoryStudents(enrollments=enrollments)
    attendance = InMemoryAttendance()
    qr = QrTokenService(InMemoryQrCodes())
    recorder = AttendanceRecorder(
        attendance, qr, sections, students, AccessPolicy(sections), broadcaster=broadcaster
    )
    return recorder, qr, attendance


def test_first_scan_records_and_second_is_ignored(fixed_now):
    broadcaster = RecordingBroadcaster()
    recorder, qr, attendance = _setup(broadcaster)
    token = qr.issue("CS101", now=fixed_now)

    first = recorder.record_scan(ALICE, "S1", 1, token.qr_string, now=fixed_now)
    second = recorder.record_scan(ALICE, "S1", 1, token.qr_string, now=fixed_now + timedelta(seconds=30))

    assert first.status == ScanStatus.RECORDED
    assert first.record.origin == RecordOrigin.AUTOMATIC
    assert second.status == ScanStatus.ALREADY_RECORDED
    assert second.record.record_id == first.record.record_id
    assert len(attendance.records) == 1

    assert len(broadcaster.events) == 1
    section_id, event, payload = broadcaster.events[0]
    assert (section_id, event) == (1, ATTENDANCE_UPDATE_EVENT)
    assert payload["student_id"] == "S1"


def test_reissued_code_for_same_session_still_counts_once(fixed_now):
    recorder, qr, attendance = _setup()
    first = qr.issue("CS101", now=fixed_now)
    second = qr.issue("CS101", existing_session_id=first.session_id, now=fixed_now)

    recorder.record_scan(ALICE, "S1", 1, first.qr_string, now=fixed_now)
    result = recorder.record_scan(ALICE, "S1", 1, second.qr_string, now=fixed_now)

    assert result.status == ScanStatus.ALREADY_RECORDED
    assert len(attendance.records) == 1


def test_scan_just_after_expiry_is_rejected(fixed_now):
    recorder, qr, attendance = _setup()
    token = qr.issue("CS101", validity_minutes=1, now=fixed_now)

    with pytest.raises(TokenExpired):
        recorder.record_scan(ALICE, "S1", 1, token.qr_string, now=token.expires_at + timedelta(milliseconds=1))
    assert attendance.records == {}


def test_scan_rejects_wrong_course_and_missing_enrollment(fixed_now):
    recorder, qr, _ = _setup()
    token = qr.issue("CS101", now=fixed_now)

    with pytest.raises(CourseMismatch):
        recorder.record_scan(ALICE, "S1", 2, token.qr_string, now=fixed_now)
    with pytest.raises(SectionNotFound):
        recorder.record_scan(ALICE, "S1", 99, token.qr_string, now=fixed_now)

    bob = Actor(user_id="S2", role=Role.STUDENT)
    with pytest.raises(NotEnrolled):
        recorder.record_scan(bob, "S2", 1, token.qr_string, now=fixed_now)


def test_student_cannot_scan_for_someone_else(fixed_now):
    recorder, qr, _ = _setup()
    token = qr.issue("CS101", now=fixed_now)

    with pytest.raises(AuthorizationError):
        recorder.record_scan(ALICE, "S2", 1, token.qr_string, now=fixed_now)


def test_concurrent_duplicate_is_reported_as_already_recorded(fixed_now):
    recorder, qr, attendance = _setup()
    token = qr.issue("CS101", now=fixed_now)

    # Another request inserts between the existence check and our insert.
    real_insert = attendance.insert

    def racing_insert(**kwargs):
        real_insert(**kwargs)
        raise DuplicatePresenceError("duplicate")

    attendance.insert = racing_insert

    result = recorder.record_scan(ALICE, "S1", 1, token.qr_string, now=fixed_now)

    assert result.status == ScanStatus.ALREADY_RECORDED
    assert result.record is not None
    assert len(attendance.records) == 1


def test_broadcast_failure_does_not_fail_the_scan(fixed_now):
    recorder, qr, attendance = _setup(RecordingBroadcaster(fail=True))
    token = qr.issue("CS101", now=fixed_now)

    result = recorder.record_scan(ALICE, "S1", 1, token.qr_string, now=fixed_now)

    assert result.created
    assert len(attendance.records) == 1
