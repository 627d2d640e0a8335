from datetime import timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.class_attendance.class_attendance.attendance.history_service import HistoryReconciler
from src.class_attendance.class_attendance.attendance.override_service import ManualOverrideService
from src.class_attendance.class_attendance.attendance.service import AttendanceRecorder
from src.class_attendance.class_attendance.common.datetime_utils import now_local
from src.class_attendance.class_attendance.container import Container
from src.class_attendance.class_attendance.courses.model import Section
from src.class_attendance.class_attendance.main import create_app
from src.class_attendance.class_attendance.qrcodes.service import QrTokenService
from src.class_attendance.class_attendance.users.model import Student
from src.class_attendance.class_attendance.users.policy import AccessPolicy
from src.class_attendance.class_attendance.users.service import AuthService
from src.class_attendance.class_attendance.users.tokens import JwtCodec
from tests.fakes import (
    InMemoryAttendance,
    InMemoryEnrollments,
    InMemoryQrCodes,
    InMemorySections,
    InMemoryStudents,
)


class NoLecturers:
    def get_by_email(self, email):
        return None

    def get_by_id(self, lecturer_id):
        return None


@pytest.fixture
def api(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    sections = InMemorySections([Section(section_id=1, section_name="A", course_code="CS101", lecturer_id=7)])
    people = [Student("S1", "Alice", "alice@uni", generate_password_hash("secret1"))]
    enrollments = InMemoryEnrollments(sections, people)
    enrollments.enroll(1, "S1")
    students = InMemoryStudents(people, enrollments=enrollments)
    attendance = InMemoryAttendance()
    policy = AccessPolicy(sections)
    qr = QrTokenService(InMemoryQrCodes())

    container = Container(
        policy=policy,
        auth_service=AuthService(students, NoLecturers(), JwtCodec("test-jwt-secret")),
        student_service=None,
        lecturer_service=None,
        course_service=None,
        section_service=None,
        qr_service=qr,
        recorder=AttendanceRecorder(attendance, qr, sections, students, policy),
        override_service=ManualOverrideService(attendance, sections, enrollments, policy),
        history_service=HistoryReconciler(attendance, enrollments, students, policy),
        report_service=None,
        push_service=None,
        attendance_checker=None,
    )
    app = create_app(container=container)
    return app.test_client(), qr


def _login(client):
    resp = client.post("/api/login", json={"email": "alice@uni", "password": "secret1"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


def test_login_failure_is_401(api):
    client, _ = api

    resp = client.post("/api/login", json={"email": "alice@uni", "password": "wrong"})

    assert resp.status_code == 401
    assert resp.get_json()["error"] == "AuthenticationError"


def test_protected_route_needs_token(api):
    client, _ = api

    assert client.post("/api/attendance/record", json={}).status_code == 401
    resp = client.get("/api/verify", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid token"


def test_scan_then_duplicate(api):
    client, qr = api
    headers = _login(client)
    token = qr.issue("CS101")

    first = client.post("/api/attendance/record", json={"qr_string": token.qr_string, "section_id": 1}, headers=headers)
    second = client.post("/api/attendance/record", json={"qr_string": token.qr_string, "section_id": 1}, headers=headers)

    assert first.status_code == 201
    assert first.get_json()["record"]["origin"] == "automatic"
    assert second.status_code == 200
    assert second.get_json()["status"] == "ALREADY_RECORDED"


def test_expired_code_is_410_with_token_details(api):
    client, qr = api
    headers = _login(client)
    token = qr.issue("CS101", validity_minutes=1, now=now_local() - timedelta(minutes=5))

    resp = client.post("/api/attendance/record", json={"qr_string": token.qr_string, "section_id": 1}, headers=headers)

    assert resp.status_code == 410
    assert resp.get_json()["qrcode"]["course_code"] == "CS101"


def test_unknown_code_is_404_and_bad_input_is_400(api):
    client, _ = api
    headers = _login(client)

    resp = client.post("/api/attendance/record", json={"qr_string": "nope", "section_id": 1}, headers=headers)
    assert resp.status_code == 404

    resp = client.post("/api/attendance/record", json={"qr_string": "nope", "section_id": "x"}, headers=headers)
    assert resp.status_code == 400


def test_student_history_endpoint(api):
    client, qr = api
    headers = _login(client)
    token = qr.issue("CS101")
    client.post("/api/attendance/record", json={"qr_string": token.qr_string, "section_id": 1}, headers=headers)

    resp = client.get("/api/student/attendance-history", headers=headers)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["summary"] == {"total": 1, "present": 1, "absent": 0, "percentage": 100.0}
    assert body["history"][0]["status"] == "Present"


def test_students_cannot_issue_tokens(api):
    client, _ = api
    headers = _login(client)

    resp = client.post("/api/qrcodes", json={"course_code": "CS101"}, headers=headers)

    assert resp.status_code == 403
