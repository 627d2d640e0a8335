from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.history_service import HistoryReconciler
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.override_service import ManualOverrideService
from .attendance.service import AttendanceRecorder
from .attendance.factory import OverrideStrategyFactory
from .core.constants import DEFAULT_JWT_EXPIRES_MINUTES
from .courses.mysql_course_repository import MySQLCourseRepository
from .courses.mysql_enrollment_repository import MySQLEnrollmentRepository
from .courses.mysql_section_repository import MySQLSectionRepository
from .courses.service import CourseService, SectionService
from .database.connection import DBConfig, DatabaseConnection
from .notifications.checker import LowAttendanceChecker
from .notifications.mysql_subscription_repository import MySQLSubscriptionRepository
from .notifications.push_service import PushService
from .notifications.realtime import Broadcaster
from .qrcodes.mysql_qrcode_repository import MySQLQrCodeRepository
from .qrcodes.service import QrTokenService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.service import AttendanceReportService
from .users.mysql_lecturer_repository import MySQLLecturerRepository
from .users.mysql_student_repository import MySQLStudentRepository
from .users.policy import AccessPolicy
from .users.service import AuthService, LecturerService, StudentService
from .users.tokens import JwtCodec


@dataclass(frozen=True)
class Container:
    policy: AccessPolicy

    auth_service: AuthService
    student_service: StudentService
    lecturer_service: LecturerService
    course_service: CourseService
    section_service: SectionService
    qr_service: QrTokenService
    recorder: AttendanceRecorder
    override_service: ManualOverrideService
    history_service: HistoryReconciler
    report_service: AttendanceReportService
    push_service: PushService
    attendance_checker: LowAttendanceChecker


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_expires_minutes: int = DEFAULT_JWT_EXPIRES_MINUTES,
    vapid_private_key: Optional[str] = None,
    vapid_claim_email: Optional[str] = None,
    broadcaster: Optional[Broadcaster] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    lecturers_repo = MySQLLecturerRepository(conn)
    courses_repo = MySQLCourseRepository(conn)
    sections_repo = MySQLSectionRepository(conn)
    enrollments_repo = MySQLEnrollmentRepository(conn)
    qrcodes_repo = MySQLQrCodeRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    reports_repo = MySQLReportRepository(conn)
    subscriptions_repo = MySQLSubscriptionRepository(conn)

    policy = AccessPolicy(sections_repo)
    qr_service = QrTokenService(qrcodes_repo)
    history_service = HistoryReconciler(attendance_repo, enrollments_repo, students_repo, policy)
    push_service = PushService(
        subscriptions_repo,
        vapid_private_key=vapid_private_key,
        vapid_claim_email=vapid_claim_email,
    )

    return Container(
        policy=policy,
        auth_service=AuthService(students_repo, lecturers_repo, JwtCodec(jwt_secret, jwt_expires_minutes)),
        student_service=StudentService(students_repo),
        lecturer_service=LecturerService(lecturers_repo),
        course_service=CourseService(courses_repo, sections_repo, enrollments_repo),
        section_service=SectionService(sections_repo, enrollments_repo, courses_repo, lecturers_repo, policy),
        qr_service=qr_service,
        recorder=AttendanceRecorder(
            attendance_repo,
            qr_service,
            sections_repo,
            students_repo,
            policy,
            broadcaster=broadcaster,
        ),
        override_service=ManualOverrideService(
            attendance_repo,
            sections_repo,
            enrollments_repo,
            policy,
            strategy_factory=OverrideStrategyFactory(),
        ),
        history_service=history_service,
        report_service=AttendanceReportService(reports_repo, sections_repo, policy),
        push_service=push_service,
        attendance_checker=LowAttendanceChecker(students_repo, history_service, push_service),
    )
