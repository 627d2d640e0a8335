from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import format_timestamp, now_local
from ..core.constants import ATTENDANCE_UPDATE_EVENT
from ..core.enums import Action, ScanStatus
from ..core.exceptions import CourseMismatch, DuplicatePresenceError, NotEnrolled, SectionNotFound
from ..courses.model import Section
from ..courses.repository import SectionRepository
from ..notifications.realtime import Broadcaster, NullBroadcaster
from ..qrcodes.model import AttendanceToken
from ..qrcodes.service import QrTokenService
from ..users.model import Actor
from ..users.policy import AccessPolicy
from ..users.repository import StudentRepository
from .model import PresenceRecord, ScanResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Turns a scanned QR token into at most one presence row per session."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        qr_tokens: QrTokenService,
        sections: SectionRepository,
        students: StudentRepository,
        policy: AccessPolicy,
        *,
        broadcaster: Optional[Broadcaster] = None,
    ):
        self._attendance = attendance
        self._qr_tokens = qr_tokens
        self._sections = sections
        self._students = students
        self._policy = policy
        self._broadcaster = broadcaster or NullBroadcaster()

    def record_scan(
        self,
        actor: Actor,
        student_id: str,
        section_id: int,
        qr_string: str,
        now: Optional[datetime] = None,
    ) -> ScanResult:
        self._policy.require(actor, Action.RECORD_SCAN, student_id)
        now = now or now_local()
        student_id = str(student_id)

        token = self._qr_tokens.validate(qr_string, now)

        section = self._sections.get_by_id(int(section_id))
        if not section:
            raise SectionNotFound("Section not found")
        if section.course_code != token.course_code:
            raise CourseMismatch("This QR code is not for the selected course")
        if not self._students.is_enrolled_in_course(student_id, token.course_code):
            raise NotEnrolled("You are not enrolled in this course")

        existing = self._attendance.find_for_student_session(student_id, token.session_id)
        if existing:
            logger.info("Scan ignored: student %s already recorded for session %s", student_id, token.session_id)
            return ScanResult(status=ScanStatus.ALREADY_RECORDED, token=token, record=existing)

        try:
            record_id = self._attendance.insert(
                student_id=student_id,
                section_id=section.section_id,
                session_id=token.session_id,
                qrcode_id=token.qrcode_id,
                attended_at=now,
            )
        except DuplicatePresenceError:
            # Concurrent scan won the unique constraint.
            logger.warning("Duplicate scan race for student %s session %s", student_id, token.session_id)
            return ScanResult(
                status=ScanStatus.ALREADY_RECORDED,
                token=token,
                record=self._attendance.find_for_student_session(student_id, token.session_id),
            )

        record = self._attendance.get_by_id(record_id) or PresenceRecord(
            record_id=record_id,
            student_id=student_id,
            section_id=section.section_id,
            session_id=token.session_id,
            qrcode_id=token.qrcode_id,
            attended_at=now,
            section_name=section.section_name,
            course_code=section.course_code,
        )
        logger.info(
            "Recorded attendance id=%s student=%s section=%s session=%s",
            record.record_id, student_id, section.section_id, token.session_id,
        )
        self._broadcast(record, section, token)
        return ScanResult(status=ScanStatus.RECORDED, token=token, record=record)

    def _broadcast(self, record: PresenceRecord, section: Section, token: AttendanceToken) -> None:
        payload = {
            "record_id": record.record_id,
            "student_id": record.student_id,
            "student_name": record.student_name,
            "section_id": section.section_id,
            "section_name": section.section_name,
            "session_id": token.session_id,
            "course_code": token.course_code,
            "attended_at": format_timestamp(record.attended_at),
        }
        try:
            self._broadcaster.emit_to_section(section.section_id, ATTENDANCE_UPDATE_EVENT, payload)
        except Exception as e:
            logger.warning("Realtime update for section %s failed: %s", section.section_id, e)

    def session_records(self, actor: Actor, session_id: str) -> Sequence[PresenceRecord]:
        self._policy.require(actor, Action.VIEW_SESSION_ATTENDANCE, session_id)
        return self._attendance.list_by_session(str(session_id))

    def section_records(self, actor: Actor, section_id: int) -> Sequence[PresenceRecord]:
        self._policy.require(actor, Action.VIEW_SECTION_ATTENDANCE, section_id)
        return self._attendance.list_by_section(int(section_id))

    def student_records(self, actor: Actor, student_id: str) -> Sequence[PresenceRecord]:
        self._policy.require(actor, Action.VIEW_STUDENT_HISTORY, student_id)
        return self._attendance.list_by_student(str(student_id))
