from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import List, Optional

from ..common.validators import require_bool, require_non_empty
from ..core.constants import MANUAL_ATTENDANCE_TIME
from ..core.enums import Action, OverrideAction, OverrideReason
from ..core.exceptions import CannotOverrideScanned, DuplicatePresenceError, NotEnrolled, SectionNotFound
from ..courses.repository import EnrollmentRepository, SectionRepository
from ..users.model import Actor
from ..users.policy import AccessPolicy
from .factory import OverrideStrategyFactory
from .model import OverrideResult, RosterEntry
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class ManualOverrideService:
    """Lecturer/admin edits of one student's presence on one section day.

    Manual edits may fill gaps or retract earlier manual entries; rows
    produced by a scan are never removed here.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        sections: SectionRepository,
        enrollments: EnrollmentRepository,
        policy: AccessPolicy,
        *,
        strategy_factory: Optional[OverrideStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._sections = sections
        self._enrollments = enrollments
        self._policy = policy
        self._factory = strategy_factory or OverrideStrategyFactory()

    def _require_section(self, section_id: int):
        section = self._sections.get_by_id(int(section_id))
        if not section:
            raise SectionNotFound("Section not found")
        return section

    def set_presence(
        self,
        actor: Actor,
        section_id: int,
        student_id: str,
        on_date: date,
        is_present: bool,
    ) -> OverrideResult:
        student_id = require_non_empty(student_id, "student_id")
        is_present = require_bool(is_present, "is_present")
        section = self._require_section(section_id)
        self._policy.require(actor, Action.OVERRIDE_PRESENCE, section.section_id)

        if not self._enrollments.is_enrolled(section.section_id, student_id):
            raise NotEnrolled("Student is not enrolled in this section")

        existing = self._attendance.find_for_section_student_date(section.section_id, student_id, on_date)
        strategy = self._factory.for_presence(is_present)
        try:
            decision = strategy.decide(existing)
        except CannotOverrideScanned:
            logger.warning(
                "Refused to remove scanned record %s (student=%s section=%s date=%s)",
                existing.record_id if existing else None, student_id, section.section_id, on_date,
            )
            raise

        if decision.action == OverrideAction.INSERT:
            session_id = self._attendance.find_session_id_for_section_date(section.section_id, on_date) or str(uuid.uuid4())
            try:
                record_id = self._attendance.insert(
                    student_id=student_id,
                    section_id=section.section_id,
                    session_id=session_id,
                    qrcode_id=None,
                    attended_at=datetime.combine(on_date, MANUAL_ATTENDANCE_TIME),
                )
            except DuplicatePresenceError:
                logger.warning("Student %s already has a record in session %s", student_id, session_id)
                return OverrideResult(applied=False, reason=OverrideReason.ALREADY_PRESENT)
            logger.info("Marked student %s present in section %s on %s", student_id, section.section_id, on_date)
            return OverrideResult(applied=True, reason=decision.reason, action=decision.action, record_id=record_id)

        if decision.action == OverrideAction.DELETE:
            self._attendance.delete(existing.record_id)
            logger.info("Removed manual record %s for student %s on %s", existing.record_id, student_id, on_date)
            return OverrideResult(applied=True, reason=decision.reason, action=decision.action)

        return OverrideResult(
            applied=False,
            reason=decision.reason,
            record_id=existing.record_id if existing else None,
        )

    def section_day_roster(self, actor: Actor, section_id: int, on_date: date) -> List[RosterEntry]:
        section = self._require_section(section_id)
        self._policy.require(actor, Action.VIEW_SECTION_ATTENDANCE, section.section_id)

        students = self._enrollments.list_students(section.section_id)
        if not students:
            return []

        present = {r.student_id: r for r in self._attendance.list_for_section_date(section.section_id, on_date)}
        roster = []
        for s in students:
            record = present.get(s.student_id)
            roster.append(
                RosterEntry(
                    student_id=s.student_id,
                    student_name=s.student_name,
                    is_present=record is not None,
                    is_manual_override=record is not None and record.qrcode_id is None,
                )
            )
        return roster
