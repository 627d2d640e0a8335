from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Sequence, Tuple

from ..core.enums import Action, AttendanceStatus
from ..core.exceptions import StudentNotFound
from ..courses.repository import EnrollmentRepository
from ..users.model import Actor
from ..users.policy import AccessPolicy
from ..users.repository import StudentRepository
from .model import HistoryEntry
from .repository import AttendanceRepository


class HistoryReconciler:
    """Derives Present/Absent per session day from presence rows only.

    A section "held" a session on a date when any enrolled student has a
    presence row that day. Days nobody attended are invisible.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        enrollments: EnrollmentRepository,
        students: StudentRepository,
        policy: AccessPolicy,
    ):
        self._attendance = attendance
        self._enrollments = enrollments
        self._students = students
        self._policy = policy

    def student_history(self, student_id: str) -> List[HistoryEntry]:
        sections = {s.section_id: s for s in self._enrollments.list_sections_for_student(str(student_id))}
        if not sections:
            return []

        section_ids = list(sections)
        held = self._attendance.list_held_section_dates(section_ids)

        attended: Dict[Tuple[int, date], datetime] = {}
        for record in self._attendance.list_student_records_in_sections(str(student_id), section_ids):
            attended.setdefault((record.section_id, record.attended_on), record.attended_at)

        history = []
        for section_id, on_date in held:
            section = sections.get(section_id)
            if section is None:
                continue
            attended_at = attended.get((section_id, on_date))
            history.append(
                HistoryEntry(
                    course_code=section.course_code,
                    course_name=section.course_name,
                    section_id=section_id,
                    section_name=section.section_name,
                    on_date=on_date,
                    status=AttendanceStatus.PRESENT if attended_at else AttendanceStatus.ABSENT,
                    attended_at=attended_at,
                )
            )

        history.sort(key=lambda h: (h.course_code, h.section_name))
        history.sort(key=lambda h: h.on_date, reverse=True)
        return history

    def history_for(self, actor: Actor, student_id: str) -> List[HistoryEntry]:
        self._policy.require(actor, Action.VIEW_STUDENT_HISTORY, student_id)
        if not self._students.get_by_id(str(student_id)):
            raise StudentNotFound("Student not found")
        return self.student_history(student_id)

    @staticmethod
    def summarize(history: Sequence[HistoryEntry]) -> dict:
        total = len(history)
        present = sum(1 for h in history if h.status == AttendanceStatus.PRESENT)
        percentage = (present / total) * 100 if total else 0.0
        return {
            "total": total,
            "present": present,
            "absent": total - present,
            "percentage": percentage,
        }
