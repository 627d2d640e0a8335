"""In-memory repositories shared by the service tests."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Tuple

from src.class_attendance.class_attendance.attendance.model import PresenceRecord
from src.class_attendance.class_attendance.core.exceptions import DuplicatePresenceError
from src.class_attendance.class_attendance.courses.model import EnrolledStudent, Section
from src.class_attendance.class_attendance.qrcodes.model import AttendanceToken
from src.class_attendance.class_attendance.users.model import Student


class InMemoryQrCodes:
    def __init__(self):
        self.tokens: Dict[int, AttendanceToken] = {}
        self._id = 0

    def create(self, *, qr_string, course_code, session_id, created_at, expires_at) -> int:
        self._id += 1
        self.tokens[self._id] = AttendanceToken(
            qrcode_id=self._id,
            qr_string=qr_string,
            course_code=course_code,
            session_id=session_id,
            created_at=created_at,
            expires_at=expires_at,
        )
        return self._id

    def get_by_id(self, qrcode_id: int) -> Optional[AttendanceToken]:
        return self.tokens.get(qrcode_id)

    def get_by_string(self, qr_string: str) -> Optional[AttendanceToken]:
        return next((t for t in self.tokens.values() if t.qr_string == qr_string), None)

    def delete(self, qrcode_id: int) -> bool:
        return self.tokens.pop(qrcode_id, None) is not None


class InMemorySections:
    def __init__(self, sections: Sequence[Section] = ()):
        self.sections: Dict[int, Section] = {s.section_id: s for s in sections}

    def get_by_id(self, section_id: int) -> Optional[Section]:
        return self.sections.get(section_id)

    def list_by_lecturer(self, lecturer_id: int) -> List[Section]:
        return [s for s in self.sections.values() if s.lecturer_id == lecturer_id]

    def lecturer_teaches_course(self, lecturer_id: int, course_code: str) -> bool:
        return any(s.lecturer_id == lecturer_id and s.course_code == course_code for s in self.sections.values())


class InMemoryEnrollments:
    def __init__(self, sections: InMemorySections, students: Sequence[Student] = ()):
        self._sections = sections
        self._students = {s.student_id: s for s in students}
        self.pairs: set[Tuple[int, str]] = set()

    def enroll(self, section_id: int, *student_ids: str) -> None:
        for sid in student_ids:
            self.pairs.add((section_id, sid))

    def is_enrolled(self, section_id: int, student_id: str) -> bool:
        return (section_id, student_id) in self.pairs

    def list_students(self, section_id: int) -> List[EnrolledStudent]:
        ids = sorted(sid for sec, sid in self.pairs if sec == section_id)
        return [
            EnrolledStudent(student_id=sid, student_name=self._students[sid].name if sid in self._students else sid)
            for sid in ids
        ]

    def list_sections_for_student(self, student_id: str) -> List[Section]:
        return [self._sections.sections[sec] for sec, sid in sorted(self.pairs) if sid == student_id]


class InMemoryStudents:
    def __init__(self, students: Sequence[Student] = (), enrollments: Optional[InMemoryEnrollments] = None):
        self.students: Dict[str, Student] = {s.student_id: s for s in students}
        self._enrollments = enrollments

    def list_all(self) -> List[Student]:
        return list(self.students.values())

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self.students.get(student_id)

    def get_by_email(self, email: str) -> Optional[Student]:
        return next((s for s in self.students.values() if s.email == email), None)

    def is_enrolled_in_course(self, student_id: str, course_code: str) -> bool:
        if self._enrollments is None:
            return False
        return any(
            sid == student_id and self._enrollments._sections.sections[sec].course_code == course_code
            for sec, sid in self._enrollments.pairs
        )


class InMemoryAttendance:
    def __init__(self):
        self.records: Dict[int, PresenceRecord] = {}
        self._id = 0

    def get_by_id(self, record_id: int) -> Optional[PresenceRecord]:
        return self.records.get(record_id)

    def find_for_student_session(self, student_id: str, session_id: str) -> Optional[PresenceRecord]:
        return next(
            (r for r in self.records.values() if r.student_id == student_id and r.session_id == session_id),
            None,
        )

    def find_for_section_student_date(self, section_id: int, student_id: str, on_date: date) -> Optional[PresenceRecord]:
        return next(
            (
                r
                for r in self.records.values()
                if r.section_id == section_id and r.student_id == student_id and r.attended_on == on_date
            ),
            None,
        )

    def find_session_id_for_section_date(self, section_id: int, on_date: date) -> Optional[str]:
        for r in sorted(self.records.values(), key=lambda r: r.attended_at):
            if r.section_id == section_id and r.attended_on == on_date:
                return r.session_id
        return None

    def insert(self, *, student_id, section_id, session_id, qrcode_id, attended_at: datetime) -> int:
        if self.find_for_student_session(student_id, session_id):
            raise DuplicatePresenceError("duplicate")
        self._id += 1
        self.records[self._id] = PresenceRecord(
            record_id=self._id,
            student_id=student_id,
            section_id=section_id,
            session_id=session_id,
            qrcode_id=qrcode_id,
            attended_at=attended_at,
        )
        return self._id

    def delete(self, record_id: int) -> bool:
        return self.records.pop(record_id, None) is not None

    def list_for_section_date(self, section_id: int, on_date: date) -> List[PresenceRecord]:
        return [r for r in self.records.values() if r.section_id == section_id and r.attended_on == on_date]

    def list_by_section(self, section_id: int) -> List[PresenceRecord]:
        return sorted(
            (r for r in self.records.values() if r.section_id == section_id),
            key=lambda r: r.attended_at,
            reverse=True,
        )

    def list_by_student(self, student_id: str) -> List[PresenceRecord]:
        return [r for r in self.records.values() if r.student_id == student_id]

    def list_by_session(self, session_id: str) -> List[PresenceRecord]:
        return sorted((r for r in self.records.values() if r.session_id == session_id), key=lambda r: r.attended_at)

    def list_held_section_dates(self, section_ids: Sequence[int]) -> List[Tuple[int, date]]:
        return sorted({(r.section_id, r.attended_on) for r in self.records.values() if r.section_id in section_ids})

    def list_student_records_in_sections(self, student_id: str, section_ids: Sequence[int]) -> List[PresenceRecord]:
        return [r for r in self.records.values() if r.student_id == student_id and r.section_id in section_ids]


class RecordingBroadcaster:
    def __init__(self, fail: bool = False):
        self.events: List[Tuple[int, str, dict]] = []
        self._fail = fail

    def emit_to_section(self, section_id: int, event: str, payload: dict) -> None:
        if self._fail:
            raise RuntimeError("socket down")
        self.events.append((section_id, event, payload))
