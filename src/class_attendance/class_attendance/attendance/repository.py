from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from .model import PresenceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, record_id: int) -> Optional[PresenceRecord]:
        raise NotImplementedError

    def find_for_student_session(self, student_id: str, session_id: str) -> Optional[PresenceRecord]:
        raise NotImplementedError

    def find_for_section_student_date(self, section_id: int, student_id: str, on_date: date) -> Optional[PresenceRecord]:
        raise NotImplementedError

    def find_session_id_for_section_date(self, section_id: int, on_date: date) -> Optional[str]:
        raise NotImplementedError

    def insert(
        self,
        *,
        student_id: str,
        section_id: int,
        session_id: str,
        qrcode_id: Optional[int],
        attended_at: datetime,
    ) -> int:
        """Insert a presence row.

        Raises DuplicatePresenceError when (student_id, session_id) already exists.
        """

        raise NotImplementedError

    def delete(self, record_id: int) -> bool:
        raise NotImplementedError

    def list_for_section_date(self, section_id: int, on_date: date) -> Sequence[PresenceRecord]:
        raise NotImplementedError

    def list_by_section(self, section_id: int) -> Sequence[PresenceRecord]:
        raise NotImplementedError

    def list_by_student(self, student_id: str) -> Sequence[PresenceRecord]:
        raise NotImplementedError

    def list_by_session(self, session_id: str) -> Sequence[PresenceRecord]:
        raise NotImplementedError

    def list_held_section_dates(self, section_ids: Sequence[int]) -> Sequence[Tuple[int, date]]:
        """Distinct (section, calendar date) pairs with any presence row."""

        raise NotImplementedError

    def list_student_records_in_sections(self, student_id: str, section_ids: Sequence[int]) -> Sequence[PresenceRecord]:
        raise NotImplementedError
