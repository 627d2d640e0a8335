from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Tuple

from ..core.exceptions import DuplicatePresenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, is_duplicate_key
from .model import PresenceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT ar.record_id, ar.student_id, ar.section_id, ar.session_id, ar.qrcode_id, ar.attended_at,
           st.name AS student_name, s.section_name, s.course_code, c.course_name
    FROM attendance_records ar
    JOIN students st ON st.student_id = ar.student_id
    JOIN sections s ON s.section_id = ar.section_id
    JOIN courses c ON c.course_code = s.course_code
"""


def _to_record(r: dict) -> PresenceRecord:
    qrcode_id = r.get("qrcode_id")
    return PresenceRecord(
        record_id=int(r["record_id"]),
        student_id=str(r["student_id"]),
        section_id=int(r["section_id"]),
        session_id=str(r["session_id"]),
        qrcode_id=int(qrcode_id) if qrcode_id is not None else None,
        attended_at=r["attended_at"],
        student_name=r.get("student_name"),
        section_name=r.get("section_name"),
        course_code=r.get("course_code"),
        course_name=r.get("course_name"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ar.record_id=%s", (record_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_for_student_session(self, student_id: str, session_id: str) -> Optional[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ar.student_id=%s AND ar.session_id=%s", (student_id, session_id))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_for_section_student_date(self, section_id: int, student_id: str, on_date: date) -> Optional[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE ar.section_id=%s AND ar.student_id=%s AND DATE(ar.attended_at)=%s"
                " ORDER BY ar.attended_at LIMIT 1",
                (section_id, student_id, on_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_session_id_for_section_date(self, section_id: int, on_date: date) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id FROM attendance_records
                WHERE section_id=%s AND DATE(attended_at)=%s
                ORDER BY attended_at
                LIMIT 1
                """,
                (section_id, on_date),
            )
            r = fetchone(cur)
            return str(r["session_id"]) if r else None

    def insert(
        self,
        *,
        student_id: str,
        section_id: int,
        session_id: str,
        qrcode_id: Optional[int],
        attended_at: datetime,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records (student_id, section_id, session_id, qrcode_id, attended_at)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (student_id, section_id, session_id, qrcode_id, attended_at),
                )
                return int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicatePresenceError(
                    f"Presence already stored for student {student_id} in session {session_id}"
                ) from e
            raise

    def delete(self, record_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE record_id=%s", (record_id,))
            return cur.rowcount > 0

    def list_for_section_date(self, section_id: int, on_date: date) -> Sequence[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE ar.section_id=%s AND DATE(ar.attended_at)=%s ORDER BY ar.attended_at",
                (section_id, on_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_section(self, section_id: int) -> Sequence[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ar.section_id=%s ORDER BY ar.attended_at DESC", (section_id,))
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_student(self, student_id: str) -> Sequence[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ar.student_id=%s ORDER BY ar.attended_at DESC", (student_id,))
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_session(self, session_id: str) -> Sequence[PresenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE ar.session_id=%s ORDER BY ar.attended_at ASC", (session_id,))
            return [_to_record(r) for r in fetchall(cur)]

    def list_held_section_dates(self, section_ids: Sequence[int]) -> Sequence[Tuple[int, date]]:
        if not section_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT DISTINCT section_id, DATE(attended_at) AS session_date
                FROM attendance_records
                WHERE section_id IN ({in_clause(section_ids)})
                """,
                tuple(section_ids),
            )
            return [(int(r["section_id"]), r["session_date"]) for r in fetchall(cur)]

    def list_student_records_in_sections(self, student_id: str, section_ids: Sequence[int]) -> Sequence[PresenceRecord]:
        if not section_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE ar.student_id=%s AND ar.section_id IN ({in_clause(section_ids)})"
                " ORDER BY ar.attended_at",
                (student_id, *section_ids),
            )
            return [_to_record(r) for r in fetchall(cur)]
