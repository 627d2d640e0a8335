from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Section
from .repository import SectionRepository

_SELECT = """
    SELECT s.section_id, s.section_name, s.course_code, c.course_name,
           s.lecturer_id, l.name AS lecturer_name
    FROM sections s
    JOIN courses c ON c.course_code = s.course_code
    JOIN lecturers l ON l.lecturer_id = s.lecturer_id
"""

_UPDATABLE = ("section_name", "course_code", "lecturer_id")


def _to_section(r: dict) -> Section:
    count = r.get("student_count")
    return Section(
        section_id=int(r["section_id"]),
        section_name=str(r["section_name"]),
        course_code=str(r["course_code"]),
        lecturer_id=int(r["lecturer_id"]),
        course_name=r.get("course_name"),
        lecturer_name=r.get("lecturer_name"),
        student_count=int(count) if count is not None else None,
    )


class MySQLSectionRepository(SectionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Section]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " ORDER BY s.course_code, s.section_name")
            return [_to_section(r) for r in fetchall(cur)]

    def get_by_id(self, section_id: int) -> Optional[Section]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.section_id=%s", (section_id,))
            r = fetchone(cur)
            return _to_section(r) if r else None

    def list_by_course(self, course_code: str) -> Sequence[Section]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.course_code=%s ORDER BY s.section_name", (course_code,))
            return [_to_section(r) for r in fetchall(cur)]

    def list_by_lecturer(self, lecturer_id: int) -> Sequence[Section]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.section_id, s.section_name, s.course_code, c.course_name,
                       s.lecturer_id, l.name AS lecturer_name,
                       (SELECT COUNT(*) FROM sections_students ss
                        WHERE ss.section_id = s.section_id) AS student_count
                FROM sections s
                JOIN courses c ON c.course_code = s.course_code
                JOIN lecturers l ON l.lecturer_id = s.lecturer_id
                WHERE s.lecturer_id=%s
                ORDER BY s.course_code, s.section_name
                """,
                (lecturer_id,),
            )
            return [_to_section(r) for r in fetchall(cur)]

    def lecturer_teaches_course(self, lecturer_id: int, course_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 FROM sections WHERE lecturer_id=%s AND course_code=%s LIMIT 1",
                (lecturer_id, course_code),
            )
            return fetchone(cur) is not None

    def create(self, *, section_name: str, course_code: str, lecturer_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO sections (section_name, course_code, lecturer_id) VALUES (%s, %s, %s)",
                (section_name, course_code, lecturer_id),
            )
            return int(cur.lastrowid)

    def update(self, section_id: int, fields: dict) -> bool:
        cols = [c for c in _UPDATABLE if c in fields]
        if not cols:
            return False
        assignments = ", ".join(f"{c}=%s" for c in cols)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE sections SET {assignments} WHERE section_id=%s",
                tuple(fields[c] for c in cols) + (section_id,),
            )
            return cur.rowcount > 0

    def delete(self, section_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sections WHERE section_id=%s", (section_id,))
            return cur.rowcount > 0
