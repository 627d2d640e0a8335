from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import EnrolledStudent, Section
from .repository import EnrollmentRepository


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_enrolled(self, section_id: int, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 FROM sections_students WHERE section_id=%s AND student_id=%s",
                (section_id, student_id),
            )
            return fetchone(cur) is not None

    def list_students(self, section_id: int) -> Sequence[EnrolledStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT st.student_id, st.name AS student_name, st.email
                FROM sections_students ss
                JOIN students st ON st.student_id = ss.student_id
                WHERE ss.section_id=%s
                ORDER BY st.name
                """,
                (section_id,),
            )
            return [
                EnrolledStudent(student_id=str(r["student_id"]), student_name=r["student_name"], email=r["email"])
                for r in fetchall(cur)
            ]

    def list_students_by_course(self, course_code: str) -> Sequence[EnrolledStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT st.student_id, st.name AS student_name, st.email,
                       s.section_id, s.section_name
                FROM sections_students ss
                JOIN students st ON st.student_id = ss.student_id
                JOIN sections s ON s.section_id = ss.section_id
                WHERE s.course_code=%s
                ORDER BY s.section_name, st.name
                """,
                (course_code,),
            )
            return [
                EnrolledStudent(
                    student_id=str(r["student_id"]),
                    student_name=r["student_name"],
                    email=r["email"],
                    section_id=int(r["section_id"]),
                    section_name=r["section_name"],
                )
                for r in fetchall(cur)
            ]

    def list_sections_for_student(self, student_id: str) -> Sequence[Section]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.section_id, s.section_name, s.course_code, c.course_name,
                       s.lecturer_id, l.name AS lecturer_name
                FROM sections_students ss
                JOIN sections s ON s.section_id = ss.section_id
                JOIN courses c ON c.course_code = s.course_code
                JOIN lecturers l ON l.lecturer_id = s.lecturer_id
                WHERE ss.student_id=%s
                ORDER BY s.course_code, s.section_name
                """,
                (student_id,),
            )
            return [
                Section(
                    section_id=int(r["section_id"]),
                    section_name=r["section_name"],
                    course_code=r["course_code"],
                    lecturer_id=int(r["lecturer_id"]),
                    course_name=r["course_name"],
                    lecturer_name=r["lecturer_name"],
                )
                for r in fetchall(cur)
            ]

    def add(self, section_id: int, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT IGNORE INTO sections_students (section_id, student_id) VALUES (%s, %s)",
                (section_id, student_id),
            )
            return cur.rowcount > 0

    def add_many(self, section_id: int, student_ids: Sequence[str]) -> int:
        if not student_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT IGNORE INTO sections_students (section_id, student_id) VALUES (%s, %s)",
                [(section_id, sid) for sid in student_ids],
            )
            return max(int(cur.rowcount), 0)

    def remove(self, section_id: int, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM sections_students WHERE section_id=%s AND student_id=%s",
                (section_id, student_id),
            )
            return cur.rowcount > 0

    def remove_many(self, section_id: int, student_ids: Sequence[str]) -> int:
        if not student_ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM sections_students WHERE section_id=%s AND student_id IN ({in_clause(student_ids)})",
                (section_id, *student_ids),
            )
            return int(cur.rowcount)
