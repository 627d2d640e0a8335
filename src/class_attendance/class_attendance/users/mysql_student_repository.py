from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Student
from .repository import StudentRepository

_UPDATABLE = ("name", "email", "password_hash")


def _to_student(r: dict) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        name=str(r["name"]),
        email=str(r["email"]),
        password_hash=str(r.get("password_hash") or ""),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_id, name, email FROM students ORDER BY student_id")
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, name, email, password_hash FROM students WHERE student_id=%s",
                (student_id,),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_email(self, email: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id, name, email, password_hash FROM students WHERE email=%s",
                (email,),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None

    def create(self, *, student_id: str, name: str, email: str, password_hash: str) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO students (student_id, name, email, password_hash) VALUES (%s, %s, %s, %s)",
                    (student_id, name, email, password_hash),
                )
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError("Student ID or email already exists")
            raise

    def update(self, student_id: str, fields: dict) -> bool:
        cols = [c for c in _UPDATABLE if c in fields]
        if not cols:
            return False
        assignments = ", ".join(f"{c}=%s" for c in cols)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE students SET {assignments} WHERE student_id=%s",
                    tuple(fields[c] for c in cols) + (student_id,),
                )
                return cur.rowcount > 0
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError("Email already exists")
            raise

    def delete(self, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0

    def is_enrolled_in_course(self, student_id: str, course_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1
                FROM sections_students ss
                JOIN sections s ON s.section_id = ss.section_id
                WHERE ss.student_id=%s AND s.course_code=%s
                LIMIT 1
                """,
                (student_id, course_code),
            )
            return fetchone(cur) is not None
