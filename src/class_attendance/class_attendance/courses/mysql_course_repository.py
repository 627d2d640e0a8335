from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Course
from .repository import CourseRepository


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT course_code, course_name FROM courses ORDER BY course_code")
            return [Course(course_code=r["course_code"], course_name=r["course_name"]) for r in fetchall(cur)]

    def get_by_code(self, course_code: str) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT course_code, course_name FROM courses WHERE course_code=%s", (course_code,))
            r = fetchone(cur)
            return Course(course_code=r["course_code"], course_name=r["course_name"]) if r else None

    def create(self, *, course_code: str, course_name: str) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO courses (course_code, course_name) VALUES (%s, %s)",
                    (course_code, course_name),
                )
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError(f"Course {course_code} already exists")
            raise

    def update_name(self, course_code: str, course_name: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE courses SET course_name=%s WHERE course_code=%s", (course_name, course_code))
            return cur.rowcount > 0

    def delete(self, course_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM courses WHERE course_code=%s", (course_code,))
            return cur.rowcount > 0
