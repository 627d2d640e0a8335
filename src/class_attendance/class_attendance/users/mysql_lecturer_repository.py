from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, is_row_referenced
from .model import Lecturer
from .repository import LecturerRepository

_UPDATABLE = ("name", "email", "password_hash", "is_admin")


def _to_lecturer(r: dict) -> Lecturer:
    return Lecturer(
        lecturer_id=int(r["lecturer_id"]),
        name=str(r["name"]),
        email=str(r["email"]),
        password_hash=str(r.get("password_hash") or ""),
        is_admin=bool(r.get("is_admin")),
    )


class MySQLLecturerRepository(LecturerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Lecturer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT lecturer_id, name, email, is_admin FROM lecturers ORDER BY lecturer_id")
            return [_to_lecturer(r) for r in fetchall(cur)]

    def get_by_id(self, lecturer_id: int) -> Optional[Lecturer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT lecturer_id, name, email, password_hash, is_admin FROM lecturers WHERE lecturer_id=%s",
                (lecturer_id,),
            )
            r = fetchone(cur)
            return _to_lecturer(r) if r else None

    def get_by_email(self, email: str) -> Optional[Lecturer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT lecturer_id, name, email, password_hash, is_admin FROM lecturers WHERE email=%s",
                (email,),
            )
            r = fetchone(cur)
            return _to_lecturer(r) if r else None

    def create(self, *, name: str, email: str, password_hash: str, is_admin: bool) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO lecturers (name, email, password_hash, is_admin) VALUES (%s, %s, %s, %s)",
                    (name, email, password_hash, 1 if is_admin else 0),
                )
                return int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError("Email already exists")
            raise

    def update(self, lecturer_id: int, fields: dict) -> bool:
        cols = [c for c in _UPDATABLE if c in fields]
        if not cols:
            return False
        assignments = ", ".join(f"{c}=%s" for c in cols)
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"UPDATE lecturers SET {assignments} WHERE lecturer_id=%s",
                    tuple(fields[c] for c in cols) + (lecturer_id,),
                )
                return cur.rowcount > 0
        except Exception as e:
            if is_duplicate_key(e):
                raise ConflictError("Email already exists")
            raise

    def delete(self, lecturer_id: int) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("DELETE FROM lecturers WHERE lecturer_id=%s", (lecturer_id,))
                return cur.rowcount > 0
        except Exception as e:
            if is_row_referenced(e):
                raise ConflictError("Lecturer still teaches sections; reassign them first")
            raise
