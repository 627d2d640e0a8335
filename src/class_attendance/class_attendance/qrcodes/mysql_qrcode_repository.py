from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AttendanceToken
from .repository import QrCodeRepository

_COLUMNS = "qrcode_id, qr_string, course_code, session_id, created_at, expires_at"


def _to_token(r: dict) -> AttendanceToken:
    return AttendanceToken(
        qrcode_id=int(r["qrcode_id"]),
        qr_string=str(r["qr_string"]),
        course_code=str(r["course_code"]),
        session_id=str(r["session_id"]),
        created_at=r["created_at"],
        expires_at=r["expires_at"],
    )


class MySQLQrCodeRepository(QrCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        qr_string: str,
        course_code: str,
        session_id: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO qrcodes (qr_string, course_code, session_id, created_at, expires_at)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (qr_string, course_code, session_id, created_at, expires_at),
            )
            return int(cur.lastrowid)

    def get_by_id(self, qrcode_id: int) -> Optional[AttendanceToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM qrcodes WHERE qrcode_id=%s", (qrcode_id,))
            r = fetchone(cur)
            return _to_token(r) if r else None

    def get_by_string(self, qr_string: str) -> Optional[AttendanceToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM qrcodes WHERE qr_string=%s", (qr_string,))
            r = fetchone(cur)
            return _to_token(r) if r else None

    def delete(self, qrcode_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM qrcodes WHERE qrcode_id=%s", (qrcode_id,))
            return cur.rowcount > 0
