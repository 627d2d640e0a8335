from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import AttendanceToken


class QrCodeRepository(Protocol):
    def create(
        self,
        *,
        qr_string: str,
        course_code: str,
        session_id: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, qrcode_id: int) -> Optional[AttendanceToken]:
        raise NotImplementedError

    def get_by_string(self, qr_string: str) -> Optional[AttendanceToken]:
        raise NotImplementedError

    def delete(self, qrcode_id: int) -> bool:
        raise NotImplementedError
