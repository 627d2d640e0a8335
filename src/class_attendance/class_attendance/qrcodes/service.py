from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive_int
from ..core.constants import QR_DEFAULT_VALIDITY_MINUTES, QR_NETWORK_BUFFER_SECONDS
from ..core.exceptions import TokenExpired, TokenNotFound
from .model import AttendanceToken
from .repository import QrCodeRepository

logger = logging.getLogger(__name__)


class QrTokenService:
    """Issues and validates session-scoped attendance tokens.

    Course existence is left to the storage foreign key.
    """

    def __init__(self, qrcodes_repo: QrCodeRepository):
        self._qrcodes = qrcodes_repo

    def issue(
        self,
        course_code: str,
        validity_minutes: int = QR_DEFAULT_VALIDITY_MINUTES,
        existing_session_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceToken:
        course_code = require_non_empty(course_code, "course_code")
        validity_minutes = require_positive_int(validity_minutes, "validity_minutes")
        now = now or now_local()

        qr_string = str(uuid.uuid4())
        session_id = (existing_session_id or "").strip() or str(uuid.uuid4())
        expires_at = now + timedelta(seconds=validity_minutes * 60 + QR_NETWORK_BUFFER_SECONDS)

        qrcode_id = self._qrcodes.create(
            qr_string=qr_string,
            course_code=course_code,
            session_id=session_id,
            created_at=now,
            expires_at=expires_at,
        )
        logger.info(
            "Issued QR token id=%s course=%s session=%s expires_at=%s",
            qrcode_id, course_code, session_id, expires_at.isoformat(),
        )
        return AttendanceToken(
            qrcode_id=qrcode_id,
            qr_string=qr_string,
            course_code=course_code,
            session_id=session_id,
            created_at=now,
            expires_at=expires_at,
        )

    def get(self, qrcode_id: int) -> AttendanceToken:
        token = self._qrcodes.get_by_id(int(qrcode_id))
        if not token:
            raise TokenNotFound("QR code not found")
        return token

    def invalidate(self, qrcode_id: int) -> None:
        if not self._qrcodes.delete(int(qrcode_id)):
            raise TokenNotFound("QR code not found")
        logger.info("Invalidated QR token id=%s", qrcode_id)

    def validate(self, qr_string: str, now: Optional[datetime] = None) -> AttendanceToken:
        qr_string = require_non_empty(qr_string, "qr_code_string")
        token = self._qrcodes.get_by_string(qr_string)
        if not token:
            raise TokenNotFound("Invalid QR code")
        if token.is_expired(now or now_local()):
            raise TokenExpired("QR code has expired", token=token)
        return token
