from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import format_timestamp


@dataclass(frozen=True)
class AttendanceToken:
    """Short-lived QR payload bound to one course and one class session."""

    qrcode_id: int
    qr_string: str
    course_code: str
    session_id: str
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        # Valid up to and including expires_at.
        return now > self.expires_at

    def to_dict(self) -> dict:
        return {
            "qrcode_id": self.qrcode_id,
            "qr_string": self.qr_string,
            "course_code": self.course_code,
            "session_id": self.session_id,
            "created_at": format_timestamp(self.created_at),
            "expires_at": format_timestamp(self.expires_at),
        }
