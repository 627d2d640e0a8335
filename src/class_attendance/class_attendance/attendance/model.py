from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_date, format_timestamp
from ..core.enums import AttendanceStatus, OverrideAction, OverrideReason, RecordOrigin, ScanStatus
from ..qrcodes.model import AttendanceToken


@dataclass(frozen=True)
class PresenceRecord:
    """One stored presence row; absence is never stored.

    A non-null token reference means the row came from a scan.
    """

    record_id: int
    student_id: str
    section_id: int
    session_id: str
    qrcode_id: Optional[int]
    attended_at: datetime
    student_name: Optional[str] = None
    section_name: Optional[str] = None
    course_code: Optional[str] = None
    course_name: Optional[str] = None

    @property
    def origin(self) -> RecordOrigin:
        return RecordOrigin.AUTOMATIC if self.qrcode_id is not None else RecordOrigin.OVERRIDE

    @property
    def attended_on(self) -> date:
        return self.attended_at.date()

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "section_id": self.section_id,
            "section_name": self.section_name,
            "course_code": self.course_code,
            "course_name": self.course_name,
            "session_id": self.session_id,
            "qrcode_id": self.qrcode_id,
            "origin": self.origin.value,
            "attended_at": format_timestamp(self.attended_at),
        }


@dataclass(frozen=True)
class ScanResult:
    status: ScanStatus
    token: AttendanceToken
    record: Optional[PresenceRecord] = None

    @property
    def created(self) -> bool:
        return self.status == ScanStatus.RECORDED


@dataclass(frozen=True)
class OverrideResult:
    applied: bool
    reason: OverrideReason
    action: OverrideAction = OverrideAction.NONE
    record_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "reason": self.reason.value,
            "action": self.action.value,
            "record_id": self.record_id,
        }


@dataclass(frozen=True)
class HistoryEntry:
    """Derived status of one student for one session day of one section."""

    course_code: str
    course_name: Optional[str]
    section_id: int
    section_name: str
    on_date: date
    status: AttendanceStatus
    attended_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "course_code": self.course_code,
            "course_name": self.course_name,
            "section_id": self.section_id,
            "section_name": self.section_name,
            "date": format_date(self.on_date),
            "status": self.status.value,
            "attended_at": format_timestamp(self.attended_at),
        }


@dataclass(frozen=True)
class RosterEntry:
    student_id: str
    student_name: str
    is_present: bool
    is_manual_override: bool

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "student_name": self.student_name,
            "is_present": self.is_present,
            "is_manual_override": self.is_manual_override,
        }
