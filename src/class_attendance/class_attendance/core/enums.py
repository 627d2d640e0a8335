from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in access tokens."""

    STUDENT = "student"
    LECTURER = "lecturer"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    """Derived per-session status; only presence is ever stored."""

    PRESENT = "Present"
    ABSENT = "Absent"


class RecordOrigin(str, Enum):
    AUTOMATIC = "automatic"
    OVERRIDE = "override"


class ScanStatus(str, Enum):
    RECORDED = "RECORDED"
    ALREADY_RECORDED = "ALREADY_RECORDED"


class OverrideAction(str, Enum):
    INSERT = "INSERT"
    DELETE = "DELETE"
    NONE = "NONE"


class OverrideReason(str, Enum):
    MARKED_PRESENT = "MARKED_PRESENT"
    ALREADY_PRESENT = "ALREADY_PRESENT"
    ALREADY_ABSENT = "ALREADY_ABSENT"
    MARKED_ABSENT = "MARKED_ABSENT"


class Action(str, Enum):
    """Capabilities checked by the access policy."""

    ISSUE_TOKEN = "issue_token"
    VIEW_TOKEN = "view_token"
    INVALIDATE_TOKEN = "invalidate_token"
    RECORD_SCAN = "record_scan"
    OVERRIDE_PRESENCE = "override_presence"
    VIEW_SECTION_ATTENDANCE = "view_section_attendance"
    MANAGE_ENROLLMENT = "manage_enrollment"
    MANAGE_SECTION = "manage_section"
    VIEW_STUDENT_HISTORY = "view_student_history"
    VIEW_LECTURER_REPORTS = "view_lecturer_reports"
    VIEW_SESSION_ATTENDANCE = "view_session_attendance"
    VIEW_COURSE_ROSTER = "view_course_roster"
    MANAGE_CATALOG = "manage_catalog"
    VIEW_ADMIN_REPORTS = "view_admin_reports"
    RUN_ATTENDANCE_CHECK = "run_attendance_check"
