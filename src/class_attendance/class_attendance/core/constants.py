"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

QR_DEFAULT_VALIDITY_MINUTES = 10
# Added on top of the requested validity to absorb scan/network latency.
QR_NETWORK_BUFFER_SECONDS = 3

# Manual "mark present" rows are stamped at midday of the target date.
MANUAL_ATTENDANCE_TIME = time(12, 0, 0)

AT_RISK_RATIO_THRESHOLD = 0.8
LOW_ATTENDANCE_PERCENT = 70.0

DEFAULT_JWT_EXPIRES_MINUTES = 60
DEFAULT_RECENT_LIMIT = 5
DEFAULT_LOWEST_COURSES_LIMIT = 5
DEFAULT_OVERVIEW_DAYS = 7

SECTION_ROOM_PREFIX = "section_"
ATTENDANCE_UPDATE_EVENT = "attendance_update"

AUDIT_LOG_TYPES = ("students", "lecturers", "courses", "sections")
AUDIT_LOG_LIMIT = 20
