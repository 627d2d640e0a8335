from __future__ import annotations

import logging

from ..attendance.history_service import HistoryReconciler
from ..core.constants import LOW_ATTENDANCE_PERCENT
from ..core.enums import Role
from ..users.repository import StudentRepository
from .model import CheckSummary
from .push_service import PushService

logger = logging.getLogger(__name__)


class LowAttendanceChecker:
    """Daily batch: warn every student whose history percentage is below 70%."""

    def __init__(
        self,
        students: StudentRepository,
        history: HistoryReconciler,
        push: PushService,
        *,
        threshold: float = LOW_ATTENDANCE_PERCENT,
    ):
        self._students = students
        self._history = history
        self._push = push
        self._threshold = float(threshold)

    def run_daily_check(self) -> CheckSummary:
        logger.info("Running daily attendance check")
        checked = notified = skipped = failed = 0

        for student in self._students.list_all():
            checked += 1
            try:
                history = self._history.student_history(student.student_id)
                if not history:
                    skipped += 1
                    continue

                percentage = HistoryReconciler.summarize(history)["percentage"]
                if percentage >= self._threshold:
                    continue

                logger.info("Student %s has low attendance (%.1f%%)", student.student_id, percentage)
                self._push.send_to_user(
                    student.student_id,
                    Role.STUDENT.value,
                    {
                        "title": "Attendance Warning",
                        "body": (
                            f"Your attendance has dropped to {percentage:.1f}%. "
                            "Please ensure you attend future classes."
                        ),
                    },
                )
                notified += 1
            except Exception:
                failed += 1
                logger.exception("Attendance check failed for student %s", student.student_id)

        summary = CheckSummary(checked=checked, notified=notified, skipped=skipped, failed=failed)
        logger.info("Daily attendance check completed: %s", summary.to_dict())
        return summary
