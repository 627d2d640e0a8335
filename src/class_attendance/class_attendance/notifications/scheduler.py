from __future__ import annotations

import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler

from .checker import LowAttendanceChecker

logger = logging.getLogger(__name__)

DAILY_CHECK_JOB_ID = "daily_attendance_check"


def start_daily_check(checker: LowAttendanceChecker, *, hour: int, timezone: str) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=timezone)
    scheduler.add_job(
        func=checker.run_daily_check,
        trigger="cron",
        hour=int(hour),
        minute=0,
        id=DAILY_CHECK_JOB_ID,
        name="Low attendance push warnings",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Daily attendance check scheduled at %02d:00 (%s)", int(hour), timezone)

    atexit.register(lambda: scheduler.shutdown(wait=False))
    return scheduler
