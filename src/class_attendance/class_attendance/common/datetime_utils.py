from __future__ import annotations

from datetime import date, datetime
from typing import Optional

import pytz

from ..core.exceptions import ValidationError

_app_timezone = None


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds")


def set_app_timezone(name: Optional[str]) -> None:
    """Pin now_local() to a named zone; empty means the host's local time.

    Raises pytz.UnknownTimeZoneError for an unknown name.
    """

    global _app_timezone
    _app_timezone = pytz.timezone(name) if name else None


def now_local() -> datetime:
    """Current wall-clock time in the application timezone, as a naive datetime.

    Stored timestamps are naive DATETIME columns, so the zone is dropped
    after conversion. Wrapped so tests can patch it.
    """

    if _app_timezone is None:
        return datetime.now()
    return datetime.now(_app_timezone).replace(tzinfo=None)
