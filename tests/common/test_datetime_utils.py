from datetime import date, datetime, timedelta, timezone

import pytest
import pytz

from src.class_attendance.class_attendance.common import datetime_utils
from src.class_attendance.class_attendance.common.datetime_utils import (
    now_local,
    parse_optional_date,
    set_app_timezone,
)
from src.class_attendance.class_attendance.core.exceptions import ValidationError


@pytest.fixture
def app_timezone():
    yield set_app_timezone
    set_app_timezone(None)


def test_parse_optional_date_accepts_plain_dates_and_blanks():
    assert parse_optional_date("2024-01-10", "date") == date(2024, 1, 10)
    assert parse_optional_date(" 2024-01-10 ", "date") == date(2024, 1, 10)
    assert parse_optional_date(None, "date") is None
    assert parse_optional_date("  ", "date") is None


@pytest.mark.parametrize("value", ["2024-01-10garbage", "2024-01-10T09:00:00", "2024-13-01", "10/01/2024"])
def test_parse_optional_date_rejects_anything_but_a_date(value):
    with pytest.raises(ValidationError, match="start_date"):
        parse_optional_date(value, "start_date")


def test_now_local_follows_the_configured_zone(app_timezone):
    app_timezone("UTC")

    utc_now = datetime.now(timezone.utc).replace(tzinfo=None)
    assert now_local().tzinfo is None
    assert abs(now_local() - utc_now) < timedelta(seconds=5)

    app_timezone("Asia/Kuala_Lumpur")
    assert abs(now_local() - (utc_now + timedelta(hours=8))) < timedelta(seconds=5)


def test_blank_zone_means_host_local_time(app_timezone):
    app_timezone("")

    assert datetime_utils._app_timezone is None
    assert abs(now_local() - datetime.now()) < timedelta(seconds=5)


def test_unknown_zone_is_rejected(app_timezone):
    with pytest.raises(pytz.UnknownTimeZoneError):
        app_timezone("Mars/Olympus_Mons")
