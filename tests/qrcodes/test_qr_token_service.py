from datetime import timedelta

import pytest

from src.class_attendance.class_attendance.core.exceptions import TokenExpired, TokenNotFound, ValidationError
from src.class_attendance.class_attendance.qrcodes.service import QrTokenService
from tests.fakes import InMemoryQrCodes


def test_issue_adds_network_buffer_to_validity(fixed_now):
    svc = QrTokenService(InMemoryQrCodes())

    token = svc.issue("CS101", validity_minutes=10, now=fixed_now)

    assert token.course_code == "CS101"
    assert token.created_at == fixed_now
    assert token.expires_at == fixed_now + timedelta(minutes=10, seconds=3)


def test_issue_generates_fresh_session_unless_one_is_given(fixed_now):
    svc = QrTokenService(InMemoryQrCodes())

    first = svc.issue("CS101", now=fixed_now)
    second = svc.issue("CS101", now=fixed_now)
    reissued = svc.issue("CS101", existing_session_id=first.session_id, now=fixed_now)

    assert first.session_id != second.session_id
    assert first.qr_string != reissued.qr_string
    assert reissued.session_id == first.session_id


def test_issue_rejects_bad_input(fixed_now):
    svc = QrTokenService(InMemoryQrCodes())

    with pytest.raises(ValidationError):
        svc.issue("  ", now=fixed_now)
    with pytest.raises(ValidationError):
        svc.issue("CS101", validity_minutes=0, now=fixed_now)


def test_validate_accepts_up_to_and_including_expiry(fixed_now):
    svc = QrTokenService(InMemoryQrCodes())
    token = svc.issue("CS101", validity_minutes=1, now=fixed_now)

    assert svc.validate(token.qr_string, token.expires_at).qrcode_id == token.qrcode_id

    with pytest.raises(TokenExpired) as exc:
        svc.validate(token.qr_string, token.expires_at + timedelta(milliseconds=1))
    assert exc.value.token == token


def test_validate_unknown_string(fixed_now):
    svc = QrTokenService(InMemoryQrCodes())

    with pytest.raises(TokenNotFound):
        svc.validate("not-a-token", fixed_now)


def test_invalidate_removes_token(fixed_now):
    repo = InMemoryQrCodes()
    svc = QrTokenService(repo)
    token = svc.issue("CS101", now=fixed_now)

    svc.invalidate(token.qrcode_id)

    with pytest.raises(TokenNotFound):
        svc.get(token.qrcode_id)
    with pytest.raises(TokenNotFound):
        svc.invalidate(token.qrcode_id)
