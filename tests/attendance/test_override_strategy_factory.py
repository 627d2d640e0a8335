from datetime import datetime

import pytest

from src.class_attendance.class_attendance.attendance.factory import OverrideStrategyFactory
from src.class_attendance.class_attendance.attendance.model import PresenceRecord
from src.class_attendance.class_attendance.attendance.strategies.mark_absent_strategy import MarkAbsentStrategy
from src.class_attendance.class_attendance.attendance.strategies.mark_present_strategy import MarkPresentStrategy
from src.class_attendance.class_attendance.core.enums import OverrideAction, OverrideReason
from src.class_attendance.class_attendance.core.exceptions import CannotOverrideScanned


def _record(qrcode_id):
    return PresenceRecord(
        record_id=1,
        student_id="S1",
        section_id=1,
        session_id="sess",
        qrcode_id=qrcode_id,
        attended_at=datetime(2025, 1, 1, 12, 0),
    )


def test_factory_picks_strategy_by_requested_state():
    factory = OverrideStrategyFactory()

    assert isinstance(factory.for_presence(True), MarkPresentStrategy)
    assert isinstance(factory.for_presence(False), MarkAbsentStrategy)


def test_mark_present_decisions():
    strategy = MarkPresentStrategy()

    assert strategy.decide(None).action == OverrideAction.INSERT
    assert strategy.decide(_record(None)).reason == OverrideReason.ALREADY_PRESENT
    assert strategy.decide(_record(3)).action == OverrideAction.NONE


def test_mark_absent_decisions():
    strategy = MarkAbsentStrategy()

    assert strategy.decide(None).reason == OverrideReason.ALREADY_ABSENT
    assert strategy.decide(_record(None)).action == OverrideAction.DELETE
    with pytest.raises(CannotOverrideScanned):
        strategy.decide(_record(3))
