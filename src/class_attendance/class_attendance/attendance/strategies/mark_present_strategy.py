from __future__ import annotations

from typing import Optional

from ...core.enums import OverrideAction, OverrideReason
from ..model import PresenceRecord
from .base import OverrideDecision, OverrideStrategy


class MarkPresentStrategy(OverrideStrategy):
    """Fill a gap; an existing row of either origin is left alone."""

    def decide(self, existing: Optional[PresenceRecord]) -> OverrideDecision:
        if existing:
            return OverrideDecision(action=OverrideAction.NONE, reason=OverrideReason.ALREADY_PRESENT)
        return OverrideDecision(action=OverrideAction.INSERT, reason=OverrideReason.MARKED_PRESENT)
