from __future__ import annotations

from typing import Optional

from ...core.enums import OverrideAction, OverrideReason, RecordOrigin
from ...core.exceptions import CannotOverrideScanned
from ..model import PresenceRecord
from .base import OverrideDecision, OverrideStrategy


class MarkAbsentStrategy(OverrideStrategy):
    """Retract a manual entry. Scanned rows are never removed."""

    def decide(self, existing: Optional[PresenceRecord]) -> OverrideDecision:
        if not existing:
            return OverrideDecision(action=OverrideAction.NONE, reason=OverrideReason.ALREADY_ABSENT)
        if existing.origin == RecordOrigin.AUTOMATIC:
            raise CannotOverrideScanned("Cannot mark QR-scanned attendance as absent")
        return OverrideDecision(action=OverrideAction.DELETE, reason=OverrideReason.MARKED_ABSENT)
