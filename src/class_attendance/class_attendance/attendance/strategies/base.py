from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ...core.enums import OverrideAction, OverrideReason
from ..model import PresenceRecord


@dataclass(frozen=True)
class OverrideDecision:
    action: OverrideAction
    reason: OverrideReason


class OverrideStrategy(ABC):
    """Strategy Pattern: decide what a manual presence edit does to one day."""

    @abstractmethod
    def decide(self, existing: Optional[PresenceRecord]) -> OverrideDecision:
        raise NotImplementedError
