from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import OverrideStrategy
from .strategies.mark_absent_strategy import MarkAbsentStrategy
from .strategies.mark_present_strategy import MarkPresentStrategy


@dataclass
class OverrideStrategyFactory:
    """Factory Pattern: choose the override strategy for the requested state."""

    def for_presence(self, is_present: bool) -> OverrideStrategy:
        if is_present:
            return MarkPresentStrategy()
        return MarkAbsentStrategy()
