from __future__ import annotations

from .base import RateCalculator


class StandardRateCalculator(RateCalculator):
    """present / total * 100, and 0 when nothing is enrolled."""

    def percentage(self, present: int, total: int) -> float:
        if total <= 0:
            return 0.0
        return (present / total) * 100

    def coarse_ratio(self, presence_rows: int, enrolled_sections: int) -> float:
        # Not a per-session rate: the denominator ignores how many sessions were held.
        if enrolled_sections <= 0:
            return 0.0
        return presence_rows / enrolled_sections
