from __future__ import annotations

from abc import ABC, abstractmethod


class RateCalculator(ABC):
    """Calculator interface (Strategy Pattern for attendance rates)."""

    @abstractmethod
    def percentage(self, present: int, total: int) -> float:
        raise NotImplementedError

    @abstractmethod
    def coarse_ratio(self, presence_rows: int, enrolled_sections: int) -> float:
        raise NotImplementedError
