from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PushSubscription:
    subscription_id: int
    user_id: str
    user_type: str
    endpoint: str
    subscription_info: dict


@dataclass(frozen=True)
class CheckSummary:
    """Outcome of one low-attendance batch run."""

    checked: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return {
            "checked": self.checked,
            "notified": self.notified,
            "skipped": self.skipped,
            "failed": self.failed,
        }
