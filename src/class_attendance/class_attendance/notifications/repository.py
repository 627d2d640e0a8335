from __future__ import annotations

from typing import Protocol, Sequence

from .model import PushSubscription


class SubscriptionRepository(Protocol):
    def save(self, *, user_id: str, user_type: str, subscription_info: dict) -> int:
        """Store a browser subscription; the same endpoint is stored once per user."""

        raise NotImplementedError

    def list_for_user(self, user_id: str, user_type: str) -> Sequence[PushSubscription]:
        raise NotImplementedError

    def delete(self, subscription_id: int) -> bool:
        raise NotImplementedError
