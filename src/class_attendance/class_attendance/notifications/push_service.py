from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from pywebpush import WebPushException, webpush

from ..common.validators import require_non_empty
from ..core.exceptions import ValidationError
from .repository import SubscriptionRepository

logger = logging.getLogger(__name__)

NOTIFICATION_ICON = "icons/favicon.png"
_GONE_STATUSES = (404, 410)


class PushService:
    """Web-push delivery to every stored subscription of a user."""

    def __init__(
        self,
        subscriptions: SubscriptionRepository,
        *,
        vapid_private_key: Optional[str],
        vapid_claim_email: Optional[str],
        sender: Callable = webpush,
    ):
        self._subscriptions = subscriptions
        self._vapid_private_key = vapid_private_key
        self._vapid_claim_email = vapid_claim_email
        self._sender = sender

    @property
    def enabled(self) -> bool:
        return bool(self._vapid_private_key and self._vapid_claim_email)

    def subscribe(self, user_id: str, user_type: str, subscription_info) -> int:
        if not isinstance(subscription_info, dict):
            raise ValidationError("subscription must be an object")
        require_non_empty(subscription_info.get("endpoint"), "subscription.endpoint")
        return self._subscriptions.save(user_id=str(user_id), user_type=user_type, subscription_info=subscription_info)

    def send_to_user(self, user_id: str, user_type: str, payload: dict) -> int:
        """Returns the number of devices the notification was handed to."""

        if not self.enabled:
            logger.warning("VAPID keys not configured; push to %s %s skipped", user_type, user_id)
            return 0

        subscriptions = self._subscriptions.list_for_user(str(user_id), user_type)
        if not subscriptions:
            logger.info("No push subscriptions for %s %s", user_type, user_id)
            return 0

        data = json.dumps({"title": payload.get("title"), "body": payload.get("body"), "icon": NOTIFICATION_ICON})
        sent = 0
        for sub in subscriptions:
            try:
                self._sender(
                    subscription_info=sub.subscription_info,
                    data=data,
                    vapid_private_key=self._vapid_private_key,
                    vapid_claims={"sub": f"mailto:{self._vapid_claim_email}"},
                )
                sent += 1
            except WebPushException as e:
                status = getattr(e.response, "status_code", None)
                if status in _GONE_STATUSES:
                    self._subscriptions.delete(sub.subscription_id)
                    logger.info("Removed expired subscription %s (%s)", sub.subscription_id, status)
                else:
                    logger.warning("Push to %s %s failed: %s", user_type, user_id, e)
            except Exception as e:
                # Transport errors (DNS, timeouts) only cost this device.
                logger.warning("Push to %s %s failed: %s", user_type, user_id, e)
        return sent
