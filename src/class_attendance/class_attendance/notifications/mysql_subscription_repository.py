from __future__ import annotations

import json
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PushSubscription
from .repository import SubscriptionRepository


class MySQLSubscriptionRepository(SubscriptionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def save(self, *, user_id: str, user_type: str, subscription_info: dict) -> int:
        endpoint = str(subscription_info.get("endpoint") or "")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subscription_id FROM push_subscriptions
                WHERE user_id=%s AND user_type=%s AND endpoint=%s
                """,
                (user_id, user_type, endpoint),
            )
            existing = fetchone(cur)
            if existing:
                return int(existing["subscription_id"])

            cur.execute(
                """
                INSERT INTO push_subscriptions (user_id, user_type, endpoint, subscription_object)
                VALUES (%s, %s, %s, %s)
                """,
                (user_id, user_type, endpoint, json.dumps(subscription_info)),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: str, user_type: str) -> Sequence[PushSubscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT subscription_id, user_id, user_type, endpoint, subscription_object
                FROM push_subscriptions
                WHERE user_id=%s AND user_type=%s
                """,
                (user_id, user_type),
            )
            return [
                PushSubscription(
                    subscription_id=int(r["subscription_id"]),
                    user_id=str(r["user_id"]),
                    user_type=r["user_type"],
                    endpoint=r["endpoint"],
                    subscription_info=json.loads(r["subscription_object"]),
                )
                for r in fetchall(cur)
            ]

    def delete(self, subscription_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM push_subscriptions WHERE subscription_id=%s", (subscription_id,))
            return cur.rowcount > 0
