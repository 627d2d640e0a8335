import json

import pytest
from pywebpush import WebPushException

from src.class_attendance.class_attendance.core.exceptions import ValidationError
from src.class_attendance.class_attendance.notifications.model import PushSubscription
from src.class_attendance.class_attendance.notifications.push_service import PushService


class InMemorySubscriptions:
    def __init__(self):
        self.items = {}
        self._id = 0

    def save(self, *, user_id, user_type, subscription_info):
        for sub in self.items.values():
            if (sub.user_id, sub.user_type, sub.endpoint) == (user_id, user_type, subscription_info["endpoint"]):
                return sub.subscription_id
        self._id += 1
        self.items[self._id] = PushSubscription(
            subscription_id=self._id,
            user_id=user_id,
            user_type=user_type,
            endpoint=subscription_info["endpoint"],
            subscription_info=subscription_info,
        )
        return self._id

    def list_for_user(self, user_id, user_type):
        return [s for s in self.items.values() if s.user_id == user_id and s.user_type == user_type]

    def delete(self, subscription_id):
        return self.items.pop(subscription_id, None) is not None


class _Response:
    def __init__(self, status_code):
        self.status_code = status_code


class FakeSender:
    def __init__(self, gone_endpoints=(), failing_endpoints=(), unreachable_endpoints=()):
        self.calls = []
        self._gone = set(gone_endpoints)
        self._failing = set(failing_endpoints)
        self._unreachable = set(unreachable_endpoints)

    def __call__(self, *, subscription_info, data, vapid_private_key, vapid_claims):
        endpoint = subscription_info["endpoint"]
        if endpoint in self._gone:
            raise WebPushException("gone", response=_Response(410))
        if endpoint in self._failing:
            raise WebPushException("server error", response=_Response(500))
        if endpoint in self._unreachable:
            raise ConnectionError("push service unreachable")
        self.calls.append((endpoint, json.loads(data), vapid_claims))


def _service(subs, sender, key="private-key"):
    return PushService(subs, vapid_private_key=key, vapid_claim_email="ops@example.com", sender=sender)


def test_subscribe_stores_each_endpoint_once():
    subs = InMemorySubscriptions()
    svc = _service(subs, FakeSender())

    first = svc.subscribe("S1", "student", {"endpoint": "https://push/1", "keys": {}})
    again = svc.subscribe("S1", "student", {"endpoint": "https://push/1", "keys": {}})

    assert first == again
    assert len(subs.items) == 1
    with pytest.raises(ValidationError):
        svc.subscribe("S1", "student", {"keys": {}})


def test_send_delivers_to_every_device_and_drops_gone_ones():
    subs = InMemorySubscriptions()
    sender = FakeSender(gone_endpoints={"https://push/old"}, failing_endpoints={"https://push/flaky"})
    svc = _service(subs, sender)
    for endpoint in ("https://push/1", "https://push/old", "https://push/flaky"):
        svc.subscribe("S1", "student", {"endpoint": endpoint})

    sent = svc.send_to_user("S1", "student", {"title": "Hi", "body": "There"})

    assert sent == 1
    endpoint, data, claims = sender.calls[0]
    assert data["title"] == "Hi"
    assert claims == {"sub": "mailto:ops@example.com"}
    assert sorted(s.endpoint for s in subs.items.values()) == ["https://push/1", "https://push/flaky"]


def test_transport_error_skips_only_that_device():
    subs = InMemorySubscriptions()
    sender = FakeSender(unreachable_endpoints={"https://push/down"})
    svc = _service(subs, sender)
    svc.subscribe("S1", "student", {"endpoint": "https://push/down"})
    svc.subscribe("S1", "student", {"endpoint": "https://push/2"})

    sent = svc.send_to_user("S1", "student", {"title": "Hi", "body": "There"})

    assert sent == 1
    assert [c[0] for c in sender.calls] == ["https://push/2"]
    assert len(subs.items) == 2


def test_send_is_a_no_op_without_vapid_keys():
    subs = InMemorySubscriptions()
    sender = FakeSender()
    svc = _service(subs, sender, key=None)
    svc.subscribe("S1", "student", {"endpoint": "https://push/1"})

    assert svc.enabled is False
    assert svc.send_to_user("S1", "student", {"title": "Hi", "body": "There"}) == 0
    assert sender.calls == []
