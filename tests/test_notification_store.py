"""
test_notification_store.py — Reconcile, read/dismiss, stats and delivery.

Called by: pytest
Depends on: visita360/services/notification_store.py, visita360/notifiers/
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace as NS
from unittest.mock import MagicMock

import pytest

from visita360.notifiers import LogNotifier
from visita360.notifiers.base import PERMISSION_DENIED, PERMISSION_GRANTED, Notifier
from visita360.services.notification_service import NotificationItem
from visita360.services.notification_store import NotificationStore

T0 = datetime(2024, 1, 12, 9, tzinfo=timezone.utc)


def _item(id, priority="medium", type="follow_up_due", callback=None):
    return NotificationItem(
        id=id, type=type, title=f"t-{id}", message=f"m-{id}",
        priority=priority, created_at=T0, action_callback=callback,
    )


class DenyingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def request_permission(self):
        self.permission = PERMISSION_DENIED
        return self.permission

    def send(self, delivery):
        self.sent.append(delivery)


@pytest.fixture()
def notifier():
    return LogNotifier()


@pytest.fixture()
def store(notifier):
    return NotificationStore(notifier)


class TestReconcile:
    def test_new_ids_are_returned_and_delivered(self, store, notifier):
        created = store.reconcile([_item("a"), _item("b")])
        assert [n.id for n in created] == ["a", "b"]
        assert [d.tag for d in notifier.sent] == ["a", "b"]

    def test_unchanged_candidates_create_nothing(self, store, notifier):
        store.reconcile([_item("a"), _item("b")])
        assert store.reconcile([_item("a"), _item("b")]) == []
        assert len(notifier.sent) == 2

    def test_store_becomes_candidate_set(self, store):
        store.reconcile([_item("a"), _item("b")])
        store.reconcile([_item("b"), _item("c")])
        assert [n.id for n in store.notifications] == ["b", "c"]

    def test_duplicate_candidate_ids_collapse(self, store, notifier):
        created = store.reconcile([_item("a"), _item("a")])
        assert len(created) == 1
        assert len(store) == 1

    def test_refresh_generates_from_visits(self, store):
        visits = [NS(id=1, data=date(2024, 1, 1), empresa="Alpha")]
        created = store.refresh(visits, [], 3, now=T0)
        types = sorted(n.type for n in created)
        assert types == ["follow_up_overdue", "meta_alert"]
        assert store.last_refreshed_at == T0

    def test_refresh_same_tick_is_deduplicated(self, store):
        visits = [NS(id=1, data=date(2024, 1, 1), empresa="Alpha")]
        store.refresh(visits, [], 3, now=T0)
        assert store.refresh(visits, [], 3, now=T0) == []


class TestUserActions:
    def test_mark_read(self, store):
        store.reconcile([_item("a")])
        assert store.mark_read("a") is True
        assert store.get("a").is_read is True
        assert store.mark_read("missing") is False

    def test_mark_all_read_counts_unread_only(self, store):
        store.reconcile([_item("a"), _item("b"), _item("c")])
        store.mark_read("a")
        assert store.mark_all_read() == 2
        assert all(n.is_read for n in store.notifications)

    def test_dismiss(self, store):
        store.reconcile([_item("a"), _item("b")])
        assert store.dismiss("a") is True
        assert store.dismiss("a") is False
        assert [n.id for n in store.notifications] == ["b"]

    def test_clear_all(self, store):
        store.reconcile([_item("a"), _item("b")])
        assert store.clear_all() == 2
        assert len(store) == 0


class TestStats:
    def test_counts(self, store):
        store.reconcile([
            _item("a", priority="urgent", type="follow_up_overdue"),
            _item("b", priority="urgent", type="follow_up_overdue"),
            _item("c", priority="high", type="follow_up_overdue"),
            _item("d", priority="medium", type="meta_alert"),
        ])
        store.mark_read("a")
        assert store.stats() == {"total": 4, "unread": 3, "urgent": 1, "follow_ups_due": 2}

    @pytest.mark.parametrize("read_ids", [[], ["a"], ["a", "b", "c"]])
    def test_consistency(self, store, read_ids):
        store.reconcile([_item("a", "urgent"), _item("b", "low"), _item("c", "urgent")])
        for i in read_ids:
            store.mark_read(i)
        items = store.notifications
        stats = store.stats()
        assert stats["total"] == len(items)
        assert stats["unread"] == sum(1 for n in items if not n.is_read)
        assert stats["urgent"] == sum(1 for n in items if n.priority == "urgent" and not n.is_read)

    def test_empty(self, store):
        assert store.stats() == {"total": 0, "unread": 0, "urgent": 0, "follow_ups_due": 0}


class TestDelivery:
    def test_permission_requested_on_init(self, notifier):
        store = NotificationStore(notifier)
        assert store.permission == PERMISSION_GRANTED

    def test_urgent_requires_interaction(self, store, notifier):
        store.reconcile([_item("u", priority="urgent"), _item("m", priority="medium")])
        urgent, medium = notifier.sent
        assert urgent.require_interaction is True
        assert urgent.auto_dismiss_seconds is None
        assert medium.require_interaction is False
        assert medium.auto_dismiss_seconds == 5

    def test_activation_marks_read_and_runs_callback(self, store, notifier):
        callback = MagicMock()
        store.reconcile([_item("a", callback=callback)])
        notifier.sent[0].on_activate()
        assert store.get("a").is_read is True
        callback.assert_called_once()

    def test_no_delivery_when_disabled(self, notifier):
        store = NotificationStore(notifier, delivery_enabled=False)
        created = store.reconcile([_item("a")])
        assert len(created) == 1
        assert len(notifier.sent) == 0

    def test_no_delivery_when_permission_denied(self):
        notifier = DenyingNotifier()
        store = NotificationStore(notifier)
        store.reconcile([_item("a")])
        assert store.permission == PERMISSION_DENIED
        assert notifier.sent == []

    def test_no_notifier(self):
        store = NotificationStore(None)
        assert store.request_permission() is False
        assert len(store.reconcile([_item("a")])) == 1

    def test_notifier_errors_are_contained(self):
        notifier = LogNotifier()
        notifier.send = MagicMock(side_effect=RuntimeError("boom"))
        store = NotificationStore(notifier)
        assert len(store.reconcile([_item("a")])) == 1
