"""
notification_store.py — The live notification set.

Holds whatever the last evaluation tick produced, keyed by notification id,
plus the read flags the user set since. Not persisted: a restart starts empty.

Business Rules:
- reconcile() replaces the set with the new candidates; candidates whose id
  was not held before are "new" and are the only ones delivered
- Read is one-way (no un-read); dismiss and clear_all remove items for good
- Delivery only when enabled AND the notifier granted permission
- urgent → require interaction, never auto-dismissed; others close after 5s
- Activating a delivered notification marks it read, then runs its callback

Owned by: context.AppContext (one per process, mutated on the event loop)
Called by: scheduler.py, routers/notifications.py
Depends on: notification_service.py, notifiers/
"""

import logging
from datetime import datetime, timezone

from ..notifiers.base import AUTO_DISMISS_SECONDS, PERMISSION_DEFAULT, PERMISSION_GRANTED, Delivery
from .notification_service import TYPE_DUE, TYPE_OVERDUE, NotificationItem, build_notifications

log = logging.getLogger("visita360.notifications")


class NotificationStore:
    def __init__(self, notifier=None, delivery_enabled: bool = True):
        self._items: dict[str, NotificationItem] = {}
        self.notifier = notifier
        self.delivery_enabled = delivery_enabled
        self.last_refreshed_at: datetime | None = None

        if self.delivery_enabled and self.permission == PERMISSION_DEFAULT:
            self.request_permission()

    # ── Delivery permission ──────────────────────────────────────────

    @property
    def permission(self) -> str:
        if self.notifier is None:
            return PERMISSION_DEFAULT
        return self.notifier.permission

    def request_permission(self) -> bool:
        if self.notifier is None:
            return False
        return self.notifier.request_permission() == PERMISSION_GRANTED

    # ── Reads ────────────────────────────────────────────────────────

    @property
    def notifications(self) -> list[NotificationItem]:
        return list(self._items.values())

    def get(self, notification_id: str) -> NotificationItem | None:
        return self._items.get(notification_id)

    def __len__(self) -> int:
        return len(self._items)

    def stats(self) -> dict:
        items = self._items.values()
        return {
            "total": len(self._items),
            "unread": sum(1 for n in items if not n.is_read),
            "urgent": sum(1 for n in items if n.priority == "urgent" and not n.is_read),
            "follow_ups_due": sum(
                1 for n in items if n.type in (TYPE_DUE, TYPE_OVERDUE) and not n.is_read
            ),
        }

    # ── Reconcile ────────────────────────────────────────────────────

    def reconcile(self, candidates: list[NotificationItem]) -> list[NotificationItem]:
        """Swap in a freshly computed candidate list. Returns the new items."""
        known = set(self._items)
        fresh = {}
        for item in candidates:
            fresh.setdefault(item.id, item)
        created = [item for item_id, item in fresh.items() if item_id not in known]

        self._items = fresh
        for item in created:
            self._deliver(item)

        if created:
            log.info("Notifications: %d new, %d total", len(created), len(fresh))
        return created

    def refresh(self, visits, followups, prazo_days: int, now: datetime | None = None) -> list[NotificationItem]:
        """Generate this tick's candidates and reconcile them."""
        now = now or datetime.now(timezone.utc)
        candidates = build_notifications(visits, followups, prazo_days, now)
        self.last_refreshed_at = now
        return self.reconcile(candidates)

    # ── User actions ─────────────────────────────────────────────────

    def mark_read(self, notification_id: str) -> bool:
        item = self._items.get(notification_id)
        if item is None:
            return False
        item.is_read = True
        return True

    def mark_all_read(self) -> int:
        count = 0
        for item in self._items.values():
            if not item.is_read:
                item.is_read = True
                count += 1
        return count

    def dismiss(self, notification_id: str) -> bool:
        return self._items.pop(notification_id, None) is not None

    def clear_all(self) -> int:
        count = len(self._items)
        self._items = {}
        return count

    # ── Delivery ─────────────────────────────────────────────────────

    def _deliver(self, item: NotificationItem) -> None:
        if not self.delivery_enabled or self.notifier is None:
            return
        if self.permission != PERMISSION_GRANTED:
            return

        urgent = item.priority == "urgent"

        def _activate(item_id=item.id, callback=item.action_callback):
            self.mark_read(item_id)
            if callback is not None:
                callback()

        try:
            self.notifier.send(
                Delivery(
                    tag=item.id,
                    title=item.title,
                    message=item.message,
                    priority=item.priority,
                    require_interaction=urgent,
                    auto_dismiss_seconds=None if urgent else AUTO_DISMISS_SECONDS,
                    on_activate=_activate,
                )
            )
        except Exception as e:
            log.warning("Notification delivery failed for %s: %s", item.id, e)
