"""
test_notification_service.py — Due/overdue reminders and the meta alert.

Called by: pytest
Depends on: visita360/services/notification_service.py
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace as NS

import pytest

from visita360.services.notification_service import (
    TYPE_DUE,
    TYPE_META,
    TYPE_OVERDUE,
    NotificationItem,
    build_notifications,
    generate_followup_notifications,
    generate_meta_notifications,
    sort_notifications,
)

PRAZO = 3
BASE = date(2024, 1, 1)


def _visit(id=1, data=BASE, empresa="Construtora Alpha"):
    return NS(id=id, data=data, empresa=empresa)


def _now(days_after_base: int) -> datetime:
    return datetime(BASE.year, BASE.month, BASE.day, 15, tzinfo=timezone.utc) + timedelta(days=days_after_base)


class TestDueBoundary:
    def test_one_day_before_prazo_is_silent(self):
        assert generate_followup_notifications([_visit()], [], PRAZO, _now(PRAZO - 1)) == []

    def test_exactly_prazo_is_due_medium(self):
        items = generate_followup_notifications([_visit()], [], PRAZO, _now(PRAZO))
        assert len(items) == 1
        n = items[0]
        assert n.type == TYPE_DUE
        assert n.priority == "medium"
        assert n.visita_id == 1
        assert n.title == "Follow-up Necessário"
        assert n.message == "Construtora Alpha - Prazo de 3 dias atingido"
        assert n.action_label == "Fazer Follow-up"

    def test_one_day_late_is_overdue_high(self):
        items = generate_followup_notifications([_visit()], [], PRAZO, _now(PRAZO + 1))
        assert [(n.type, n.priority) for n in items] == [(TYPE_OVERDUE, "high")]
        assert items[0].message == "Construtora Alpha - 1 dias de atraso"

    def test_seven_days_late_is_still_high(self):
        items = generate_followup_notifications([_visit()], [], PRAZO, _now(PRAZO + 7))
        assert items[0].priority == "high"

    def test_eight_days_late_is_urgent(self):
        items = generate_followup_notifications([_visit()], [], PRAZO, _now(PRAZO + 8))
        assert [(n.type, n.priority) for n in items] == [(TYPE_OVERDUE, "urgent")]
        assert items[0].action_label == "Fazer Follow-up Urgente"

    def test_first_seen_past_prazo_skips_due(self):
        items = generate_followup_notifications([_visit()], [], PRAZO, _now(PRAZO + 2))
        assert [n.type for n in items] == [TYPE_OVERDUE]

    def test_base_moves_with_latest_followup(self):
        fus = [NS(id=1, visita_id=1, data=date(2024, 1, 10), status="Retornou")]
        # 10 days after the visit, but only 1 after the follow-up
        assert generate_followup_notifications([_visit()], fus, PRAZO, _now(10)) == []


class TestClosedSuppression:
    @pytest.mark.parametrize("days", [0, 3, 4, 30, 365])
    def test_closed_visit_never_reminds(self, days):
        fus = [NS(id=1, visita_id=1, data=BASE, status="Fechou pedido")]
        assert generate_followup_notifications([_visit()], fus, PRAZO, _now(days)) == []


class TestEndToEnd:
    @pytest.mark.parametrize("on,expected", [
        (date(2024, 1, 4), (TYPE_DUE, "medium")),
        (date(2024, 1, 12), (TYPE_OVERDUE, "high")),
        (date(2024, 1, 20), (TYPE_OVERDUE, "urgent")),
    ])
    def test_visit_dated_2024_01_01(self, on, expected):
        now = datetime(on.year, on.month, on.day, 9, tzinfo=timezone.utc)
        items = [
            n for n in build_notifications([_visit()], [], PRAZO, now)
            if n.type != TYPE_META
        ]
        assert [(n.type, n.priority) for n in items] == [expected]
        assert items[0].visita_id == 1


class TestIds:
    def test_id_embeds_type_visit_and_tick(self):
        now = _now(PRAZO)
        n = generate_followup_notifications([_visit(id=7)], [], PRAZO, now)[0]
        assert n.id == f"follow_up_due_7_{int(now.timestamp() * 1000)}"

    def test_same_tick_same_ids(self):
        now = _now(PRAZO + 1)
        a = build_notifications([_visit()], [], PRAZO, now)
        b = build_notifications([_visit()], [], PRAZO, now)
        assert [n.id for n in a] == [n.id for n in b]


class TestMetaAlert:
    def test_zero_conversion_alert(self):
        now = datetime(2024, 1, 20, tzinfo=timezone.utc)
        visits = [_visit(id=i, data=date(2024, 1, i)) for i in range(1, 11)]
        items = generate_meta_notifications(visits, [], now)
        assert len(items) == 1
        assert items[0].type == TYPE_META
        assert items[0].priority == "medium"
        assert "0.0%" in items[0].message
        assert items[0].visita_id is None

    def test_no_alert_at_ten_percent(self):
        now = datetime(2024, 1, 20, tzinfo=timezone.utc)
        visits = [_visit(id=i, data=date(2024, 1, i)) for i in range(1, 11)]
        fus = [NS(id=1, visita_id=1, data=date(2024, 1, 5), status="Fechou pedido")]
        assert generate_meta_notifications(visits, fus, now) == []

    def test_only_current_month_counts(self):
        now = datetime(2024, 2, 10, tzinfo=timezone.utc)
        visits = [_visit(id=1, data=date(2024, 1, 5))]
        assert generate_meta_notifications(visits, [], now) == []

    def test_no_visits_no_alert(self):
        assert generate_meta_notifications([], [], datetime(2024, 1, 1, tzinfo=timezone.utc)) == []


def test_sort_by_priority_then_newest():
    t1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
    t2 = t1 + timedelta(minutes=1)
    items = [
        NotificationItem(id="a", type=TYPE_DUE, title="", message="", priority="medium", created_at=t2),
        NotificationItem(id="b", type=TYPE_OVERDUE, title="", message="", priority="urgent", created_at=t1),
        NotificationItem(id="c", type=TYPE_OVERDUE, title="", message="", priority="high", created_at=t1),
        NotificationItem(id="d", type=TYPE_META, title="", message="", priority="medium", created_at=t1),
    ]
    assert [n.id for n in sort_notifications(items)] == ["b", "c", "a", "d"]
