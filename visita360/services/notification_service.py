"""
notification_service.py — Follow-up reminders and performance alerts.

Re-derives the full notification list from visits + follow-ups on every
evaluation tick. Nothing here is stored; notification_store.py diffs each
tick's output against what it already holds.

Business Rules:
- Closed visits (latest follow-up "Fechou pedido") never produce reminders
- days == prazo  → follow_up_due, medium
- days >  prazo  → follow_up_overdue, urgent when more than 7 days late, else high
- days <  prazo  → nothing
- The due reminder fires on the exact day only. A visit first evaluated at
  prazo + 2 goes straight to overdue; this is the expected behaviour.
- Month-to-date conversion below 10% → one meta_alert (medium)
- Ids embed the tick timestamp, so they are stable within one tick only
- Ordering: priority rank descending, then created_at descending

Called by: notification_store.py (refresh), scheduler.py, routers/notifications.py
Depends on: followup_derivation.py, constants.py
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..constants import STATUS_FECHOU
from ..utils import epoch_millis
from .followup_derivation import as_date, derive_followup_state

TYPE_DUE = "follow_up_due"
TYPE_OVERDUE = "follow_up_overdue"
TYPE_META = "meta_alert"
TYPE_SYSTEM = "system"
NOTIFICATION_TYPES = (TYPE_DUE, TYPE_OVERDUE, TYPE_META, TYPE_SYSTEM)

PRIORITY_RANK = {"urgent": 4, "high": 3, "medium": 2, "low": 1}

URGENT_AFTER_DAYS_LATE = 7
LOW_CONVERSION_PCT = 10


@dataclass
class NotificationItem:
    id: str
    type: str
    title: str
    message: str
    priority: str
    created_at: datetime
    visita_id: int | None = None
    is_read: bool = False
    action_label: str | None = None
    action_url: str | None = None
    action_callback: Callable[[], None] | None = field(default=None, repr=False, compare=False)


# ── Follow-up reminders ──────────────────────────────────────────────


def generate_followup_notifications(visits, followups, prazo_days: int, now: datetime) -> list[NotificationItem]:
    """One due/overdue reminder per open visit that reached its threshold."""
    tick = epoch_millis(now)
    items = []

    for visita in visits:
        state = derive_followup_state(visita, followups, now)
        if state is None or state.is_closed:
            continue

        days = state.days_since_base
        if days == prazo_days:
            items.append(
                NotificationItem(
                    id=f"{TYPE_DUE}_{visita.id}_{tick}",
                    type=TYPE_DUE,
                    title="Follow-up Necessário",
                    message=f"{visita.empresa} - Prazo de {prazo_days} dias atingido",
                    priority="medium",
                    created_at=now,
                    visita_id=visita.id,
                    action_label="Fazer Follow-up",
                    action_url=f"/api/followups?visita_id={visita.id}",
                )
            )
        elif days > prazo_days:
            dias_atraso = days - prazo_days
            items.append(
                NotificationItem(
                    id=f"{TYPE_OVERDUE}_{visita.id}_{tick}",
                    type=TYPE_OVERDUE,
                    title="Follow-up Atrasado",
                    message=f"{visita.empresa} - {dias_atraso} dias de atraso",
                    priority="urgent" if dias_atraso > URGENT_AFTER_DAYS_LATE else "high",
                    created_at=now,
                    visita_id=visita.id,
                    action_label="Fazer Follow-up Urgente",
                    action_url=f"/api/followups?visita_id={visita.id}",
                )
            )

    return items


# ── Performance alerts ───────────────────────────────────────────────


def _in_month(value, now: datetime) -> bool:
    d = as_date(value)
    return d is not None and d.year == now.year and d.month == now.month


def generate_meta_notifications(visits, followups, now: datetime) -> list[NotificationItem]:
    """Low month-to-date conversion alert (closed deals / visits < 10%)."""
    visitas_mes = [v for v in visits if _in_month(v.data, now)]
    if not visitas_mes:
        return []

    fechados_mes = [
        fu for fu in followups if fu.status == STATUS_FECHOU and _in_month(fu.data, now)
    ]
    taxa = len(fechados_mes) / len(visitas_mes) * 100
    if taxa >= LOW_CONVERSION_PCT:
        return []

    return [
        NotificationItem(
            id=f"meta_conversion_low_{epoch_millis(now)}",
            type=TYPE_META,
            title="Taxa de Conversão Baixa",
            message=f"Taxa atual: {taxa:.1f}% - Considere revisar estratégia",
            priority="medium",
            created_at=now,
            action_label="Ver Dashboard",
            action_url="/api/dashboard",
        )
    ]


# ── Merge ────────────────────────────────────────────────────────────


def sort_notifications(items: list[NotificationItem]) -> list[NotificationItem]:
    return sorted(
        items,
        key=lambda n: (PRIORITY_RANK.get(n.priority, 0), n.created_at),
        reverse=True,
    )


def build_notifications(visits, followups, prazo_days: int, now: datetime) -> list[NotificationItem]:
    """Full candidate list for one evaluation tick, highest priority first."""
    visits = list(visits)
    followups = list(followups)
    return sort_notifications(
        generate_followup_notifications(visits, followups, prazo_days, now)
        + generate_meta_notifications(visits, followups, now)
    )
