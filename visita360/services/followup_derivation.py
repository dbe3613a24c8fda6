"""Follow-up derivation — where does each visit stand?

For one visit and the full follow-up list, finds the latest interaction,
how many whole days passed since it (or since the visit, when there is no
follow-up yet), and whether the deal is already closed.

Tie-break: two follow-ups on the same date resolve to the one listed later.
Lists come from visit_service.list_followups() ordered by (data, id), so
"listed later" means "inserted later".

Works on ORM rows or any object with the same attribute names.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from ..constants import STATUS_FECHOU

_SECONDS_PER_DAY = 86400


@dataclass(frozen=True)
class FollowUpState:
    last_followup: object | None
    days_since_base: int
    is_closed: bool


def as_date(value) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def days_since(base: date, now: datetime) -> int:
    """Whole days between midnight UTC of `base` and `now` (floored)."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    start = datetime.combine(base, time.min, tzinfo=timezone.utc)
    return int((now - start).total_seconds() // _SECONDS_PER_DAY)


def latest_followup(visita_id: int, followups) -> object | None:
    """Most recent follow-up of a visit; on equal dates the later-listed one wins."""
    best = None
    best_date = None
    for fu in followups:
        if fu.visita_id != visita_id:
            continue
        fu_date = as_date(fu.data)
        if fu_date is None:
            continue
        if best is None or fu_date >= best_date:
            best, best_date = fu, fu_date
    return best


def derive_followup_state(visit, followups, now: datetime) -> FollowUpState | None:
    """Compute last follow-up, staleness and closed flag for one visit.

    Returns None when the visit has no usable date (nothing to derive).
    """
    last = latest_followup(visit.id, followups)
    base = as_date(last.data) if last is not None else as_date(visit.data)
    if base is None:
        return None
    return FollowUpState(
        last_followup=last,
        days_since_base=days_since(base, now),
        is_closed=last is not None and last.status == STATUS_FECHOU,
    )
