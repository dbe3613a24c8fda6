"""
notifications.py — Notification center API

List + stats, manual refresh, read / read-all, dismiss / clear-all.
All state lives in the in-memory NotificationStore on the app context.

Called by: main.py (router mount)
Depends on: services/notification_store, context
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..context import AppContext, get_context
from ..database import get_db

router = APIRouter()


def _to_dict(n) -> dict:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "priority": n.priority,
        "created_at": n.created_at.isoformat(),
        "visita_id": n.visita_id,
        "is_read": n.is_read,
        "action_label": n.action_label,
        "action_url": n.action_url,
    }


def _snapshot(ctx: AppContext) -> dict:
    store = ctx.notifications
    return {
        "notifications": [_to_dict(n) for n in store.notifications],
        "stats": store.stats(),
        "permission": store.permission,
    }


@router.get("/api/notifications")
async def list_notifications(ctx: AppContext = Depends(get_context)):
    return _snapshot(ctx)


@router.post("/api/notifications/refresh")
async def refresh_notifications(
    db: Session = Depends(get_db), ctx: AppContext = Depends(get_context)
):
    created = ctx.refresh_notifications(db)
    out = _snapshot(ctx)
    out["created"] = len(created)
    return out


@router.post("/api/notifications/read-all")
async def mark_all_read(ctx: AppContext = Depends(get_context)):
    return {"marked": ctx.notifications.mark_all_read(), "stats": ctx.notifications.stats()}


@router.post("/api/notifications/{notification_id}/read")
async def mark_read(notification_id: str, ctx: AppContext = Depends(get_context)):
    if not ctx.notifications.mark_read(notification_id):
        raise HTTPException(404, "Notification not found")
    return {"ok": True, "stats": ctx.notifications.stats()}


@router.delete("/api/notifications/{notification_id}")
async def dismiss(notification_id: str, ctx: AppContext = Depends(get_context)):
    if not ctx.notifications.dismiss(notification_id):
        raise HTTPException(404, "Notification not found")
    return {"ok": True, "stats": ctx.notifications.stats()}


@router.delete("/api/notifications")
async def clear_all(ctx: AppContext = Depends(get_context)):
    return {"cleared": ctx.notifications.clear_all(), "stats": ctx.notifications.stats()}
