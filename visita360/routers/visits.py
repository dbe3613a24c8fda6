"""
visits.py — Visit registration API

CRUD for visits plus the development reset/seed helpers. Every mutation
re-runs notification evaluation so reminders follow the data immediately.

Called by: main.py (router mount)
Depends on: services/visit_service, context
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..context import AppContext, get_context
from ..database import get_db
from ..schemas.visits import VisitCreate, VisitUpdate
from ..services import visit_service
from ..services.config_service import get_app_config

router = APIRouter()


@router.get("/api/visits")
async def list_visits(db: Session = Depends(get_db)):
    return [visit_service.visit_to_dict(v) for v in visit_service.list_visits(db)]


@router.post("/api/visits")
async def create_visit(
    payload: VisitCreate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    """Register a visit. Known coordinates are remembered for the next geocode."""
    cfg = get_app_config(db)
    try:
        visit = visit_service.create_visit(db, payload.model_dump(), cfg["vendedor"])
    except ValueError as e:
        raise HTTPException(400, str(e))

    if visit.lat is not None and visit.lng is not None:
        ctx.geocode_cache.remember(visit.endereco, visit.lat, visit.lng)
    ctx.refresh_notifications(db)
    return visit_service.visit_to_dict(visit)


@router.get("/api/visits/{visit_id}")
async def get_visit(visit_id: int, db: Session = Depends(get_db)):
    try:
        visit = visit_service.get_visit(db, visit_id)
    except LookupError:
        raise HTTPException(404, "Visit not found")
    out = visit_service.visit_to_dict(visit)
    out["followups"] = [
        visit_service.followup_to_dict(fu)
        for fu in visit_service.list_followups(db, visita_id=visit_id)
    ]
    return out


@router.patch("/api/visits/{visit_id}")
async def update_visit(
    visit_id: int,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    try:
        visit = visit_service.update_visit(db, visit_id, payload.model_dump(exclude_unset=True))
    except LookupError:
        raise HTTPException(404, "Visit not found")
    except ValueError as e:
        raise HTTPException(400, str(e))
    ctx.refresh_notifications(db)
    return visit_service.visit_to_dict(visit)


@router.delete("/api/visits/{visit_id}")
async def delete_visit(
    visit_id: int,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    try:
        removed = visit_service.delete_visit(db, visit_id)
    except LookupError:
        raise HTTPException(404, "Visit not found")
    ctx.refresh_notifications(db)
    return {"ok": True, "followups_removed": removed}


@router.post("/api/reset")
async def reset_data(db: Session = Depends(get_db), ctx: AppContext = Depends(get_context)):
    """Wipe all visits and follow-ups (development helper)."""
    result = visit_service.reset_all(db)
    ctx.refresh_notifications(db)
    return result


@router.post("/api/seed")
async def seed_data(db: Session = Depends(get_db), ctx: AppContext = Depends(get_context)):
    """Load the demo visits, dated relative to today."""
    result = visit_service.seed_sample_data(db, date.today())
    ctx.refresh_notifications(db)
    return result
