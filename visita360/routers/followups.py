"""
followups.py — Follow-up interaction API

Called by: main.py (router mount)
Depends on: services/visit_service, context
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..context import AppContext, get_context
from ..database import get_db
from ..schemas.visits import FollowUpCreate
from ..services import visit_service

router = APIRouter()


@router.get("/api/followups")
async def list_followups(visita_id: int | None = None, db: Session = Depends(get_db)):
    return [
        visit_service.followup_to_dict(fu)
        for fu in visit_service.list_followups(db, visita_id=visita_id)
    ]


@router.post("/api/followups")
async def create_followup(
    payload: FollowUpCreate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    try:
        followup = visit_service.create_followup(db, payload.model_dump())
    except LookupError as e:
        raise HTTPException(404, str(e))
    ctx.refresh_notifications(db)
    return visit_service.followup_to_dict(followup)
