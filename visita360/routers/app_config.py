"""
app_config.py — Runtime configuration API (salesperson, follow-up threshold)

Changing prazo re-evaluates notifications right away.

Called by: main.py (router mount)
Depends on: services/config_service, context
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..context import AppContext, get_context
from ..database import get_db
from ..schemas.config import AppConfigUpdate
from ..services.config_service import get_app_config, update_app_config

router = APIRouter()


@router.get("/api/config")
async def read_config(db: Session = Depends(get_db)):
    return get_app_config(db)


@router.put("/api/config")
async def write_config(
    payload: AppConfigUpdate,
    db: Session = Depends(get_db),
    ctx: AppContext = Depends(get_context),
):
    cfg = update_app_config(db, payload.model_dump(exclude_unset=True))
    ctx.refresh_notifications(db)
    return cfg
