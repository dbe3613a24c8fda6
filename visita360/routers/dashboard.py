"""
dashboard.py — Dashboard aggregates, reports and map points

Called by: main.py (router mount)
Depends on: services/dashboard_service, services/visit_service
"""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import visit_service
from ..services.config_service import get_app_config
from ..services.dashboard_service import build_dashboard, build_reports, list_map_points

router = APIRouter()


@router.get("/api/dashboard")
async def dashboard(
    data_ini: date | None = None,
    data_fim: date | None = None,
    segmento: str | None = None,
    estagio: str | None = None,
    db: Session = Depends(get_db),
):
    return build_dashboard(
        visit_service.list_visits(db),
        visit_service.list_followups(db),
        get_app_config(db)["prazo"],
        datetime.now(timezone.utc),
        data_ini=data_ini,
        data_fim=data_fim,
        segmento=segmento,
        estagio=estagio,
    )


@router.get("/api/map/points")
async def map_points(db: Session = Depends(get_db)):
    return list_map_points(visit_service.list_visits(db), visit_service.list_followups(db))


@router.get("/api/reports")
async def reports(db: Session = Depends(get_db)):
    return build_reports(visit_service.list_visits(db), visit_service.list_followups(db))
