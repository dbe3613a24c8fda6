"""
visit_service.py — Persistence for visits and follow-ups.

The CRUD layer the rest of the app reads from: the notification engine and
the dashboard only ever see what list_visits() / list_followups() return.

Business Rules:
- Coordinates are range-checked (validate_coordinates) before being stored
- A follow-up must point at an existing visit
- Deleting a visit deletes its follow-ups
- Visits list newest first; follow-ups list by (data, id), which is the
  order followup_derivation relies on for same-day tie-breaks
- reset_all() wipes both tables (development helper)

Called by: routers/visits.py, routers/followups.py, scheduler.py, scripts/seed_sample_data.py
Depends on: models, utils/normalization.py
"""

import logging
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import FollowUp, Visit
from ..utils.normalization import validate_coordinates

log = logging.getLogger("visita360.visits")


# ── Serialization ────────────────────────────────────────────────────


def visit_to_dict(v: Visit) -> dict:
    return {
        "id": v.id,
        "data": v.data.isoformat() if v.data else None,
        "endereco": v.endereco,
        "lat": v.lat,
        "lng": v.lng,
        "empresa": v.empresa,
        "segmento": v.segmento,
        "responsavel": v.responsavel,
        "estagio": v.estagio,
        "concorrencia": v.concorrencia or "",
        "classificacao": v.classificacao,
        "contato": v.contato or "",
        "obs": v.obs or "",
        "fotos": v.fotos or [],
        "vendedor": v.vendedor,
        "created_at": v.created_at.isoformat() if v.created_at else None,
        "updated_at": v.updated_at.isoformat() if v.updated_at else None,
    }


def followup_to_dict(fu: FollowUp) -> dict:
    return {
        "id": fu.id,
        "visita_id": fu.visita_id,
        "data": fu.data.isoformat() if fu.data else None,
        "status": fu.status,
        "valor": float(fu.valor) if fu.valor is not None else None,
        "motivo_perda": fu.motivo_perda,
        "created_at": fu.created_at.isoformat() if fu.created_at else None,
    }


def _check_coordinates(lat, lng) -> None:
    if lat is None and lng is None:
        return
    if not validate_coordinates(lat, lng):
        raise ValueError(f"Invalid coordinates: lat={lat}, lng={lng}")


# ── Visits ───────────────────────────────────────────────────────────


def list_visits(db: Session) -> list[Visit]:
    return db.query(Visit).order_by(Visit.data.desc(), Visit.id.desc()).all()


def get_visit(db: Session, visit_id: int) -> Visit:
    visit = db.get(Visit, visit_id)
    if visit is None:
        raise LookupError(f"Visit {visit_id} not found")
    return visit


def create_visit(db: Session, fields: dict, default_vendedor: str) -> Visit:
    """Register a visit. Returns the persisted row (with id)."""
    fields = dict(fields)
    _check_coordinates(fields.get("lat"), fields.get("lng"))
    if not fields.get("vendedor"):
        fields["vendedor"] = default_vendedor

    visit = Visit(**fields)
    db.add(visit)
    db.commit()
    db.refresh(visit)
    log.info("Visit %s registered: %s", visit.id, visit.empresa)
    return visit


def update_visit(db: Session, visit_id: int, fields: dict) -> Visit:
    """Partial update — only the given fields change."""
    visit = get_visit(db, visit_id)
    lat = fields.get("lat", visit.lat)
    lng = fields.get("lng", visit.lng)
    _check_coordinates(lat, lng)

    for field, value in fields.items():
        setattr(visit, field, value)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValueError(f"Visit {visit_id} update rejected: {e.orig}") from e
    db.refresh(visit)
    return visit


def delete_visit(db: Session, visit_id: int) -> int:
    """Delete a visit and its follow-ups. Returns follow-ups removed."""
    visit = get_visit(db, visit_id)
    removed = db.query(FollowUp).filter(FollowUp.visita_id == visit_id).delete(
        synchronize_session=False
    )
    db.delete(visit)
    db.commit()
    log.info("Visit %s deleted (%d follow-ups)", visit_id, removed)
    return removed


# ── Follow-ups ───────────────────────────────────────────────────────


def list_followups(db: Session, visita_id: int | None = None) -> list[FollowUp]:
    q = db.query(FollowUp)
    if visita_id is not None:
        q = q.filter(FollowUp.visita_id == visita_id)
    return q.order_by(FollowUp.data.asc(), FollowUp.id.asc()).all()


def create_followup(db: Session, fields: dict) -> FollowUp:
    if db.get(Visit, fields["visita_id"]) is None:
        raise LookupError(f"Visit {fields['visita_id']} not found")

    followup = FollowUp(**fields)
    db.add(followup)
    db.commit()
    db.refresh(followup)
    log.info("Follow-up %s on visit %s: %s", followup.id, followup.visita_id, followup.status)
    return followup


# ── Bulk ─────────────────────────────────────────────────────────────


def reset_all(db: Session) -> dict:
    followups = db.query(FollowUp).delete(synchronize_session=False)
    visits = db.query(Visit).delete(synchronize_session=False)
    db.commit()
    log.warning("All data reset: %d visits, %d follow-ups removed", visits, followups)
    return {"visitas": visits, "followups": followups}


def seed_sample_data(db: Session, today: date | None = None) -> dict:
    """Three demo visits and four follow-ups, dated relative to today."""
    today = today or date.today()

    def ago(days: int) -> date:
        return today - timedelta(days=days)

    alpha = Visit(
        data=ago(20), endereco="Rua Pedrália, 417 - São Paulo", lat=-23.592, lng=-46.629,
        empresa="Construtora Alpha", segmento="Empreiteiras", responsavel="Eng Civil",
        estagio="Inicial", concorrencia="Telha Norte", classificacao="Forte",
        contato="(11)90000-0001", obs="Obra vertical", fotos=[], vendedor="Jhone",
    )
    beta = Visit(
        data=ago(12), endereco="Av. Atlântica, 1200 - Rio de Janeiro", lat=-22.971, lng=-43.186,
        empresa="Engenharia Beta", segmento="Engenharias", responsavel="Arquiteto",
        estagio="Intermediário", concorrencia="Nicom", classificacao="Médio",
        contato="(21)90000-0002", obs="Prazo apertado", fotos=[], vendedor="Jhone",
    )
    joao = Visit(
        data=ago(6), endereco="Rua das Flores, 90 - Campinas", lat=-22.905, lng=-47.06,
        empresa="Particular João", segmento="Particular", responsavel="Outros",
        estagio="Final", concorrencia="", classificacao="Fraco",
        contato="(19)90000-0003", obs="Casa térrea", fotos=[], vendedor="Aline",
    )
    db.add_all([alpha, beta, joao])
    db.flush()

    db.add_all([
        FollowUp(visita_id=alpha.id, data=ago(18), status="Orçamento", valor=25000),
        FollowUp(visita_id=alpha.id, data=ago(10), status="Fechou pedido", valor=18000),
        FollowUp(visita_id=beta.id, data=ago(8), status="Consulta preço", valor=12000),
        FollowUp(
            visita_id=joao.id, data=ago(3), status="Sem retorno", valor=5000,
            motivo_perda="Sem retorno",
        ),
    ])
    db.commit()
    log.info("Sample data seeded")
    return {"visitas": 3, "followups": 4}
