"""Runtime app config — salesperson name and follow-up threshold.

Env settings give the defaults; whatever the user saved through /api/config
is kept as a JSON blob in app_state and wins. A malformed blob falls back
to the defaults.
"""

import json
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..constants import APP_CONFIG_KEY
from ..models import AppState

log = logging.getLogger("visita360.config")


def _defaults() -> dict:
    from ..config import settings

    return {"vendedor": settings.default_vendedor, "prazo": settings.followup_prazo_days}


def _read_blob(db: Session) -> dict:
    try:
        row = db.query(AppState).filter_by(key=APP_CONFIG_KEY).first()
    except SQLAlchemyError as e:
        log.warning("Config read error: %s", e)
        return {}
    if row is None:
        return {}
    try:
        data = json.loads(row.value)
    except (json.JSONDecodeError, TypeError):
        log.warning("Stored app config is malformed — using defaults")
        return {}
    return data if isinstance(data, dict) else {}


def get_app_config(db: Session) -> dict:
    cfg = _defaults()
    stored = _read_blob(db)

    vendedor = stored.get("vendedor")
    if isinstance(vendedor, str) and vendedor.strip():
        cfg["vendedor"] = vendedor
    prazo = stored.get("prazo")
    if isinstance(prazo, int) and not isinstance(prazo, bool) and prazo >= 1:
        cfg["prazo"] = prazo
    return cfg


def update_app_config(db: Session, updates: dict) -> dict:
    cfg = get_app_config(db)
    cfg.update({k: v for k, v in updates.items() if v is not None})

    row = db.query(AppState).filter_by(key=APP_CONFIG_KEY).first()
    value = json.dumps(cfg, ensure_ascii=False)
    if row:
        row.value = value
    else:
        db.add(AppState(key=APP_CONFIG_KEY, value=value))
    db.commit()
    log.info("App config updated: %s", cfg)
    return cfg
