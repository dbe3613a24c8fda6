"""
schemas/visits.py — Pydantic models for visit and follow-up endpoints

Business Rules:
- empresa and endereco are required and non-empty
- segmento / responsavel / estagio / classificacao must be in their closed sets
- lat and lng travel together (both or neither); range checks live in
  visit_service via validate_coordinates
- Follow-up status must be a known status; valor must not be negative
- A partial update cannot set a required column to null
- Empty loss reason means "no reason"; a closed deal cannot carry one

Called by: routers/visits.py, routers/followups.py
Depends on: pydantic, constants.py
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, field_validator, model_validator

from ..constants import (
    CLASSIFICACOES,
    ESTAGIOS,
    FOLLOWUP_STATUSES,
    MOTIVOS_PERDA,
    RESPONSAVEIS,
    SEGMENTOS,
    STATUS_FECHOU,
)

_CHOICES = {
    "segmento": SEGMENTOS,
    "responsavel": RESPONSAVEIS,
    "estagio": ESTAGIOS,
    "classificacao": CLASSIFICACOES,
}


def _check_choice(field: str, value: str | None) -> str | None:
    if value is None:
        return None
    if value not in _CHOICES[field]:
        raise ValueError(f"{field} must be one of: {', '.join(_CHOICES[field])}")
    return value


_REQUIRED_ON_UPDATE = (
    "data", "endereco", "empresa", "segmento", "responsavel", "estagio", "classificacao", "vendedor",
)


def _check_pair(lat, lng) -> None:
    if (lat is None) != (lng is None):
        raise ValueError("lat and lng must be provided together")


# ── Visits ───────────────────────────────────────────────────────────


class VisitCreate(BaseModel):
    data: date
    endereco: str
    lat: float | None = None
    lng: float | None = None
    empresa: str
    segmento: str
    responsavel: str
    estagio: str
    classificacao: str
    concorrencia: str = ""
    contato: str = ""
    obs: str = ""
    fotos: list[str] = []
    vendedor: str | None = None

    @field_validator("empresa", "endereco")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @field_validator("segmento", "responsavel", "estagio", "classificacao")
    @classmethod
    def in_closed_set(cls, v: str, info) -> str:
        return _check_choice(info.field_name, v)

    @model_validator(mode="after")
    def coordinates_paired(self):
        _check_pair(self.lat, self.lng)
        return self


class VisitUpdate(BaseModel):
    data: date | None = None
    endereco: str | None = None
    lat: float | None = None
    lng: float | None = None
    empresa: str | None = None
    segmento: str | None = None
    responsavel: str | None = None
    estagio: str | None = None
    classificacao: str | None = None
    concorrencia: str | None = None
    contato: str | None = None
    obs: str | None = None
    fotos: list[str] | None = None
    vendedor: str | None = None

    @field_validator("empresa", "endereco")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("segmento", "responsavel", "estagio", "classificacao")
    @classmethod
    def in_closed_set(cls, v: str | None, info) -> str | None:
        return _check_choice(info.field_name, v)

    @model_validator(mode="after")
    def required_not_null(self):
        nulled = sorted(f for f in _REQUIRED_ON_UPDATE if f in self.model_fields_set and getattr(self, f) is None)
        if nulled:
            raise ValueError(f"Required fields cannot be null: {', '.join(nulled)}")
        return self

    @model_validator(mode="after")
    def coordinates_paired(self):
        if "lat" in self.model_fields_set or "lng" in self.model_fields_set:
            _check_pair(self.lat, self.lng)
        return self


# ── Follow-ups ───────────────────────────────────────────────────────


class FollowUpCreate(BaseModel):
    visita_id: int
    data: date
    status: str
    valor: float | None = None
    motivo_perda: str | None = None

    @field_validator("status")
    @classmethod
    def known_status(cls, v: str) -> str:
        if v not in FOLLOWUP_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(FOLLOWUP_STATUSES)}")
        return v

    @field_validator("valor")
    @classmethod
    def non_negative(cls, v: float | None) -> float | None:
        if v is not None and v < 0:
            raise ValueError("valor must be a positive number")
        return v

    @field_validator("motivo_perda")
    @classmethod
    def known_reason(cls, v: str | None) -> str | None:
        if v is None or not v.strip() or v == "none":
            return None
        if v not in MOTIVOS_PERDA:
            raise ValueError(f"motivo_perda must be one of: {', '.join(MOTIVOS_PERDA)}")
        return v

    @model_validator(mode="after")
    def no_loss_reason_on_close(self):
        if self.status == STATUS_FECHOU and self.motivo_perda:
            raise ValueError("A closed deal cannot have a loss reason")
        return self
