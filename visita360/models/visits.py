"""Field sales models — Visits and their Follow-ups."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, Date, Float, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime
from .base import Base


class Visit(Base):
    """A prospecting visit to a construction site / company."""

    __tablename__ = "visitas"
    id = Column(Integer, primary_key=True)
    data = Column(Date, nullable=False)
    endereco = Column(String(500), nullable=False)
    lat = Column(Float)
    lng = Column(Float)
    empresa = Column(String(255), nullable=False)
    segmento = Column(String(50), nullable=False)  # constants.SEGMENTOS
    responsavel = Column(String(50), nullable=False)  # constants.RESPONSAVEIS
    estagio = Column(String(50), nullable=False)  # constants.ESTAGIOS
    concorrencia = Column(String(255), default="")
    classificacao = Column(String(20), nullable=False)  # constants.CLASSIFICACOES
    contato = Column(String(255), default="")
    obs = Column(Text, default="")
    fotos = Column(JSON, default=list)
    vendedor = Column(String(255), nullable=False)

    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    followups = relationship(
        "FollowUp",
        back_populates="visita",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FollowUp.id",
    )

    __table_args__ = (
        Index("ix_visitas_data", "data"),
        Index("ix_visitas_vendedor", "vendedor"),
    )


class FollowUp(Base):
    """A follow-up interaction logged against one visit."""

    __tablename__ = "followups"
    id = Column(Integer, primary_key=True)
    visita_id = Column(
        Integer, ForeignKey("visitas.id", ondelete="CASCADE"), nullable=False
    )
    data = Column(Date, nullable=False)
    status = Column(String(30), nullable=False)  # constants.FOLLOWUP_STATUSES
    valor = Column(Numeric(12, 2))
    motivo_perda = Column(String(50))  # constants.MOTIVOS_PERDA, None = no loss

    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    visita = relationship("Visit", back_populates="followups")

    __table_args__ = (
        Index("ix_followups_visita", "visita_id"),
        Index("ix_followups_visita_data", "visita_id", "data"),
    )
