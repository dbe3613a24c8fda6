"""Key-value state — JSON blobs that survive restarts."""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text

from ..database import UTCDateTime
from .base import Base


class AppState(Base):
    """One JSON document per fixed key (geocode cache, runtime config)."""

    __tablename__ = "app_state"
    id = Column(Integer, primary_key=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
