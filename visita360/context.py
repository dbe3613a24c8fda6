"""
context.py — Process-wide state owned by the application root.

One AppContext is built in the FastAPI lifespan and hung on app.state. It
owns the geocode cache (persisted), the geocode service, the notifier and
the notification store, and is passed explicitly to the scheduler job and
to routers (via get_context).

Lifecycle:
- startup: build (the geocode cache loads lazily on first use)
- every tick / data change: refresh_notifications(db)
- shutdown: close() flushes the geocode cache
"""

import logging
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy.orm import Session

from .cache.geocode_cache import GeocodeCache
from .cache.state_store import StateStore
from .notifiers import build_notifier
from .services.config_service import get_app_config
from .services.geocode_service import GeocodeService
from .services.notification_store import NotificationStore
from .services.visit_service import list_followups, list_visits

log = logging.getLogger("visita360.context")


class AppContext:
    def __init__(self, settings, session_factory, notifier=None):
        self.settings = settings
        self.state_store = StateStore(session_factory)
        self.geocode_cache = GeocodeCache(
            self.state_store, ttl_hours=settings.geocode_cache_ttl_hours
        )
        self.geocoder = GeocodeService(self.geocode_cache)
        self.notifier = notifier if notifier is not None else build_notifier(settings)
        self.notifications = NotificationStore(
            self.notifier, delivery_enabled=settings.notifications_enabled
        )

    def refresh_notifications(self, db: Session, now: datetime | None = None) -> list:
        """Re-derive notifications from the current DB contents."""
        now = now or datetime.now(timezone.utc)
        prazo = get_app_config(db)["prazo"]
        return self.notifications.refresh(list_visits(db), list_followups(db), prazo, now)

    def close(self) -> None:
        self.geocode_cache.flush()
        log.info("App context closed")


def get_context(request: Request) -> AppContext:
    """Dependency: the AppContext built at startup."""
    return request.app.state.context
