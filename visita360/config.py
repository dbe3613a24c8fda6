"""All settings, loaded from the .env file."""
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_url: str = "http://localhost:8000"
    database_url: str = "sqlite:///./visita360.db"
    log_level: str = "INFO"

    # Sales defaults (overridable at runtime via /api/config)
    default_vendedor: str = "Jhone"
    followup_prazo_days: int = 3

    # Notifications
    notifications_enabled: bool = True
    notification_interval_seconds: int = 60
    notification_webhook_url: str = ""
    scheduler_enabled: bool = True

    # Geocoding (Nominatim / OpenStreetMap)
    geocode_base_url: str = "https://nominatim.openstreetmap.org"
    geocode_user_agent: str = "Visita360 App (contact@example.com)"
    geocode_country: str = "Brasil"
    geocode_cache_ttl_hours: int = 24
    geocode_timeout_seconds: float = 10

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
