# backend/booking_engine/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repository root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/booking.db"
    redis_url: str | None = None

    # Shared secret for the cron endpoints (Authorization: Bearer <secret>)
    cron_secret: str | None = None

    log_level: str = "INFO"

    # In-process sweeper loop
    sweeper_enabled: bool = False
    sweep_interval_seconds: int = 3600
    sweep_include_pending: bool = False

    default_timezone: str = "America/New_York"
    slots_cache_ttl_seconds: int = 3600

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative SQLite path is resolved against the repository root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
