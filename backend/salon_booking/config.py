# backend/salon_booking/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    database_url: str = "sqlite:///./salon_booking.db"
    redis_url: str | None = None

    # Single fixed salon timezone; day boundaries and "now" use it
    timezone: str = "UTC"

    slot_step_minutes: int = 30
    horizon_days: int = 30
    max_horizon_days: int = 90
    cache_ttl_seconds: int = 300

    # Employee without declared services is qualified for all of them
    permissive_qualifications: bool = True

    holiday_country: str = "MA"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
