"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root
_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Schedule source ---
    # Pages live at {schedule_base_url}{week} (web) or {schedule_base_url}{week}.html (file)
    schedule_base_url: str = "schedules/week"
    schedule_from_web: bool = False
    update_from_web: bool = False

    # --- Season ---
    season_year: int = 2017
    num_weeks: int = 17
    schedule_timezone: str = "America/New_York"
    wake_timezone: str = "America/Los_Angeles"

    # --- Polling ---
    fetch_retry_delay_s: float = 60.0

    # --- Supabase (optional publishing backend) ---
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_bucket_raw_pages: str = "fbpool-raw-pages"

    # --- App ---
    app_env: str = "development"
    log_level: str = "INFO"

    @property
    def schedule_tz(self) -> ZoneInfo:
        return ZoneInfo(self.schedule_timezone)

    @property
    def wake_tz(self) -> ZoneInfo:
        return ZoneInfo(self.wake_timezone)

    @property
    def publishing_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
