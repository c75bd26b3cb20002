"""Application configuration using Pydantic Settings."""
from __future__ import annotations
from datetime import timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``WORKTRAIL_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="WORKTRAIL_", env_file=".env", env_file_encoding="utf-8", extra="ignore",
    )

    # Storage
    DATA_DIR: Path = Path("data")
    DATABASE_URL: str | None = None

    # Timesheet policy
    DEFAULT_EXPECTED_SECONDS: int = 8 * 60 * 60
    TIMEZONE: str | None = None
    REPORT_DAYS: int = 28

    # Toggl Track
    TOGGL_API_TOKEN: SecretStr | None = None
    TOGGL_USERNAME: str | None = None
    TOGGL_PASSWORD: SecretStr | None = None
    TOGGL_BASE_URL: str = "https://api.track.toggl.com"
    TOGGL_TIMEOUT_SECONDS: float = 30.0
    TOGGL_SYNC_WEEKS: int = 9

    # Presence probes: event name -> shell command
    PROBES: dict[str, str] = {}

    @property
    def data_dir(self) -> Path:
        return self.DATA_DIR

    @property
    def db_path(self) -> Path:
        return self.DATA_DIR / "worktrail.db"

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or f"sqlite:///{self.db_path}"

    @property
    def tzinfo(self) -> tzinfo | None:
        """Configured zone. ``None`` means the system zone, resolved per instant so DST rules apply."""
        if self.TIMEZONE and self.TIMEZONE.upper() == "UTC":
            return timezone.utc
        if self.TIMEZONE:
            return ZoneInfo(self.TIMEZONE)
        return None

    def toggl_credentials(self) -> tuple[str, str] | None:
        """Basic-auth pair for Toggl: ``(token, "api_token")`` or ``(user, password)``."""
        if self.TOGGL_API_TOKEN and self.TOGGL_API_TOKEN.get_secret_value():
            return self.TOGGL_API_TOKEN.get_secret_value(), "api_token"
        if self.TOGGL_USERNAME and self.TOGGL_PASSWORD:
            return self.TOGGL_USERNAME, self.TOGGL_PASSWORD.get_secret_value()
        return None


settings = Settings()
