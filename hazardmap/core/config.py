"""
Application configuration using Pydantic settings.
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HAZARDMAP_",
        env_file=".env",
        extra="ignore",
    )

    # Aviation Weather Center
    awc_base_url: str = "https://aviationweather.gov/api/data"
    awc_timeout: float = 15.0
    awc_user_agent: str = "HazardMap/1.0 (sigmet-viewer)"

    # Upstream query window around the reference time
    window_back_hours: float = 24
    window_forward_hours: float = 6

    # Altitude slider bounds (feet)
    altitude_min_ft: float = 0
    altitude_max_ft: float = 48000

    # Time slider bounds (hours from now)
    time_offset_min_hours: float = -24
    time_offset_max_hours: float = 6

    # Polling
    refresh_interval: int = 300
    auto_refresh_enabled: bool = True

    # Logging
    log_level: str = "INFO"

    # Server
    port: int = 8000
    cors_origins: str = "*"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
