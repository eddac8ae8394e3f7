from __future__ import annotations

from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import MarketBaseSettings


class ServiceSettings(MarketBaseSettings):
    """Service identity reported by health checks."""

    model_config = SettingsConfigDict(
        env_prefix="SERVICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = "textbook-market-orders"
    version: str = "1.0.0"
    log_level: str = "INFO"
