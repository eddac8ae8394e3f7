# core/settings/base_settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketBaseSettings(BaseSettings):
    """Common loading rules: environment first, then ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
