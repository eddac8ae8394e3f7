from __future__ import annotations

from datetime import timedelta

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import MarketBaseSettings


class LifecycleSettings(MarketBaseSettings):
    """
    Order lifecycle windows.
    Loaded from environment variables prefixed with ORDER_.
    """

    model_config = SettingsConfigDict(
        env_prefix="ORDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    commit_window_hours: int = Field(default=48, gt=0)
    commit_reminder_lookahead_hours: int = Field(default=12, gt=0)
    collection_window_days: int = Field(default=7, gt=0)
    collection_reminder_lookahead_hours: int = Field(default=24, gt=0)
    sweep_batch_limit: int = Field(default=500, ge=1, le=10_000)

    @property
    def commit_window(self) -> timedelta:
        return timedelta(hours=self.commit_window_hours)

    @property
    def commit_reminder_lookahead(self) -> timedelta:
        return timedelta(hours=self.commit_reminder_lookahead_hours)

    @property
    def collection_window(self) -> timedelta:
        return timedelta(days=self.collection_window_days)

    @property
    def collection_reminder_lookahead(self) -> timedelta:
        return timedelta(hours=self.collection_reminder_lookahead_hours)
