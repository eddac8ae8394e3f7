from __future__ import annotations

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from core.settings.base_settings import MarketBaseSettings


class PaystackSettings(MarketBaseSettings):
    """
    Paystack refund API settings.
    When disabled, refund requests are only recorded for a downstream processor.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAYSTACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = False
    secret_key: str = ""
    base_url: str = "https://api.paystack.co"
    currency: str = Field(default="ZAR", min_length=3, max_length=3)
    timeout_seconds: float = Field(default=15.0, gt=0)
