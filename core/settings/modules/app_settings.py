from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.modules.database_settings import DatabaseSettings
from core.settings.modules.lifecycle_settings import LifecycleSettings
from core.settings.modules.paystack_settings import PaystackSettings
from core.settings.modules.service_settings import ServiceSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    service: ServiceSettings
    lifecycle: LifecycleSettings
    database: DatabaseSettings
    paystack: PaystackSettings


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        service=ServiceSettings(),
        lifecycle=LifecycleSettings(),
        database=DatabaseSettings(),
        paystack=PaystackSettings(),
    )
