# Settings package
from core.settings.modules import (
    AppSettings,
    DatabaseSettings,
    LifecycleSettings,
    PaystackSettings,
    ServiceSettings,
    get_app_settings,
)

__all__ = [
    "get_app_settings",
    "AppSettings",
    "DatabaseSettings",
    "LifecycleSettings",
    "PaystackSettings",
    "ServiceSettings",
]
