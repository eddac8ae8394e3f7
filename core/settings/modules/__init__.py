# Settings modules
from .app_settings import AppSettings, get_app_settings
from .database_settings import DatabaseSettings
from .lifecycle_settings import LifecycleSettings
from .paystack_settings import PaystackSettings
from .service_settings import ServiceSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "DatabaseSettings",
    "LifecycleSettings",
    "PaystackSettings",
    "ServiceSettings",
]
