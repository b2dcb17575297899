"""Configuration package."""

from moneyapp.config.settings import (
    ApiSettings,
    AppSettings,
    PollingSettings,
    SecureStoreSettings,
    Settings,
    get_settings,
    get_user_config_dir,
    validate_all_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "PollingSettings",
    "SecureStoreSettings",
    "Settings",
    "get_settings",
    "get_user_config_dir",
    "validate_all_settings",
]
