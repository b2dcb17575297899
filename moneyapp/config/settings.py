"""
Configuration Management for MoneyApp Core

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Core components (API client, token manager, poller) never read the
environment themselves. The composition root reads these settings once
and passes plain values into constructors, so every component can be
built in tests without touching the environment.
"""

import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_DIR_NAME = "moneyapp"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform)."""
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


class ApiSettings(BaseSettings):
    """Backend API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONEYAPP_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    build: Literal["debug", "release"] = Field(
        default="release",
        description="Build flavour; selects which backend host is used"
    )
    debug_base_url: str = Field(
        default="http://localhost:8000",
        description="Backend origin for debug builds"
    )
    release_base_url: str = Field(
        default="https://api.money-app-backend.com",
        description="Backend origin for release builds"
    )
    timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Per-request timeout (seconds)"
    )
    user_agent: str = Field(
        default="moneyapp-core/1.0",
        min_length=1,
        description="User-Agent sent with every request"
    )

    @field_validator("debug_base_url", "release_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Base URLs must be absolute http(s) origins."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must start with http:// or https://, got {v!r}")
        return v.rstrip("/")

    @property
    def base_url(self) -> str:
        """Origin for the active build."""
        if self.build == "debug":
            return self.debug_base_url
        return self.release_base_url


class SecureStoreSettings(BaseSettings):
    """OS keychain / secure storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONEYAPP_KEYCHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    service_name: str = Field(
        default="com.moneyapp.ios.keychain",
        min_length=1,
        description="Keychain service namespace; keeps our secrets apart from other apps'"
    )
    access_token_key: str = Field(
        default="jwt_access_token",
        min_length=1,
        description="Credential key for the access token"
    )
    refresh_token_key: str = Field(
        default="jwt_refresh_token",
        min_length=1,
        description="Credential key for the refresh token"
    )
    preferences_path: Optional[Path] = Field(
        default=None,
        description="JSON file for non-secret session preferences (user id, last login)"
    )

    @property
    def resolved_preferences_path(self) -> Path:
        """Preferences file, defaulting to the per-user config dir."""
        return self.preferences_path or (get_user_config_dir() / "preferences.json")


class PollingSettings(BaseSettings):
    """Dashboard polling configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONEYAPP_POLLING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    interval_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Seconds between dashboard refreshes"
    )
    fire_immediately: bool = Field(
        default=True,
        description="Refresh as soon as polling starts instead of after the first interval"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Number of recent transactions shown on the dashboard"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode (logs at DEBUG whatever log_level says)"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False renders for a console)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def api(self) -> ApiSettings:
        return ApiSettings()

    @property
    def secure_store(self) -> SecureStoreSettings:
        return SecureStoreSettings()

    @property
    def polling(self) -> PollingSettings:
        return PollingSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings groups load.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the groups that failed.
    """
    results = {}
    settings = get_settings()

    for name in ("api", "secure_store", "polling", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
