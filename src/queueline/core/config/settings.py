"""
Process-wide settings for queueline.

:class:`QueuelineSettings` holds the knobs that are not part of any named
configuration: which adapter an unset ``adapter`` key means, whether
``run`` injects the configuration name into adapter options, where the CLI
finds its configuration file, and how logging is rendered.

All fields can be set through ``QUEUELINE_*`` environment variables (e.g.
``QUEUELINE_DEFAULT_ADAPTER=Stub``) or a ``.env`` file.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueuelineSettings(BaseSettings):
    """queueline configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Dispatch ─────────────────────────────────────────────────
    default_adapter: str = Field(default="Job", description="Adapter used when a configuration sets none")
    inject_config_name: bool = Field(
        default=True,
        description="Add the configuration name to the options passed to adapter.run()",
    )
    environment: str | None = Field(
        default=None,
        description="Environment block picked from configurations segregated by environment",
    )

    # ── Configuration file ───────────────────────────────────────
    config_file: str | None = Field(default=None, description="TOML file with named configurations")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")
    service_name: str = Field(default="queueline")


_settings_cache: dict[str, QueuelineSettings] = {}


def get_settings(*, _force_reload: bool = False) -> QueuelineSettings:
    """Load, validate, and cache a :class:`QueuelineSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = QueuelineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
