"""
Configuration for queueline: process settings and configuration files.

Usage::

    from queueline.core.config import get_settings, load_configurations

    settings = get_settings()
    configurations = load_configurations(settings.config_file)
"""

from .loader import configure_from_file, load_configurations
from .settings import QueuelineSettings, clear_settings_cache, get_settings

__all__ = [
    "QueuelineSettings",
    "get_settings",
    "clear_settings_cache",
    "load_configurations",
    "configure_from_file",
]
