"""
Load named configurations from a TOML file.

Each top-level table is one configuration::

    [default]
    adapter = "Job"
    servers = ["127.0.0.1:4730"]
    filters = ["log"]

    [reports]
    servers = "10.0.0.5:4730"     # a single server is fine too
    queue = "reports"             # adapter-specific, passed through

    [mail."*"]                    # shared by every environment
    adapter = "Job"
    [mail.production]             # picked when QUEUELINE_ENVIRONMENT=production
    servers = ["10.0.1.1:4730"]

Filters given in a file are necessarily names; they are resolved through
the filter catalog at dispatch time.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from queueline.core.logging import get_logger

if TYPE_CHECKING:
    from queueline.execution.registry import ConfigRegistry

logger = get_logger(__name__)


def load_configurations(path: str | Path) -> dict[str, Any]:
    """Read a TOML file and return its ``name -> settings`` mapping.

    Top-level keys that are not tables are kept as-is so the registry can
    reject them with ``ConfigurationInvalid`` when they are used.

    Raises:
        FileNotFoundError: If *path* does not exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    path = Path(path)
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    logger.debug("config.file_loaded", path=str(path), names=sorted(data))
    return data


def configure_from_file(registry: ConfigRegistry, path: str | Path) -> list[str]:
    """Register every configuration found in *path*; return their names."""
    configurations = load_configurations(path)
    registry.config(configurations)
    return sorted(configurations)
