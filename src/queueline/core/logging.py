"""
Structured logging for queueline.

Every module logs through ``get_logger(__name__)`` with dotted event names::

    logger = get_logger(__name__)
    logger.info("registry.adapter_created", config_name="default", adapter="Job")

Loggers sit on top of the standard library logger of the same name, so a
host application that never calls ``configure_logging`` sees queueline
events only where its own ``logging`` setup lets them through (by default
WARNING and above on stderr). Nothing is printed to stdout unasked.

``configure_logging`` installs the structlog processor chain, reading any
argument left as ``None`` from ``QueuelineSettings``::

    TimeStamper(iso) → contextvars → level → logger name → service.name
        → ECS key renames + JSONRenderer   (log_format == "json")
        → ConsoleRenderer                  (otherwise)

Each dispatch runs inside a ``LogContext`` carrying ``config_name``,
``operation`` and ``action``, so filter and adapter logs are attributed to
the call that produced them without passing those fields around.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from contextvars import Token
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_service = "queueline"


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service.name", _service)
    return event_dict


def _ecs_keys(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename ``timestamp`` / ``level`` to their ECS field names."""
    for key, ecs_key in (("timestamp", "@timestamp"), ("level", "log.level")):
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str | None = None,
    add_timestamp: bool = True,
) -> None:
    """Install the queueline processor chain.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (default: ``settings.log_level``)
        json_format: JSON or console output (default: ``settings.log_format``)
        service: Value of ``service.name`` (default: ``settings.service_name``)
        add_timestamp: Prefix every event with an ISO timestamp
    """
    from queueline.core.config.settings import get_settings

    global _service
    settings = get_settings()
    level = (level or settings.log_level).upper()
    if json_format is None:
        json_format = settings.log_format == "json"
    _service = service or settings.service_name

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
    if json_format:
        processors += [_ecs_keys, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    numeric_level = getattr(logging, level)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)


def get_logger(name: str | None = None) -> Any:
    """Structured logger backed by ``logging.getLogger(name)``."""
    return structlog.wrap_logger(logging.getLogger(name or "queueline"))


class LogContext:
    """Bind fields to every log event emitted inside the block.

    ``None`` values are skipped. On exit the previous values are restored,
    so nested contexts may rebind the same key.

    Example:
        with LogContext(config_name="default", action="send_email"):
            logger.info("job.queued")   # carries config_name and action
    """

    def __init__(self, **fields: Any):
        self._fields = {key: value for key, value in fields.items() if value is not None}
        self._tokens: Mapping[str, Token[Any]] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._fields)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)


__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
]
