"""
Structured error types for queueline.

Every failure the dispatch layer itself raises is a ``QueuelineError``.
Errors carry a category, a retryable flag, optional context (which
configuration, adapter or action was involved) and the chained cause, so
callers can log or route them without parsing messages.

Architecture:
    ::

        QueuelineError                 (INTERNAL)
          ├── ConfigError              (CONFIG, never retryable)
          │     ├── ConfigurationMissing
          │     ├── ConfigurationInvalid
          │     ├── NoServersDefined
          │     └── AdapterNotFound
          ├── FilterError              (FILTER)
          │     ├── FilterNotFound
          │     └── FilterChainError
          └── JobError                 (JOB)
                └── JobNotFound

Errors raised by filters or adapters are NOT wrapped: they reach the caller
exactly as raised.

Examples:
    >>> error = ConfigurationMissing("default")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> error.retryable
    False
    >>> error.context.config_name
    'default'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"
    FILTER = "FILTER"
    JOB = "JOB"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error."""

    config_name: str | None = None
    adapter: str | None = None
    action: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.config_name is not None:
            result["config_name"] = self.config_name
        if self.adapter is not None:
            result["adapter"] = self.adapter
        if self.action is not None:
            result["action"] = self.action
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result


class QueuelineError(Exception):
    """Base class for all queueline errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> QueuelineError:
        """Add context to this error (fluent API).

        Usage:
            raise JobError("handler failed").with_context(action="send")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS (Never Retryable)
# =============================================================================


class ConfigError(QueuelineError):
    """A named configuration cannot be used."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False

    def __init__(self, name: str | None, message: str, **kwargs: Any):
        kwargs.setdefault("context", ErrorContext(config_name=name))
        super().__init__(message, **kwargs)
        self.name = name


class ConfigurationMissing(ConfigError):
    """No settings were ever registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(name, f"Configuration {name!r} has not been defined.")


class ConfigurationInvalid(ConfigError):
    """Stored settings are not a mapping."""

    def __init__(self, name: str, value: Any):
        super().__init__(
            name,
            f"Invalid configuration {name!r}: expected a mapping, got {type(value).__name__}",
        )
        self.value = value


class NoServersDefined(ConfigError):
    """The normalized ``servers`` sequence is empty."""

    def __init__(self, name: str):
        super().__init__(
            name,
            f'No servers defined for configuration {name!r}. Add them to the "servers" setting',
        )


class AdapterNotFound(ConfigError):
    """The configuration names an adapter identifier nobody registered."""

    def __init__(self, adapter: str, available: list[str], name: str | None = None):
        super().__init__(
            name,
            f"No adapter registered as {adapter!r}. Available adapters: {available or 'none'}",
            context=ErrorContext(config_name=name, adapter=adapter),
        )
        self.adapter = adapter
        self.available = available


# =============================================================================
# FILTER ERRORS
# =============================================================================


class FilterError(QueuelineError):
    """Base class for filter resolution and chain misuse."""

    default_category = ErrorCategory.FILTER
    default_retryable = False


class FilterNotFound(FilterError):
    """A string filter spec did not match any registered filter."""

    def __init__(self, spec: str, available: list[str]):
        super().__init__(f"No filter registered as {spec!r}. Available filters: {available or 'none'}")
        self.spec = spec
        self.available = available


class FilterChainError(FilterError):
    """A filter broke the chain contract (e.g. delegated twice)."""


# =============================================================================
# JOB ERRORS
# =============================================================================


class JobError(QueuelineError):
    """A job could not be submitted or executed by an in-process adapter."""

    default_category = ErrorCategory.JOB
    default_retryable = False


class JobNotFound(JobError):
    """No handler is registered for the requested action."""

    def __init__(self, action: str, available: list[str]):
        super().__init__(
            f"No job handler registered for {action!r}. Available jobs: {available or 'none'}",
            context=ErrorContext(action=action),
        )
        self.action = action
        self.available = available


# =============================================================================
# UTILITIES
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable.

    Non-queueline exceptions are considered not retryable.
    """
    if isinstance(error, QueuelineError):
        return error.retryable
    return False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error, ``UNKNOWN`` for foreign exceptions."""
    if isinstance(error, QueuelineError):
        return error.category
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "QueuelineError",
    "ConfigError",
    "ConfigurationMissing",
    "ConfigurationInvalid",
    "NoServersDefined",
    "AdapterNotFound",
    "FilterError",
    "FilterNotFound",
    "FilterChainError",
    "JobError",
    "JobNotFound",
    "is_retryable",
    "categorize_error",
]
