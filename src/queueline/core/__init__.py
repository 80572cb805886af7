"""
queueline core: errors, logging, and configuration shared by every layer.
"""

from .errors import (
    AdapterNotFound,
    ConfigError,
    ConfigurationInvalid,
    ConfigurationMissing,
    ErrorCategory,
    ErrorContext,
    FilterChainError,
    FilterError,
    FilterNotFound,
    JobError,
    JobNotFound,
    NoServersDefined,
    QueuelineError,
    categorize_error,
    is_retryable,
)
from .logging import LogContext, configure_logging, get_logger

__all__ = [
    # Errors
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
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
]
