"""Ambient infrastructure for pact-matrix: errors, logging, settings and storage."""

from pact_matrix.core.errors import (
    ConfigError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    MatrixError,
    NotFoundError,
    ValidationError,
)
from pact_matrix.core.logging import (
    LogContext,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from pact_matrix.core.settings import MatrixSettings

__all__ = [
    "ConfigError",
    "DatabaseError",
    "ErrorCategory",
    "ErrorContext",
    "MatrixError",
    "NotFoundError",
    "ValidationError",
    "LogContext",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "MatrixSettings",
]
