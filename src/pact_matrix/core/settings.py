"""Settings for the compatibility matrix.

``MatrixSettings`` reads the database URL and logging options from the
environment (prefix ``PACT_MATRIX_``) or a ``.env`` file.

Examples:
    >>> settings = MatrixSettings(database_url="sqlite:///:memory:")
    >>> settings.log_level
    'INFO'

Tags:
    settings, configuration, pydantic, environment, pact-matrix
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class MatrixSettings(BaseSettings):
    """Environment-driven settings.

    Fields
    ──────
    database_url : SQLAlchemy URL of the store holding the matrix tables
    echo_sql     : Log every SQL statement (SQLAlchemy ``echo``)
    log_level    : Structlog log level
    log_json     : JSON log output; ``None`` auto-detects from the TTY
    service_name : ``service.name`` attached to every log line
    """

    model_config = SettingsConfigDict(
        env_prefix="PACT_MATRIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite:///pact_matrix.db",
        description="SQLAlchemy database URL",
    )
    echo_sql: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "pact-matrix"

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {value!r}")
        return level


__all__ = ["MatrixSettings"]
