"""
Structured error types for the compatibility matrix.

Provides a small hierarchy of typed errors with metadata for error
categorisation, client-facing translation and root cause analysis through
error chaining.

Every error raised by ``pact_matrix`` extends :class:`MatrixError` and
carries:

- **Category:** What kind of error (validation, source, config, database)
- **Retryable:** Whether repeating the same call could succeed
- **Context:** Participant name, tag and version number involved
- **Cause:** Chained underlying exception

Manifesto:
    - **Typed Error Hierarchy:** Resolution failures are distinguishable
      from bad input and from storage failures
    - **Rich Context:** The caller can build a user-facing message without
      parsing the error string
    - **Propagate, don't recover:** The matrix never swallows a resolution
      error; the layer above translates it (e.g. into a 400 response)

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                       MatrixError                          │
        │  (category, retryable, context, cause)                     │
        ├───────────────────────────────────────────────────────────┤
        │  NotFoundError      ValidationError      ConfigError       │
        │  (SOURCE)           (VALIDATION)         (CONFIG)          │
        │                                                            │
        │  DatabaseError                                             │
        │  (DATABASE)                                                │
        └───────────────────────────────────────────────────────────┘

Examples:
    >>> error = NotFoundError.for_selector("Zoo App", tag="prod")
    >>> str(error)
    'No version of Zoo App found with tag prod'
    >>> error.context.tag
    'prod'

Tags:
    error-handling, exception-hierarchy, error-context, pact-matrix

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories used for classification and routing."""

    SOURCE = "SOURCE"             # Referenced participant/version/tag missing
    VALIDATION = "VALIDATION"     # Malformed selectors or options
    CONFIG = "CONFIG"             # Missing or invalid settings
    DATABASE = "DATABASE"         # Storage query or refresh failure
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to a :class:`MatrixError`.

    Only fields that are set are emitted by :meth:`to_dict`, so the
    serialised context stays small in log lines.

    Attributes:
        participant_name: Participant the failing selector referred to
        version_number: Version number the selector referred to
        tag: Tag the selector referred to
        metadata: Additional key-value pairs
    """

    participant_name: str | None = None
    version_number: str | None = None
    tag: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["participant_name", "version_number", "tag"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class MatrixError(Exception):
    """
    Base exception for all compatibility matrix errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only need to supply a message and, where useful, context.

    Examples:
        >>> error = MatrixError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(participant_name="Foo").context.participant_name
        'Foo'
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

    def with_context(self, **kwargs: Any) -> MatrixError:
        """
        Add context to this error (fluent API).

        Unknown keys land in ``context.metadata``.
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
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
# RESOLUTION ERRORS
# =============================================================================


class NotFoundError(MatrixError):
    """
    A ``latest`` and/or ``tag`` selector matched no version.

    An unknown participant name on its own is *not* an error; it resolves
    to a null identifier and an empty result. Asking for the latest or a
    tagged version implies the caller expects one to exist, so the absence
    is surfaced.
    """

    default_category = ErrorCategory.SOURCE
    default_retryable = False

    @classmethod
    def for_selector(cls, participant_name: str, tag: str | None = None) -> NotFoundError:
        if tag is not None:
            message = f"No version of {participant_name} found with tag {tag}"
        else:
            message = f"No version of {participant_name} found"
        return cls(message, context=ErrorContext(participant_name=participant_name, tag=tag))


class ValidationError(MatrixError):
    """
    Selector or options validation error.

    Never retryable - the input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field_name = field_name

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field_name is not None:
            result["field"] = self.field_name
        return result


class ConfigError(MatrixError):
    """Invalid configuration. Never retryable."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class DatabaseError(MatrixError):
    """Storage query or materialized view refresh error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "MatrixError",
    "NotFoundError",
    "ValidationError",
    "ConfigError",
    "DatabaseError",
]
