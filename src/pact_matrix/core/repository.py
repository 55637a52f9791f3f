"""Base repository over a SQLAlchemy session.

Provides :class:`BaseRepository`, the parent of every pact-matrix
repository.  It pairs a ``sqlalchemy.orm.Session`` with a handful of
helpers so domain repositories build SQLAlchemy 2.0 statements and never
touch the session's transaction directly.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   session: Session          ← owned by the caller                  │
    │                                                                    │
    │   scalars(stmt)             → list[ORM object]                     │
    │   first(stmt)               → ORM object | None                    │
    │   rows(stmt)                → list[Row]                            │
    │   execute(stmt)             → Result  (DML, wrapped errors)        │
    └────────────────────────────────────────────────────────────────────┘

The caller owns the transaction: repositories flush but never commit, so
a refresh and the deletion that triggered it can share one transaction.

Tags:
    repository, database, sqlalchemy, session
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Executable, Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pact_matrix.core.errors import DatabaseError


class BaseRepository:
    """Session-backed base class for data-access repositories.

    Parameters:
        session: A ``sqlalchemy.orm.Session`` whose transaction is managed
                 by the caller.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- Query helpers -----------------------------------------------------

    def scalars(self, stmt: Select[Any]) -> list[Any]:
        """Execute a SELECT and return the first column of every row."""
        return list(self.session.scalars(stmt).all())

    def first(self, stmt: Select[Any]) -> Any | None:
        """Execute a SELECT and return the first entity (or None)."""
        return self.session.scalars(stmt.limit(1)).first()

    def rows(self, stmt: Select[Any]) -> list[Any]:
        """Execute a SELECT and return the result rows."""
        return list(self.session.execute(stmt).all())

    # -- DML helpers -------------------------------------------------------

    def execute(self, stmt: Executable, *, operation: str = "execute") -> Any:
        """Execute a DML statement, wrapping driver errors in :class:`DatabaseError`."""
        try:
            return self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise DatabaseError(f"{operation} failed: {exc}", cause=exc).with_context(
                operation=operation
            ) from exc

    def flush(self) -> None:
        self.session.flush()


__all__ = [
    "BaseRepository",
]
