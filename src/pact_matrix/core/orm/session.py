"""SQLAlchemy engine factory and session helpers.

This module provides:

* ``create_matrix_engine``    -- Create a SA engine from a URL.
* ``MatrixSession``           -- A pre-configured ``Session`` subclass.
* ``matrix_session_factory``  -- ``sessionmaker`` producing ``MatrixSession``.

Tags:
    pact-matrix, orm, sqlalchemy, session, engine
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pact_matrix.core.errors import ConfigError


def _create_engine(url: str, **kwargs: Any) -> Engine:
    try:
        return _sa_create_engine(url, **kwargs)
    except ArgumentError as exc:
        raise ConfigError(f"Invalid database URL: {exc}", cause=exc) from exc


def create_matrix_engine(
    url: str = "sqlite:///pact_matrix.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, log all SQL to stdout.
    pool_size, max_overflow:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.

    Raises
    ------
    ConfigError
        If *url* cannot be parsed or names an unknown dialect.
    """

    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        # An in-memory database only lives as long as its connection
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs.setdefault("poolclass", StaticPool)

        engine = _create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow

    return _create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class MatrixSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Matrix lines are converted to plain values before they leave a
    repository, but lookups of participants and versions hand ORM objects
    to the caller, so attributes must stay readable after commit.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def matrix_session_factory(engine: Engine) -> sessionmaker[MatrixSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``MatrixSession`` instances."""
    return sessionmaker(bind=engine, class_=MatrixSession)
