"""Declarative base and mixins for all pact-matrix ORM models.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python built-in types to portable SA column types.

Mixins
------
* **TimestampMixin** — ``created_at`` with a server default.
"""

from __future__ import annotations

import datetime

from sqlalchemy import Boolean, DateTime, Integer, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class MatrixBase(DeclarativeBase):
    """Shared declarative base for every pact-matrix table.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``bool``  → ``Boolean``
    * ``datetime.datetime`` → ``DateTime``
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        bool: Boolean,
        datetime.datetime: DateTime,
    }


class TimestampMixin:
    """Mixin that adds ``created_at`` with a server default.

    Uses ``CURRENT_TIMESTAMP`` which SQLite, PostgreSQL and MySQL all accept.
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )
