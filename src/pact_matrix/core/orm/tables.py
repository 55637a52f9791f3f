"""SQLAlchemy 2.0 ORM table definitions for pact-matrix.

Manifesto:
    The matrix engine reads a denormalized projection of the contract
    store.  The source tables (participants, versions, tags, pact
    publications, verifications) are the facts; ``materialized_matrix``
    and ``materialized_head_matrix`` are recomputed from them by
    :class:`~pact_matrix.core.repositories.matrix_rows.MatrixRowRepository`
    and never written directly by anything else.

Tables
------
* ``participants``             -- named services
* ``versions``                 -- numbered releases, ``order`` = creation order
* ``tags``                     -- labels on versions (``prod``, ``main``, ...)
* ``pact_publications``        -- contract revisions per consumer version/provider
* ``verifications``            -- results of replaying a publication against a provider version
* ``materialized_matrix``      -- publications LEFT JOIN verifications, denormalized
* ``materialized_head_matrix`` -- matrix lines of the latest (and latest tagged)
  consumer version per consumer/provider

Tags:
    pact-matrix, orm, sqlalchemy, tables, schema-mapping

Doc-Types:
    api-reference, data-model

Usage::

    from pact_matrix.core.orm import MatrixBase, create_matrix_engine

    engine = create_matrix_engine("sqlite:///:memory:")
    MatrixBase.metadata.create_all(engine)
"""

from __future__ import annotations

import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pact_matrix.core.orm.base import MatrixBase, TimestampMixin

_NOW = text("CURRENT_TIMESTAMP")


# =============================================================================
# Source facts
# =============================================================================


class ParticipantTable(TimestampMixin, MatrixBase):
    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    versions: Mapped[list[VersionTable]] = relationship(
        "VersionTable", back_populates="participant", cascade="all, delete-orphan"
    )


class VersionTable(TimestampMixin, MatrixBase):
    __tablename__ = "versions"
    __table_args__ = (
        UniqueConstraint("participant_id", "number", name="uq_versions_participant_number"),
        Index("ix_versions_participant_order", "participant_id", "order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    participant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    number: Mapped[str] = mapped_column(Text, nullable=False)
    order: Mapped[int] = mapped_column("order", Integer, nullable=False)

    # --- relationships ---
    participant: Mapped[ParticipantTable] = relationship(
        "ParticipantTable", back_populates="versions"
    )
    tags: Mapped[list[TagTable]] = relationship(
        "TagTable", back_populates="version", cascade="all, delete-orphan"
    )


class TagTable(TimestampMixin, MatrixBase):
    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(Text, primary_key=True)
    version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("versions.id", ondelete="CASCADE"), primary_key=True
    )

    version: Mapped[VersionTable] = relationship("VersionTable", back_populates="tags")


class PactPublicationTable(TimestampMixin, MatrixBase):
    __tablename__ = "pact_publications"
    __table_args__ = (
        UniqueConstraint(
            "consumer_version_id",
            "provider_id",
            "revision_number",
            name="uq_pact_publications_revision",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    consumer_version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("versions.id", ondelete="CASCADE"), nullable=False
    )
    provider_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False
    )
    revision_number: Mapped[int] = mapped_column(Integer, nullable=False)


class VerificationTable(MatrixBase):
    __tablename__ = "verifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pact_publication_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("pact_publications.id", ondelete="CASCADE"), nullable=False
    )
    provider_version_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("versions.id", ondelete="CASCADE"), nullable=False
    )
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    execution_date: Mapped[datetime.datetime] = mapped_column(
        DateTime, nullable=False, server_default=_NOW
    )


# =============================================================================
# Materialized projections
# =============================================================================


class _MatrixColumns:
    """Columns shared by the matrix and the head matrix."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    consumer_id: Mapped[int] = mapped_column(Integer, nullable=False)
    consumer_name: Mapped[str] = mapped_column(Text, nullable=False)
    consumer_version_id: Mapped[int] = mapped_column(Integer, nullable=False)
    consumer_version_number: Mapped[str] = mapped_column(Text, nullable=False)
    consumer_version_order: Mapped[int] = mapped_column(Integer, nullable=False)

    pact_publication_id: Mapped[int] = mapped_column(Integer, nullable=False)
    pact_revision_number: Mapped[int] = mapped_column(Integer, nullable=False)
    pact_created_at: Mapped[datetime.datetime] = mapped_column(DateTime, nullable=False)

    provider_id: Mapped[int] = mapped_column(Integer, nullable=False)
    provider_name: Mapped[str] = mapped_column(Text, nullable=False)
    provider_version_id: Mapped[int | None] = mapped_column(Integer)
    provider_version_number: Mapped[str | None] = mapped_column(Text)
    provider_version_order: Mapped[int | None] = mapped_column(Integer)

    verification_id: Mapped[int | None] = mapped_column(Integer)
    success: Mapped[bool | None] = mapped_column(Boolean)
    verification_executed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime)


class MatrixRowTable(_MatrixColumns, MatrixBase):
    __tablename__ = "materialized_matrix"
    __table_args__ = (
        Index("ix_matrix_consumer", "consumer_id", "consumer_version_id"),
        Index("ix_matrix_provider", "provider_id", "provider_version_id"),
    )

    # --- relationships (eager-loaded by the matrix query) ---
    consumer_version_tags: Mapped[list[TagTable]] = relationship(
        "TagTable",
        primaryjoin="foreign(TagTable.version_id) == MatrixRowTable.consumer_version_id",
        order_by="TagTable.name",
        viewonly=True,
    )
    provider_version_tags: Mapped[list[TagTable]] = relationship(
        "TagTable",
        primaryjoin="foreign(TagTable.version_id) == MatrixRowTable.provider_version_id",
        order_by="TagTable.name",
        viewonly=True,
    )


class HeadMatrixRowTable(_MatrixColumns, MatrixBase):
    __tablename__ = "materialized_head_matrix"
    __table_args__ = (
        Index("ix_head_matrix_consumer_tag", "consumer_id", "consumer_tag_name"),
    )

    # NULL for the overall latest consumer version
    consumer_tag_name: Mapped[str | None] = mapped_column(Text)


MATRIX_COLUMNS = (
    "consumer_id",
    "consumer_name",
    "consumer_version_id",
    "consumer_version_number",
    "consumer_version_order",
    "pact_publication_id",
    "pact_revision_number",
    "pact_created_at",
    "provider_id",
    "provider_name",
    "provider_version_id",
    "provider_version_number",
    "provider_version_order",
    "verification_id",
    "success",
    "verification_executed_at",
)


__all__ = [
    "ParticipantTable",
    "VersionTable",
    "TagTable",
    "PactPublicationTable",
    "VerificationTable",
    "MatrixRowTable",
    "HeadMatrixRowTable",
    "MATRIX_COLUMNS",
]
