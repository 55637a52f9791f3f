"""SQLAlchemy 2.0 ORM layer for pact-matrix.

Modules
-------
base        MatrixBase (declarative base) + TimestampMixin
session     Engine factory, MatrixSession, session factory
tables      Source tables and the materialized matrix projections

Tags:
    pact-matrix, orm, sqlalchemy, declarative

Doc-Types:
    package-overview, module-index
"""

from __future__ import annotations

from pact_matrix.core.orm.base import MatrixBase, TimestampMixin
from pact_matrix.core.orm.session import (
    MatrixSession,
    create_matrix_engine,
    matrix_session_factory,
)
from pact_matrix.core.orm.tables import (
    HeadMatrixRowTable,
    MatrixRowTable,
    PactPublicationTable,
    ParticipantTable,
    TagTable,
    VerificationTable,
    VersionTable,
)

__all__ = [
    "MatrixBase",
    "TimestampMixin",
    "create_matrix_engine",
    "MatrixSession",
    "matrix_session_factory",
    "ParticipantTable",
    "VersionTable",
    "TagTable",
    "PactPublicationTable",
    "VerificationTable",
    "MatrixRowTable",
    "HeadMatrixRowTable",
]
