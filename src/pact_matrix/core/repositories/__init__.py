"""Repositories over the contract store.

Architecture::

    ┌────────────────────────────────────────────────────────────────┐
    │  pact_matrix.matrix  (resolution, grouping, service)          │
    └────────────────────────────┬───────────────────────────────────┘
                                 │ uses
                                 ▼
    ┌────────────────────────────────────────────────────────────────┐
    │  pact_matrix.core.repositories  (this package)                │
    │                                                               │
    │  participants.py — ParticipantRepository                      │
    │  versions.py     — VersionRepository                          │
    │  matrix_rows.py  — MatrixRowRepository                        │
    └────────────────────────────────────────────────────────────────┘

Tags:
    repository, sqlalchemy, data-access, pact-matrix
"""

from pact_matrix.core.repositories.matrix_rows import MatrixRowRepository
from pact_matrix.core.repositories.participants import ParticipantRepository
from pact_matrix.core.repositories.versions import VersionRepository

__all__ = [
    "MatrixRowRepository",
    "ParticipantRepository",
    "VersionRepository",
]
