"""Participant repository — name to identity lookups.

Tags:
    pact-matrix, repository, participants
"""

from __future__ import annotations

from sqlalchemy import func, select

from pact_matrix.core.orm.tables import ParticipantTable
from pact_matrix.core.repository import BaseRepository


def name_equals(column, name: str):
    """Case-insensitive equality (not a substring match).

    Both sides are folded by the database so a stored name always matches
    itself, whatever characters it contains.
    """
    return func.lower(column) == func.lower(name)


class ParticipantRepository(BaseRepository):
    """Read access to ``participants``."""

    def find_by_name(self, name: str) -> ParticipantTable | None:
        """Find a participant by case-insensitive name."""
        return self.first(
            select(ParticipantTable)
            .where(name_equals(ParticipantTable.name, name))
            .order_by(ParticipantTable.id)
        )

    def find_id_by_name(self, name: str) -> int | None:
        participant = self.find_by_name(name)
        return participant.id if participant is not None else None
