"""Version repository — version number, latest and tag lookups.

"Latest" always means the highest ``versions.order``, i.e. the most
recently created version.

Tags:
    pact-matrix, repository, versions, tags
"""

from __future__ import annotations

from sqlalchemy import Select, select

from pact_matrix.core.orm.tables import ParticipantTable, TagTable, VersionTable
from pact_matrix.core.repositories.participants import name_equals
from pact_matrix.core.repository import BaseRepository


class VersionRepository(BaseRepository):
    """Read access to ``versions`` and ``tags``."""

    def _for_participant(self, participant_name: str) -> Select:
        return (
            select(VersionTable)
            .join(ParticipantTable, ParticipantTable.id == VersionTable.participant_id)
            .where(name_equals(ParticipantTable.name, participant_name))
        )

    def _tagged(self, participant_name: str, tag: str) -> Select:
        return self._for_participant(participant_name).join(
            TagTable, TagTable.version_id == VersionTable.id
        ).where(TagTable.name == tag)

    def find_by_participant_name_and_number(
        self, participant_name: str, number: str
    ) -> VersionTable | None:
        return self.first(
            self._for_participant(participant_name).where(VersionTable.number == number)
        )

    def find_latest_by_participant_name(self, participant_name: str) -> VersionTable | None:
        return self.first(
            self._for_participant(participant_name).order_by(VersionTable.order.desc())
        )

    def find_by_participant_name_and_latest_tag(
        self, participant_name: str, tag: str
    ) -> VersionTable | None:
        return self.first(
            self._tagged(participant_name, tag).order_by(VersionTable.order.desc())
        )

    def find_by_participant_name_and_tag(
        self, participant_name: str, tag: str
    ) -> list[VersionTable]:
        """Every version ever tagged with ``tag``, oldest first."""
        return self.scalars(
            self._tagged(participant_name, tag).order_by(VersionTable.order.asc())
        )
