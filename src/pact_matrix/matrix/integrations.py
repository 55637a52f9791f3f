"""Integration graph — who has exchanged a pact with whom.

Tags:
    pact-matrix, integrations, graph
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pact_matrix.core.repositories import MatrixRowRepository, ParticipantRepository
from pact_matrix.matrix.types import Integration, ResolvedSelector


class IntegrationGrapher:
    """Discover integrations touching a set of participants.

    Only direct integrations are returned; the graph is never walked
    further than one hop from the given names.
    """

    def __init__(self, participants: ParticipantRepository, rows: MatrixRowRepository) -> None:
        self.participants = participants
        self.rows = rows

    def find_integrations(self, participant_names: Iterable[str]) -> tuple[Integration, ...]:
        """Deduplicated integrations with any of ``participant_names`` on either side."""
        ids = [
            participant_id
            for participant_id in (self.participants.find_id_by_name(n) for n in participant_names)
            if participant_id is not None
        ]
        return tuple(dict.fromkeys(self.rows.find_integrations(ids)))

    def integrated_participant_names(self, participant_names: Iterable[str]) -> list[str]:
        """Every participant name appearing in an integration with the given names.

        The given names themselves are included when they have integrations.
        """
        names: dict[str, None] = {}
        for integration in self.find_integrations(participant_names):
            for name in integration.participant_names:
                names.setdefault(name, None)
        return list(names)

    def integrations_between(
        self, selectors: Sequence[ResolvedSelector]
    ) -> tuple[Integration, ...]:
        """Integrations relevant to a query over ``selectors``.

        With one named participant every integration touching it is
        relevant; with several, only integrations whose both sides are among
        them.  This mirrors how the matrix query matches selectors.
        """
        ids = list(dict.fromkeys(s.participant_id for s in selectors if s.participant_id is not None))
        if not ids:
            return ()
        integrations = dict.fromkeys(self.rows.find_integrations(ids))
        if len({s.participant_name.casefold() for s in selectors}) == 1:
            return tuple(integrations)
        wanted = set(ids)
        return tuple(
            integration
            for integration in integrations
            if integration.consumer_id in wanted and integration.provider_id in wanted
        )
