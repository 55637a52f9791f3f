"""Identity resolution — participant and version names to store identifiers.

An unknown participant name or version number is not an error here: it
resolves to a ``None`` identifier, and a selector carrying one simply
matches no matrix line.

Tags:
    pact-matrix, identity, resolution
"""

from __future__ import annotations

from pact_matrix.core.logging import get_logger
from pact_matrix.core.repositories import ParticipantRepository, VersionRepository
from pact_matrix.matrix.types import (
    ANY_VERSION,
    ByName,
    ByVersion,
    RefreshCriteria,
    RefreshFilter,
    ResolvedSelector,
    SpecificVersion,
    VersionRef,
)

logger = get_logger(__name__)


class IdentityResolver:
    """Attach store identifiers to concrete selectors."""

    def __init__(self, participants: ParticipantRepository, versions: VersionRepository) -> None:
        self.participants = participants
        self.versions = versions

    def participant_id(self, name: str) -> int | None:
        return self.participants.find_id_by_name(name)

    def version_ref(self, participant_name: str, version_number: str | None) -> VersionRef:
        """``AnyVersion`` when no number is given, else ``SpecificVersion``."""
        if version_number is None:
            return ANY_VERSION
        version = self.versions.find_by_participant_name_and_number(participant_name, version_number)
        return SpecificVersion(version_number, version.id if version is not None else None)

    def resolve(self, selector: ByName | ByVersion) -> ResolvedSelector:
        name = selector.participant_name
        participant_id = self.participant_id(name)
        if isinstance(selector, ByVersion) and participant_id is not None:
            version = self.version_ref(name, selector.version_number)
        elif isinstance(selector, ByVersion):
            version = SpecificVersion(selector.version_number, None)
        else:
            version = ANY_VERSION

        resolved = ResolvedSelector(name, participant_id, version)
        if not resolved.exists:
            logger.debug(
                "matrix_selector_unresolved",
                participant_name=name,
                version_number=resolved.version_number,
            )
        return resolved

    def resolve_refresh_criteria(self, refresh_filter: RefreshFilter) -> RefreshCriteria:
        """Look up the ids a refresh should be restricted to.

        Names that match no participant leave the corresponding id unset.
        """

        def lookup(name: str | None) -> int | None:
            return self.participant_id(name) if name else None

        return RefreshCriteria(
            consumer_id=lookup(refresh_filter.consumer_name),
            provider_id=lookup(refresh_filter.provider_name),
            participant_id=lookup(refresh_filter.participant_name),
            tag_name=refresh_filter.tag_name or None,
        )
