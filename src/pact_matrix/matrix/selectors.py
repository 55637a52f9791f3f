"""Selector resolution — abstract selectors to identifier-bearing selectors.

Manifesto:
    Callers describe what they want loosely ("the latest prod version of
    Foo", "every version of Bar ever tagged main").  Before the matrix is
    queried every selector is pinned to concrete version numbers and then
    to store identifiers.

Architecture:
    ::

        ByTagLatest ─► latest version with tag ─┐   NotFoundError if none
        Latest      ─► latest version          ─┤   NotFoundError if none
        ByTag       ─► every tagged version    ─┤   NotFoundError if none
        ByVersion   ─────────────────────────────┤
        ByName      ─────────────────────────────┘
                                                 ▼
                                   IdentityResolver.resolve()
                                                 ▼
                                     ResolvedSelector(...)

    When the options ask for ``latest`` and/or ``tag``, a second phase
    infers the partners of the explicitly named participants (one hop
    through the integration graph) and resolves them the same way.

Tags:
    pact-matrix, selectors, resolution, inference

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pact_matrix.core.errors import NotFoundError
from pact_matrix.core.logging import get_logger
from pact_matrix.core.repositories import VersionRepository
from pact_matrix.matrix.identity import IdentityResolver
from pact_matrix.matrix.integrations import IntegrationGrapher
from pact_matrix.matrix.types import (
    ByName,
    ByTag,
    ByTagLatest,
    ByVersion,
    Latest,
    MatrixOptions,
    ResolvedSelector,
    Selector,
)

logger = get_logger(__name__)


class SelectorResolver:
    """Expand selectors into a flat, deduplicated tuple of resolved selectors."""

    def __init__(
        self,
        identity: IdentityResolver,
        versions: VersionRepository,
        integrations: IntegrationGrapher,
    ) -> None:
        self.identity = identity
        self.versions = versions
        self.integrations = integrations

    def resolve(
        self, selectors: Sequence[Selector], options: MatrixOptions
    ) -> tuple[ResolvedSelector, ...]:
        resolved = self._resolve_all(selectors)
        if options.infers_selectors:
            resolved += self._resolve_all(self.infer_selectors(selectors, options))
        return tuple(dict.fromkeys(resolved))

    def infer_selectors(
        self, selectors: Sequence[Selector], options: MatrixOptions
    ) -> list[Selector]:
        """Selectors for every direct partner of the explicitly named participants.

        Each partner gets the broad ``tag``/``latest`` of ``options``.
        """
        specified = list(dict.fromkeys(s.participant_name for s in selectors))
        specified_folded = {name.casefold() for name in specified}
        inferred_names = [
            name
            for name in self.integrations.integrated_participant_names(specified)
            if name.casefold() not in specified_folded
        ]
        inferred = [_broad_selector(name, options) for name in inferred_names]
        if inferred:
            logger.debug(
                "matrix_selectors_inferred",
                specified=specified,
                inferred=inferred_names,
            )
        return inferred

    def _resolve_all(self, selectors: Iterable[Selector]) -> list[ResolvedSelector]:
        return [
            self.identity.resolve(concrete)
            for selector in selectors
            for concrete in self.look_up_version_numbers(selector)
        ]

    def look_up_version_numbers(self, selector: Selector) -> list[ByName | ByVersion]:
        """Pin ``latest``/``tag`` selectors to explicit version numbers.

        Raises:
            NotFoundError: when a tag or latest selector matches no version.
        """
        name = selector.participant_name
        match selector:
            case ByTagLatest(tag=tag):
                version = self.versions.find_by_participant_name_and_latest_tag(name, tag)
                if version is None:
                    raise _not_found(name, tag)
                return [ByVersion(name, version.number)]
            case Latest():
                version = self.versions.find_latest_by_participant_name(name)
                if version is None:
                    raise _not_found(name)
                return [ByVersion(name, version.number)]
            case ByTag(tag=tag):
                versions = self.versions.find_by_participant_name_and_tag(name, tag)
                if not versions:
                    raise _not_found(name, tag)
                return [ByVersion(name, version.number) for version in versions]
            case _:
                return [selector]


def _broad_selector(name: str, options: MatrixOptions) -> Selector:
    if options.tag is not None and options.latest:
        return ByTagLatest(name, options.tag)
    if options.tag is not None:
        return ByTag(name, options.tag)
    return Latest(name)


def _not_found(participant_name: str, tag: str | None = None) -> NotFoundError:
    logger.warning("matrix_selector_not_found", participant_name=participant_name, tag=tag)
    return NotFoundError.for_selector(participant_name, tag)
