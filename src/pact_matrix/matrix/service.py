"""Matrix service — the public entry point of the compatibility matrix.

Manifesto:
    One call, one pipeline, no state between calls.  ``find`` is a pure
    function of its arguments and the current contents of the store, so
    asking the same question twice yields the same answer in the same
    order.

Architecture:
    ::

        find(selectors, options)
          │
          ├─ SelectorResolver.resolve()        explicit, then inferred partners
          ├─ MatrixRowRepository.find_lines()  constrained, ordered, tags eager
          ├─ remove_overwritten_revisions()
          ├─ apply_latestby()
          ├─ filter_success()
          └─ QueryResults(sorted(lines), ...)

        refresh:  resolve_refresh_criteria(filter)   ids looked up now
                  <caller deletes rows>              ids still valid
                  apply_refresh(criteria)            views recomputed

Tags:
    pact-matrix, service, matrix, can-i-deploy, refresh

Doc-Types:
    - API Reference
    - Usage Guide

Usage::

    from pact_matrix import ByName, MatrixOptions, MatrixService

    service = MatrixService(session)
    results = service.find(
        [ByName("Zoo App"), ByName("Animal Service")],
        MatrixOptions(latestby="cvpv"),
    )
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy.orm import Session

from pact_matrix.core.logging import LogContext, configure_logging_from_settings, get_logger
from pact_matrix.core.orm import MatrixBase, create_matrix_engine, matrix_session_factory
from pact_matrix.core.repositories import (
    MatrixRowRepository,
    ParticipantRepository,
    VersionRepository,
)
from pact_matrix.core.settings import MatrixSettings
from pact_matrix.matrix.grouping import (
    apply_latestby,
    filter_success,
    remove_overwritten_revisions,
)
from pact_matrix.matrix.identity import IdentityResolver
from pact_matrix.matrix.integrations import IntegrationGrapher
from pact_matrix.matrix.selectors import SelectorResolver
from pact_matrix.matrix.types import (
    ByName,
    Integration,
    MatrixOptions,
    QueryResults,
    RefreshCriteria,
    RefreshFilter,
    Selector,
    parse_selector,
)

logger = get_logger(__name__)


class MatrixService:
    """Resolve selectors and answer compatibility questions over one session.

    The session's transaction belongs to the caller; refreshes are flushed
    but never committed here.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        participants = ParticipantRepository(session)
        versions = VersionRepository(session)
        self.rows = MatrixRowRepository(session)
        self.identity = IdentityResolver(participants, versions)
        self.integrations = IntegrationGrapher(participants, self.rows)
        self.selectors = SelectorResolver(self.identity, versions, self.integrations)

    # -- queries -------------------------------------------------------------

    def find(
        self,
        selectors: Sequence[Selector | Mapping[str, Any]],
        options: MatrixOptions | Mapping[str, Any] | None = None,
    ) -> QueryResults:
        """Compute the matrix for ``selectors``.

        Raises:
            NotFoundError: a ``latest``/``tag`` selector matched no version.
            ValidationError: a selector or the options could not be parsed.
        """
        selectors = tuple(
            parse_selector(s) if isinstance(s, Mapping) else s for s in selectors
        )
        if options is None:
            options = MatrixOptions()
        elif isinstance(options, Mapping):
            options = MatrixOptions.from_params(options)

        names = ",".join(dict.fromkeys(s.participant_name for s in selectors))
        with LogContext(operation="matrix.find", participants=names):
            resolved = self.selectors.resolve(selectors, options)
            logger.debug("matrix_selectors_resolved", resolved=len(resolved))

            lines = self.rows.find_lines(resolved, limit=options.limit)
            current = remove_overwritten_revisions(lines)
            grouped = apply_latestby(current, options.latestby)
            accepted = filter_success(grouped, options.success)
            logger.info(
                "matrix_query_completed",
                lines=len(lines),
                current=len(current),
                grouped=len(grouped),
                returned=len(accepted),
                latestby=options.latestby,
            )

            return QueryResults(
                lines=tuple(sorted(accepted)),
                selectors=selectors,
                options=options,
                resolved_selectors=resolved,
                integrations=self.integrations.integrations_between(resolved),
                unfiltered_lines=tuple(sorted(grouped)),
            )

    def find_for_pair(self, participant_1_name: str, participant_2_name: str) -> QueryResults:
        """Latest line per version pair between two participants, either direction."""
        return self.find(
            [ByName(participant_1_name), ByName(participant_2_name)],
            MatrixOptions(latestby="cvpv"),
        )

    def find_compatible_versions(
        self, selectors: Sequence[Selector | Mapping[str, Any]]
    ) -> QueryResults:
        """Version pairs whose latest verification succeeded."""
        return self.find(selectors, MatrixOptions(latestby="cvpv", success=frozenset({True})))

    def find_integrations(self, participant_names: Sequence[str]) -> tuple[Integration, ...]:
        return self.integrations.find_integrations(participant_names)

    # -- refresh -------------------------------------------------------------

    def resolve_refresh_criteria(self, refresh_filter: RefreshFilter) -> RefreshCriteria:
        """First phase: look up ids while the rows they refer to still exist."""
        return self.identity.resolve_refresh_criteria(refresh_filter)

    def apply_refresh(self, criteria: RefreshCriteria) -> None:
        """Second phase: recompute the matrix and the latest index."""
        self.rows.refresh(criteria)
        self.rows.refresh_head(criteria)
        logger.info("matrix_refresh_applied", views="matrix,head_matrix", **_loggable(criteria))

    def apply_tag_refresh(self, criteria: RefreshCriteria) -> None:
        """Second phase after a tag change: only the latest index moves."""
        self.rows.refresh_head(criteria)
        logger.info("matrix_refresh_applied", views="head_matrix", **_loggable(criteria))

    def refresh(
        self,
        refresh_filter: RefreshFilter,
        before_refresh: Callable[[], Any] | None = None,
    ) -> RefreshCriteria:
        """Resolve criteria, run ``before_refresh`` (e.g. a deletion), then refresh."""
        criteria = self.resolve_refresh_criteria(refresh_filter)
        if before_refresh is not None:
            before_refresh()
        self.apply_refresh(criteria)
        return criteria

    def refresh_tags(
        self,
        refresh_filter: RefreshFilter,
        before_refresh: Callable[[], Any] | None = None,
    ) -> RefreshCriteria:
        criteria = self.resolve_refresh_criteria(refresh_filter)
        if before_refresh is not None:
            before_refresh()
        self.apply_tag_refresh(criteria)
        return criteria


def _loggable(criteria: RefreshCriteria) -> dict[str, Any]:
    return {
        key: value
        for key, value in (
            ("consumer_id", criteria.consumer_id),
            ("provider_id", criteria.provider_id),
            ("participant_id", criteria.participant_id),
            ("tag_name", criteria.tag_name),
        )
        if value is not None
    }


@contextmanager
def open_matrix_service(
    settings: MatrixSettings | None = None,
    *,
    create_schema: bool = False,
    setup_logging: bool = False,
) -> Iterator[MatrixService]:
    """Open a session against ``settings.database_url`` and yield a service.

    The session is committed when the block exits cleanly and rolled back
    otherwise. With ``setup_logging`` structlog is configured from the
    settings first.
    """
    settings = settings or MatrixSettings()
    if setup_logging:
        configure_logging_from_settings(settings)
    engine = create_matrix_engine(settings.database_url, echo=settings.echo_sql)
    if create_schema:
        MatrixBase.metadata.create_all(engine)
    factory = matrix_session_factory(engine)
    try:
        with factory.begin() as session:
            yield MatrixService(session)
    finally:
        engine.dispose()


__all__ = ["MatrixService", "open_matrix_service"]
