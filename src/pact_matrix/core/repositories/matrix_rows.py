"""Matrix row repository — the constrained matrix query and view refresh.

Manifesto:
    Deduplication and "latest by" grouping downstream keep the *first*
    line they see for a key, so the order produced here is part of their
    contract.  The SQL ``ORDER BY`` below and :meth:`MatrixLine.sort_key`
    describe the same ordering and must change together:

    1. consumer name ascending
    2. consumer version order descending
    3. pact revision number descending
    4. provider name ascending
    5. provider version order descending, nulls (unverified) first
    6. verification id descending, nulls first

Architecture:
    ::

        resolved selectors ──► _matching_selectors() ──► WHERE
                               _most_recent_first()  ──► ORDER BY
                               selectinload(tags)    ──► eager tag query
                               limit                 ──► LIMIT (after ORDER BY)
                                        │
                                        ▼
                               list[MatrixLine]

        refresh(criteria)       DELETE materialized_matrix WHERE criteria
                                INSERT ... SELECT publications ⟕ verifications
        refresh_head(criteria)  DELETE materialized_head_matrix WHERE criteria
                                INSERT ... SELECT latest / latest tagged lines

Tags:
    pact-matrix, repository, matrix, materialized-view, query

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import (
    ColumnElement,
    Select,
    and_,
    delete,
    false,
    func,
    insert,
    literal,
    null,
    or_,
    select,
)
from sqlalchemy.orm import aliased, selectinload

from pact_matrix.core.orm.tables import (
    MATRIX_COLUMNS,
    HeadMatrixRowTable,
    MatrixRowTable,
    PactPublicationTable,
    ParticipantTable,
    TagTable,
    VerificationTable,
    VersionTable,
)
from pact_matrix.core.repository import BaseRepository
from pact_matrix.matrix.types import (
    Integration,
    MatrixLine,
    RefreshCriteria,
    ResolvedSelector,
)

_consumer = aliased(ParticipantTable, name="consumer")
_provider = aliased(ParticipantTable, name="provider")
_consumer_version = aliased(VersionTable, name="consumer_version")
_provider_version = aliased(VersionTable, name="provider_version")
_publication = aliased(PactPublicationTable, name="publication")
_verification = aliased(VerificationTable, name="verification")


# =============================================================================
# Query building
# =============================================================================


def _side_clause(
    participant_column, version_column, selector: ResolvedSelector
) -> ColumnElement[bool] | None:
    """Clause matching one side of a line, or None if the selector matches nothing."""
    if not selector.exists:
        return None
    if selector.any_version:
        return participant_column == selector.participant_id
    return and_(
        participant_column == selector.participant_id,
        version_column == selector.version_id,
    )


def _any_of(clauses: list[ColumnElement[bool] | None]) -> ColumnElement[bool]:
    present = [clause for clause in clauses if clause is not None]
    return or_(*present) if present else false()


def _matching_selectors(stmt: Select, selectors: Sequence[ResolvedSelector]) -> Select:
    """Restrict to lines whose consumer and provider each match a selector.

    When every selector names the same participant, lines where that
    participant is on either side match.
    """
    consumer_clauses = [
        _side_clause(MatrixRowTable.consumer_id, MatrixRowTable.consumer_version_id, s)
        for s in selectors
    ]
    provider_clauses = [
        _side_clause(MatrixRowTable.provider_id, MatrixRowTable.provider_version_id, s)
        for s in selectors
    ]
    if len({s.participant_name.casefold() for s in selectors}) <= 1:
        return stmt.where(_any_of(consumer_clauses + provider_clauses))
    return stmt.where(and_(_any_of(consumer_clauses), _any_of(provider_clauses)))


def _most_recent_first(stmt: Select) -> Select:
    return stmt.order_by(
        MatrixRowTable.consumer_name.asc(),
        MatrixRowTable.consumer_version_order.desc(),
        MatrixRowTable.pact_revision_number.desc(),
        MatrixRowTable.provider_name.asc(),
        MatrixRowTable.provider_version_order.desc().nulls_first(),
        MatrixRowTable.verification_id.desc().nulls_first(),
    )


def _to_line(row: MatrixRowTable) -> MatrixLine:
    return MatrixLine(
        consumer_id=row.consumer_id,
        consumer_name=row.consumer_name,
        consumer_version_id=row.consumer_version_id,
        consumer_version_number=row.consumer_version_number,
        consumer_version_order=row.consumer_version_order,
        pact_publication_id=row.pact_publication_id,
        pact_revision_number=row.pact_revision_number,
        provider_id=row.provider_id,
        provider_name=row.provider_name,
        provider_version_id=row.provider_version_id,
        provider_version_number=row.provider_version_number,
        provider_version_order=row.provider_version_order,
        verification_id=row.verification_id,
        success=row.success,
        pact_created_at=row.pact_created_at,
        verification_executed_at=row.verification_executed_at,
        consumer_version_tags=tuple(tag.name for tag in row.consumer_version_tags),
        provider_version_tags=tuple(tag.name for tag in row.provider_version_tags),
    )


# =============================================================================
# Source selects for the materialized views
# =============================================================================


def _matrix_source(*extra_columns) -> Select:
    """Publications LEFT JOIN verifications, in ``MATRIX_COLUMNS`` order."""
    return (
        select(
            _consumer.id,
            _consumer.name,
            _consumer_version.id,
            _consumer_version.number,
            _consumer_version.order,
            _publication.id,
            _publication.revision_number,
            _publication.created_at,
            _provider.id,
            _provider.name,
            _provider_version.id,
            _provider_version.number,
            _provider_version.order,
            _verification.id,
            _verification.success,
            _verification.execution_date,
            *extra_columns,
        )
        .select_from(_publication)
        .join(_consumer_version, _consumer_version.id == _publication.consumer_version_id)
        .join(_consumer, _consumer.id == _consumer_version.participant_id)
        .join(_provider, _provider.id == _publication.provider_id)
        .outerjoin(_verification, _verification.pact_publication_id == _publication.id)
        .outerjoin(_provider_version, _provider_version.id == _verification.provider_version_id)
    )


def _latest_revisions():
    return (
        select(
            PactPublicationTable.consumer_version_id,
            PactPublicationTable.provider_id,
            func.max(PactPublicationTable.revision_number).label("revision_number"),
        )
        .group_by(PactPublicationTable.consumer_version_id, PactPublicationTable.provider_id)
        .subquery("latest_revision")
    )


def _head_versions(by_tag: bool):
    """Latest consumer version order per consumer/provider (and tag)."""
    version = aliased(VersionTable)
    publication = aliased(PactPublicationTable)
    keys = {"consumer_id": version.participant_id, "provider_id": publication.provider_id}
    if by_tag:
        keys["tag_name"] = TagTable.name
    stmt = (
        select(
            *(column.label(name) for name, column in keys.items()),
            func.max(version.order).label("consumer_version_order"),
        )
        .select_from(publication)
        .join(version, version.id == publication.consumer_version_id)
    )
    if by_tag:
        stmt = stmt.join(TagTable, TagTable.version_id == version.id)
    return stmt.group_by(*keys.values()).subquery("head_tagged" if by_tag else "head_untagged")


def _head_source(by_tag: bool) -> tuple[Select, Any]:
    head = _head_versions(by_tag)
    latest_revision = _latest_revisions()
    tag_column = head.c.tag_name if by_tag else null()
    return (
        _matrix_source(tag_column.label("consumer_tag_name"))
        .join(
            latest_revision,
            and_(
                latest_revision.c.consumer_version_id == _publication.consumer_version_id,
                latest_revision.c.provider_id == _publication.provider_id,
                latest_revision.c.revision_number == _publication.revision_number,
            ),
        )
        .join(
            head,
            and_(
                head.c.consumer_id == _consumer.id,
                head.c.provider_id == _provider.id,
                head.c.consumer_version_order == _consumer_version.order,
            ),
        )
    ), head


def _criteria_clauses(consumer_id_column, provider_id_column, criteria: RefreshCriteria) -> list:
    clauses = []
    if criteria.consumer_id is not None:
        clauses.append(consumer_id_column == criteria.consumer_id)
    if criteria.provider_id is not None:
        clauses.append(provider_id_column == criteria.provider_id)
    if criteria.participant_id is not None:
        clauses.append(
            or_(
                consumer_id_column == criteria.participant_id,
                provider_id_column == criteria.participant_id,
            )
        )
    return clauses


def _where(stmt: Any, clauses: list) -> Any:
    return stmt.where(*clauses) if clauses else stmt


# =============================================================================
# Repository
# =============================================================================


class MatrixRowRepository(BaseRepository):
    """Query and refresh the materialized matrix tables."""

    def find_lines(
        self,
        selectors: Sequence[ResolvedSelector],
        *,
        limit: int | None = None,
    ) -> list[MatrixLine]:
        """Lines matching ``selectors``, most recent first, tags eager-loaded."""
        stmt = _most_recent_first(_matching_selectors(select(MatrixRowTable), selectors))
        stmt = stmt.options(
            selectinload(MatrixRowTable.consumer_version_tags),
            selectinload(MatrixRowTable.provider_version_tags),
        ).execution_options(populate_existing=True)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [_to_line(row) for row in self.scalars(stmt)]

    def find_integrations(self, participant_ids: Sequence[int]) -> list[Integration]:
        """Distinct participant pairs touching any of ``participant_ids``.

        A pair with pacts in both directions is returned once.
        """
        ids = list(dict.fromkeys(participant_ids))
        if not ids:
            return []
        stmt = (
            select(
                MatrixRowTable.consumer_id,
                MatrixRowTable.consumer_name,
                MatrixRowTable.provider_id,
                MatrixRowTable.provider_name,
            )
            .where(
                or_(
                    MatrixRowTable.consumer_id.in_(ids),
                    MatrixRowTable.provider_id.in_(ids),
                )
            )
            .distinct()
            .order_by(MatrixRowTable.consumer_name, MatrixRowTable.provider_name)
        )
        integrations = (
            Integration(
                consumer_id=row.consumer_id,
                provider_id=row.provider_id,
                consumer_name=row.consumer_name,
                provider_name=row.provider_name,
            )
            for row in self.rows(stmt)
        )
        return list(dict.fromkeys(integrations))

    def find_head_lines(self, consumer_tag_name: str | None = None) -> list[HeadMatrixRowTable]:
        """Rows of the latest index for the overall latest (None) or a tag."""
        tag_clause = (
            HeadMatrixRowTable.consumer_tag_name.is_(None)
            if consumer_tag_name is None
            else HeadMatrixRowTable.consumer_tag_name == consumer_tag_name
        )
        return self.scalars(
            select(HeadMatrixRowTable)
            .where(tag_clause)
            .order_by(
                HeadMatrixRowTable.consumer_name,
                HeadMatrixRowTable.provider_name,
                HeadMatrixRowTable.verification_id,
            )
            .execution_options(populate_existing=True)
        )

    # -- refresh -------------------------------------------------------------

    def refresh(self, criteria: RefreshCriteria) -> None:
        """Recompute ``materialized_matrix`` rows matching ``criteria``.

        ``criteria.tag_name`` does not restrict this view.
        """
        table = MatrixRowTable.__table__
        self.execute(
            _where(delete(table), _criteria_clauses(table.c.consumer_id, table.c.provider_id, criteria)),
            operation="matrix_refresh_delete",
        )
        source = _where(_matrix_source(), _criteria_clauses(_consumer.id, _provider.id, criteria))
        self.execute(
            insert(table).from_select(MATRIX_COLUMNS, source),
            operation="matrix_refresh_insert",
        )
        self.flush()

    def refresh_head(self, criteria: RefreshCriteria) -> None:
        """Recompute ``materialized_head_matrix`` rows matching ``criteria``.

        With a ``tag_name`` only the rows indexed under that tag are rebuilt.
        """
        table = HeadMatrixRowTable.__table__
        clauses = _criteria_clauses(table.c.consumer_id, table.c.provider_id, criteria)
        if criteria.tag_name is not None:
            clauses.append(table.c.consumer_tag_name == criteria.tag_name)
        self.execute(_where(delete(table), clauses), operation="head_matrix_refresh_delete")

        sources = [_head_source(by_tag=True)]
        if criteria.tag_name is None:
            sources.insert(0, _head_source(by_tag=False))

        columns = (*MATRIX_COLUMNS, "consumer_tag_name")
        for source, head in sources:
            source_clauses = _criteria_clauses(_consumer.id, _provider.id, criteria)
            if criteria.tag_name is not None:
                source_clauses.append(head.c.tag_name == literal(criteria.tag_name))
            self.execute(
                insert(table).from_select(columns, _where(source, source_clauses)),
                operation="head_matrix_refresh_insert",
            )
        self.flush()


__all__ = ["MatrixRowRepository"]
