"""Post-query reduction of matrix lines.

Three pure steps, always applied in this order to lines in the order
produced by :meth:`MatrixRowRepository.find_lines`:

1. :func:`remove_overwritten_revisions` — drop superseded pact revisions
2. :func:`apply_latestby` — keep the latest line per ``latestby`` key
3. :func:`filter_success` — keep lines with an accepted outcome

Grouping must see deduplicated lines (an old revision would otherwise be
taken for the latest) and the success filter must see grouped lines (a
failed latest verification must not be replaced by an older success).

Examples:
    >>> lines = apply_latestby(remove_overwritten_revisions(raw), "cvpv")
    >>> lines = filter_success(lines, frozenset({True}))

Tags:
    pact-matrix, grouping, deduplication, latestby
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pact_matrix.matrix.types import LatestBy, MatrixLine

GROUP_BY_PROVIDER_VERSION_NUMBER = (
    "consumer_name",
    "consumer_version_number",
    "provider_name",
    "provider_version_number",
)
GROUP_BY_PROVIDER = ("consumer_name", "consumer_version_number", "provider_name")
GROUP_BY_PACT = ("consumer_name", "provider_name")

GROUP_BY_COLUMNS: dict[str, tuple[str, ...]] = {
    "cvpv": GROUP_BY_PROVIDER_VERSION_NUMBER,
    "cvp": GROUP_BY_PROVIDER,
    "cp": GROUP_BY_PACT,
}


def remove_overwritten_revisions(lines: Iterable[MatrixLine]) -> list[MatrixLine]:
    """Keep only the current pact revision per consumer version and provider.

    The first line seen for a (consumer name, provider name, consumer
    version number) key fixes the retained revision; later lines for the
    key survive only if they carry the same revision number.
    """
    retained_revisions: dict[tuple[str, str, str], int] = {}
    latest: list[MatrixLine] = []
    for line in lines:
        key = (line.consumer_name, line.provider_name, line.consumer_version_number)
        revision = retained_revisions.setdefault(key, line.pact_revision_number)
        if revision == line.pact_revision_number:
            latest.append(line)
    return latest


def apply_latestby(lines: Sequence[MatrixLine], latestby: LatestBy | None) -> list[MatrixLine]:
    """Reduce each ``latestby`` partition to its first line.

    A partition whose first line has never been verified (null provider
    version number) is kept whole.
    """
    if latestby is None:
        return list(lines)

    columns = GROUP_BY_COLUMNS[latestby]
    partitions: dict[tuple, list[MatrixLine]] = {}
    for line in lines:
        key = tuple(getattr(line, column) for column in columns)
        partitions.setdefault(key, []).append(line)

    grouped: list[MatrixLine] = []
    for partition in partitions.values():
        if partition[0].provider_version_number is None:
            grouped.extend(partition)
        else:
            grouped.append(partition[0])
    return grouped


def filter_success(
    lines: Iterable[MatrixLine], success: frozenset[bool] | None
) -> list[MatrixLine]:
    """Keep lines whose ``success`` is in ``success`` (``None`` keeps all)."""
    if success is None:
        return list(lines)
    return [line for line in lines if line.success in success]


__all__ = [
    "GROUP_BY_COLUMNS",
    "remove_overwritten_revisions",
    "apply_latestby",
    "filter_success",
]
