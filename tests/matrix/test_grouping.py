"""Tests for revision deduplication, latestby grouping and the success filter."""

from __future__ import annotations

import pytest

from pact_matrix.matrix.grouping import (
    GROUP_BY_COLUMNS,
    apply_latestby,
    filter_success,
    remove_overwritten_revisions,
)
from tests._support.lines import make_line


def verified(cv: str, pv: str, *, order: int, verification_id: int, success=True, **kw):
    return make_line(
        consumer_version_number=cv,
        provider_version_number=pv,
        provider_version_order=order,
        provider_version_id=order,
        verification_id=verification_id,
        success=success,
        **kw,
    )


class TestRemoveOverwrittenRevisions:
    def test_first_seen_revision_wins(self):
        rev2 = make_line(pact_revision_number=2, pact_publication_id=2)
        rev1_verified = verified("1", "10", order=5, verification_id=1, pact_revision_number=1)
        assert remove_overwritten_revisions([rev2, rev1_verified]) == [rev2]

    def test_every_line_of_the_kept_revision_survives(self):
        a = verified("1", "10", order=5, verification_id=2, pact_revision_number=2)
        b = verified("1", "9", order=4, verification_id=1, pact_revision_number=2)
        old = make_line(pact_revision_number=1)
        assert remove_overwritten_revisions([a, b, old]) == [a, b]

    def test_distinct_consumer_versions_are_independent(self):
        v2 = make_line(consumer_version_number="2", pact_revision_number=1)
        v1 = make_line(consumer_version_number="1", pact_revision_number=3)
        assert remove_overwritten_revisions([v2, v1]) == [v2, v1]


class TestApplyLatestby:
    def test_none_keeps_everything(self):
        lines = [make_line(), make_line(pact_revision_number=2)]
        assert apply_latestby(lines, None) == lines

    def test_cvpv_keeps_latest_verification_per_version_pair(self):
        newest = verified("1", "10", order=5, verification_id=2, success=False)
        older = verified("1", "10", order=5, verification_id=1, success=True)
        other = verified("1", "9", order=4, verification_id=3)
        assert apply_latestby([newest, older, other], "cvpv") == [newest, other]

    def test_unverified_partition_is_kept_whole(self):
        first = make_line(pact_publication_id=1)
        second = make_line(pact_publication_id=2, pact_revision_number=0)
        assert apply_latestby([first, second], "cvpv") == [first, second]

    def test_cvp_keeps_latest_provider_version(self):
        newest = verified("1", "10", order=5, verification_id=2)
        older = verified("1", "9", order=4, verification_id=1)
        assert apply_latestby([newest, older], "cvp") == [newest]

    def test_cp_keeps_latest_consumer_version(self):
        latest = verified("2", "10", order=5, verification_id=2, consumer_version_order=2)
        earlier = verified("1", "10", order=5, verification_id=1)
        assert apply_latestby([latest, earlier], "cp") == [latest]

    def test_cp_with_unverified_latest_keeps_partition(self):
        latest = make_line(consumer_version_number="2", consumer_version_order=2)
        earlier = verified("1", "10", order=5, verification_id=1)
        assert apply_latestby([latest, earlier], "cp") == [latest, earlier]

    @pytest.mark.parametrize("latestby", sorted(GROUP_BY_COLUMNS))
    def test_one_line_per_key(self, latestby):
        lines = [
            verified("1", "10", order=5, verification_id=3),
            verified("1", "10", order=5, verification_id=2),
            verified("1", "9", order=4, verification_id=1),
        ]
        grouped = apply_latestby(lines, latestby)
        keys = [tuple(getattr(l, c) for c in GROUP_BY_COLUMNS[latestby]) for l in grouped]
        assert len(keys) == len(set(keys))


class TestFilterSuccess:
    def test_none_keeps_everything(self):
        lines = [make_line(), make_line(success=False)]
        assert filter_success(lines, None) == lines

    def test_filters_by_outcome(self):
        ok = make_line(success=True)
        failed = make_line(success=False)
        unknown = make_line()
        assert filter_success([ok, failed, unknown], frozenset({True})) == [ok]
        assert filter_success([ok, failed, unknown], frozenset({False})) == [failed]

    def test_applied_after_grouping_does_not_resurrect_older_success(self):
        failed_latest = verified("1", "10", order=5, verification_id=2, success=False)
        older_success = verified("1", "10", order=5, verification_id=1, success=True)
        grouped = apply_latestby([failed_latest, older_success], "cvpv")
        assert filter_success(grouped, frozenset({True})) == []
