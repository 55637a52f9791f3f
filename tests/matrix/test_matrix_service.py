"""End-to-end tests for MatrixService.find and its shortcuts."""

from __future__ import annotations

import pytest

from pact_matrix.core.errors import NotFoundError, ValidationError
from pact_matrix.matrix.summary import FAILED_VERIFICATIONS
from pact_matrix.matrix.types import ByName, ByTagLatest, ByVersion, MatrixOptions, QueryResults


@pytest.fixture
def zoo(scenario):
    """Zoo App consumes Animal Service.

    Zoo App 1.0.0 is verified by 2.0.0 (success, then failure) and by
    2.1.0; Zoo App 1.1.0 is verified by 2.1.0.
    """
    pact = scenario.publish("Zoo App", "1.0.0", "Animal Service")
    scenario.verify(pact, "2.0.0", success=True)
    scenario.verify(pact, "2.1.0", success=True)
    scenario.verify(pact, "2.0.0", success=False)
    scenario.verify(scenario.publish("Zoo App", "1.1.0", "Animal Service"), "2.1.0")
    scenario.refresh()
    return scenario


def _pairs(results):
    return [(l.consumer_version_number, l.provider_version_number) for l in results]


BOTH = [ByName("Zoo App"), ByName("Animal Service")]


class TestFind:
    def test_latest_line_per_version_pair(self, zoo, service):
        results = service.find(BOTH, MatrixOptions(latestby="cvpv"))

        assert isinstance(results, QueryResults)
        assert _pairs(results) == [
            ("1.1.0", "2.1.0"),
            ("1.0.0", "2.1.0"),
            ("1.0.0", "2.0.0"),
        ]
        assert results[2].success is False

    def test_without_latestby_every_verification_is_returned(self, zoo, service):
        assert len(service.find(BOTH)) == 4

    def test_is_repeatable(self, zoo, service):
        options = MatrixOptions(latestby="cvp")
        assert service.find(BOTH, options).lines == service.find(BOTH, options).lines

    def test_accepts_mappings(self, zoo, service):
        results = service.find(
            [{"participant_name": "zoo app"}, {"participant_name": "Animal Service"}],
            {"latestby": "cvpv"},
        )
        assert len(results) == 3
        assert results.options == MatrixOptions(latestby="cvpv")
        assert results.selectors == (ByName("zoo app"), ByName("Animal Service"))

    def test_invalid_options_raise(self, zoo, service):
        with pytest.raises(ValidationError):
            service.find(BOTH, {"latestby": "everything"})

    def test_missing_latest_tag_raises(self, zoo, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.find([ByTagLatest("Zoo App", "prod")])
        assert "Zoo App" in str(exc_info.value)
        assert "prod" in str(exc_info.value)

    def test_unknown_participant_returns_no_lines(self, zoo, service):
        results = service.find([ByName("Zoo App"), ByName("Nope")])
        assert len(results) == 0
        assert results.deployment_status_summary.deployable is False

    def test_single_participant_either_side(self, zoo, service):
        results = service.find([ByName("Animal Service")], MatrixOptions(latestby="cvpv"))
        assert len(results) == 3

    def test_inferred_partner_pinned_to_latest(self, zoo, service):
        results = service.find([ByName("Zoo App")], MatrixOptions(latest=True))
        assert _pairs(results) == [("1.1.0", "2.1.0"), ("1.0.0", "2.1.0")]

    def test_only_latest_revision_counts(self, scenario, service):
        scenario.verify(scenario.publish("Zoo App", "1.0.0", "Animal Service"), "2.0.0", False)
        scenario.verify(scenario.publish("Zoo App", "1.0.0", "Animal Service"), "2.0.0", True)
        scenario.refresh()

        results = service.find(BOTH, {"success": [True], "latestby": "cvp"})
        assert [l.pact_revision_number for l in results] == [2]

    def test_success_filter_runs_after_grouping(self, zoo, service):
        results = service.find(
            [ByVersion("Zoo App", "1.0.0"), ByVersion("Animal Service", "2.0.0")],
            MatrixOptions(latestby="cvpv", success=frozenset({True})),
        )
        assert len(results) == 0

    def test_limit(self, zoo, service):
        assert _pairs(service.find(BOTH, MatrixOptions(limit=1))) == [("1.1.0", "2.1.0")]

    def test_results_carry_resolution(self, zoo, service):
        results = service.find(BOTH)
        assert [s.participant_name for s in results.resolved_selectors] == [
            "Zoo App",
            "Animal Service",
        ]
        assert [(i.consumer_name, i.provider_name) for i in results.integrations] == [
            ("Zoo App", "Animal Service")
        ]


class TestDeploymentStatus:
    def test_deployable_pair(self, zoo, service):
        results = service.find(
            [ByVersion("Zoo App", "1.1.0"), ByVersion("Animal Service", "2.1.0")],
            MatrixOptions(latestby="cvpv"),
        )
        assert results.deployment_status_summary.deployable is True

    def test_failed_pair(self, zoo, service):
        results = service.find(
            [ByVersion("Zoo App", "1.0.0"), ByVersion("Animal Service", "2.0.0")],
            MatrixOptions(latestby="cvpv"),
        )
        summary = results.deployment_status_summary
        assert summary.deployable is False
        assert summary.reasons == (FAILED_VERIFICATIONS,)

    def test_success_filter_does_not_hide_a_failure(self, zoo, service):
        results = service.find(
            [ByVersion("Zoo App", "1.0.0"), ByVersion("Animal Service", "2.0.0")],
            MatrixOptions(latestby="cvpv", success=frozenset({True})),
        )
        summary = results.deployment_status_summary
        assert len(results) == 0
        assert summary.deployable is False
        assert summary.reasons == (FAILED_VERIFICATIONS,)
        assert summary.integrations_without_a_line == ()

    def test_never_verified_pair(self, zoo, service):
        results = service.find(
            [ByVersion("Zoo App", "1.1.0"), ByVersion("Animal Service", "2.0.0")],
            MatrixOptions(latestby="cvpv"),
        )
        summary = results.deployment_status_summary
        assert summary.deployable is False
        assert summary.reasons == (
            "There is no verified pact between Zoo App and Animal Service",
        )


class TestShortcuts:
    def test_find_for_pair_either_direction(self, zoo, service):
        forward = service.find_for_pair("Zoo App", "Animal Service")
        backward = service.find_for_pair("Animal Service", "Zoo App")
        assert forward.lines == backward.lines
        assert len(forward) == 3

    def test_find_compatible_versions(self, zoo, service):
        results = service.find_compatible_versions(BOTH)
        assert _pairs(results) == [("1.1.0", "2.1.0"), ("1.0.0", "2.1.0")]
        assert all(line.success for line in results)
