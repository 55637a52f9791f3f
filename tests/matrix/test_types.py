"""Tests for selector parsing, options and the matrix value types."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from pact_matrix.core.errors import ValidationError
from pact_matrix.matrix.types import (
    ANY_VERSION,
    ByName,
    ByTag,
    ByTagLatest,
    ByVersion,
    Integration,
    Latest,
    MatrixOptions,
    RefreshCriteria,
    ResolvedSelector,
    SpecificVersion,
    parse_selector,
)
from tests._support.lines import make_line


class TestParseSelector:
    @pytest.mark.parametrize(
        ("params", "expected"),
        [
            ({"participant_name": "Foo"}, ByName("Foo")),
            ({"participant_name": "Foo", "version": "1.2.3"}, ByVersion("Foo", "1.2.3")),
            ({"participant_name": "Foo", "tag": "prod"}, ByTag("Foo", "prod")),
            ({"participant_name": "Foo", "tag": "prod", "latest": True}, ByTagLatest("Foo", "prod")),
            ({"participant_name": "Foo", "latest": True}, Latest("Foo")),
            ({"participant_name": "Foo", "latest": False}, ByName("Foo")),
        ],
    )
    def test_variants(self, params, expected):
        assert parse_selector(params) == expected

    @pytest.mark.parametrize(
        ("latest", "expected"),
        [
            ("false", ByName("Foo")),
            ("0", ByName("Foo")),
            ("true", Latest("Foo")),
            (1, Latest("Foo")),
        ],
    )
    def test_latest_flag_is_coerced(self, latest, expected):
        assert parse_selector({"participant_name": "Foo", "latest": latest}) == expected

    def test_invalid_latest_flag_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_selector({"participant_name": "Foo", "latest": "sometimes"})
        assert exc_info.value.field_name == "latest"

    def test_version_with_false_latest_string(self):
        selector = parse_selector({"participant_name": "Foo", "version": "1", "latest": "false"})
        assert selector == ByVersion("Foo", "1")

    def test_version_is_stringified(self):
        assert parse_selector({"participant_name": "Foo", "version": 3}) == ByVersion("Foo", "3")

    @pytest.mark.parametrize("params", [{}, {"participant_name": ""}, {"participant_name": 7}])
    def test_participant_name_required(self, params):
        with pytest.raises(ValidationError) as exc_info:
            parse_selector(params)
        assert exc_info.value.field_name == "participant_name"

    def test_version_with_tag_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_selector({"participant_name": "Foo", "version": "1", "tag": "prod"})
        assert exc_info.value.context.participant_name == "Foo"


class TestMatrixOptions:
    def test_defaults(self):
        options = MatrixOptions()
        assert options.latestby is None
        assert options.success is None
        assert options.infers_selectors is False

    def test_from_params_coerces_success(self):
        options = MatrixOptions.from_params({"success": [True], "latestby": "cvp"})
        assert options.success == frozenset({True})
        assert options.latestby == "cvp"

    def test_from_params_ignores_unknown_keys(self):
        assert MatrixOptions.from_params({"colour": "blue"}) == MatrixOptions()

    def test_invalid_latestby(self):
        with pytest.raises(ValidationError) as exc_info:
            MatrixOptions.from_params({"latestby": "cvx"})
        assert exc_info.value.field_name == "latestby"

    def test_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            MatrixOptions.from_params({"limit": 0})

    def test_blank_tag_is_none(self):
        assert MatrixOptions(tag="  ").tag is None

    @pytest.mark.parametrize(
        ("options", "infers"),
        [
            (MatrixOptions(latest=True), True),
            (MatrixOptions(tag="prod"), True),
            (MatrixOptions(latestby="cvpv"), False),
        ],
    )
    def test_infers_selectors(self, options, infers):
        assert options.infers_selectors is infers

    def test_frozen(self):
        with pytest.raises(PydanticValidationError):
            MatrixOptions().latest = True


class TestResolvedSelector:
    def test_any_version_exists_when_participant_exists(self):
        selector = ResolvedSelector("Foo", 1)
        assert selector.version is ANY_VERSION
        assert selector.any_version
        assert selector.exists
        assert selector.version_number is None

    def test_missing_participant(self):
        assert not ResolvedSelector("Foo", None).exists

    def test_missing_version_is_not_any_version(self):
        selector = ResolvedSelector("Foo", 1, SpecificVersion("9"))
        assert not selector.any_version
        assert not selector.exists
        assert selector.version_number == "9"


class TestMatrixLineOrdering:
    def test_consumer_name_then_most_recent_consumer_version(self):
        a_old = make_line(consumer_name="A", consumer_version_order=1)
        a_new = make_line(consumer_name="A", consumer_version_order=2)
        b = make_line(consumer_name="B", consumer_version_order=9)
        assert sorted([b, a_old, a_new]) == [a_new, a_old, b]

    def test_unverified_line_sorts_before_verified(self):
        verified = make_line(provider_version_order=5, verification_id=1, provider_version_number="2")
        unverified = make_line()
        assert sorted([verified, unverified]) == [unverified, verified]
        assert not unverified.verified and verified.verified

    def test_latest_revision_then_latest_verification(self):
        rev1 = make_line(pact_revision_number=1)
        rev2_v1 = make_line(pact_revision_number=2, provider_version_order=3, verification_id=1)
        rev2_v2 = make_line(pact_revision_number=2, provider_version_order=3, verification_id=2)
        assert sorted([rev1, rev2_v1, rev2_v2]) == [rev2_v2, rev2_v1, rev1]


class TestIntegration:
    def test_equality_ignores_names(self):
        assert Integration(1, 2, "Foo", "Bar") == Integration(1, 2, "foo", "bar")
        assert len({Integration(1, 2, "Foo", "Bar"), Integration(1, 2, "foo", "bar")}) == 1

    def test_pair_is_unordered(self):
        forward = Integration(1, 2, "Foo", "Bar")
        backward = Integration(2, 1, "Bar", "Foo")
        assert forward == backward
        assert len({forward, backward}) == 1
        assert forward != Integration(1, 3, "Foo", "Baz")

    def test_involves_is_case_insensitive(self):
        integration = Integration(1, 2, "Foo", "Bar")
        assert integration.involves("bar")
        assert not integration.involves("Baz")


class TestRefreshCriteria:
    def test_unrestricted(self):
        assert RefreshCriteria().unrestricted
        assert not RefreshCriteria(tag_name="prod").unrestricted
