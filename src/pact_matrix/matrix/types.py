"""Value types flowing through the matrix engine.

Manifesto:
    Loose ``{"participant_name": ..., "tag": ..., "latest": True}`` hashes
    are parsed once at the boundary into a tagged selector variant and a
    validated options record.  Inside the engine nothing inspects raw
    mappings, and "no version requested" (:class:`AnyVersion`) is never
    confused with "requested but it does not exist"
    (:class:`SpecificVersion` with ``version_id=None``).

Architecture:
    ::

        caller mapping ──parse_selector()──► ByName | ByVersion | ByTag
                                             | ByTagLatest | Latest
                                                     │  SelectorResolver
                                                     ▼
                                   ResolvedSelector(participant_id,
                                                    AnyVersion | SpecificVersion)
                                                     │  MatrixRowRepository
                                                     ▼
                                   MatrixLine ... ──► QueryResults

Tags:
    selectors, options, matrix-line, value-objects, pact-matrix

Doc-Types:
    - API Reference
    - Data Model
"""

from __future__ import annotations

import datetime
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, PositiveInt, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from pact_matrix.core.errors import ValidationError

if TYPE_CHECKING:
    from pact_matrix.matrix.summary import DeploymentStatusSummary

LatestBy = Literal["cvpv", "cvp", "cp"]


# =============================================================================
# Selectors (caller side)
# =============================================================================


@dataclass(frozen=True, slots=True)
class ByName:
    """Any version of the named participant."""

    participant_name: str


@dataclass(frozen=True, slots=True)
class ByVersion:
    """An explicit version number of the named participant."""

    participant_name: str
    version_number: str


@dataclass(frozen=True, slots=True)
class ByTag:
    """Every version of the participant ever tagged with ``tag``."""

    participant_name: str
    tag: str


@dataclass(frozen=True, slots=True)
class ByTagLatest:
    """The most recently created version carrying ``tag``."""

    participant_name: str
    tag: str


@dataclass(frozen=True, slots=True)
class Latest:
    """The most recently created version, whatever its tags."""

    participant_name: str


Selector = Union[ByName, ByVersion, ByTag, ByTagLatest, Latest]


_FLAG = TypeAdapter(bool)


def _parse_flag(participant_name: str, value: Any) -> bool:
    """Coerce ``latest`` the way pydantic coerces booleans (``"false"`` is False)."""
    if value is None:
        return False
    try:
        return _FLAG.validate_python(value)
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Selector for {participant_name} has an invalid latest flag: {value!r}",
            field_name="latest",
            cause=exc,
        ).with_context(participant_name=participant_name) from exc


def parse_selector(params: Mapping[str, Any]) -> Selector:
    """Build a selector variant from a loose caller mapping.

    Recognised keys: ``participant_name`` (required), ``version``, ``tag``
    and ``latest``.  A version cannot be combined with a tag or latest.

    Raises:
        ValidationError: when the mapping does not describe exactly one
            selector kind.
    """
    name = params.get("participant_name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Selector requires a participant_name", field_name="participant_name")

    version = params.get("version")
    tag = params.get("tag")
    latest = _parse_flag(name, params.get("latest"))

    if version is not None and (tag is not None or latest):
        raise ValidationError(
            f"Selector for {name} cannot specify a version together with a tag or latest",
            field_name="version",
        ).with_context(participant_name=name, version_number=str(version), tag=tag)

    if tag is not None and latest:
        return ByTagLatest(name, str(tag))
    if tag is not None:
        return ByTag(name, str(tag))
    if latest:
        return Latest(name)
    if version is not None:
        return ByVersion(name, str(version))
    return ByName(name)


# =============================================================================
# Options
# =============================================================================


class MatrixOptions(BaseModel):
    """Query options for :meth:`MatrixService.find`.

    Attributes:
        latestby: Granularity at which "latest" is computed, or ``None`` to
            keep every line.
        latest: Resolve inferred partner participants to their latest version.
        tag: Resolve inferred partner participants by this tag.
        success: Keep only lines whose outcome is in this set (applied after
            grouping).
        limit: Maximum number of raw lines read from the store.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    latestby: LatestBy | None = None
    latest: bool = False
    tag: str | None = None
    success: frozenset[bool] | None = None
    limit: PositiveInt | None = None

    @field_validator("tag")
    @classmethod
    def _blank_tag_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def infers_selectors(self) -> bool:
        """True when partner participants must be inferred from integrations."""
        return self.latest or self.tag is not None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> MatrixOptions:
        """Validate a loose caller mapping, raising the project ``ValidationError``."""
        try:
            return cls.model_validate(dict(params))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ())) or None
            raise ValidationError(
                f"Invalid matrix options: {first.get('msg', exc)}",
                field_name=location,
                cause=exc,
            ) from exc


# =============================================================================
# Resolved selectors
# =============================================================================


@dataclass(frozen=True, slots=True)
class AnyVersion:
    """No version was requested: every version of the participant matches."""

    @property
    def version_number(self) -> None:
        return None

    @property
    def version_id(self) -> None:
        return None


ANY_VERSION = AnyVersion()


@dataclass(frozen=True, slots=True)
class SpecificVersion:
    """A version number was requested; ``version_id`` is None if it does not exist."""

    version_number: str
    version_id: int | None = None


VersionRef = Union[AnyVersion, SpecificVersion]


@dataclass(frozen=True, slots=True)
class ResolvedSelector:
    """A selector carrying store identifiers."""

    participant_name: str
    participant_id: int | None
    version: VersionRef = ANY_VERSION

    @property
    def version_number(self) -> str | None:
        return self.version.version_number

    @property
    def version_id(self) -> int | None:
        return self.version.version_id

    @property
    def any_version(self) -> bool:
        return isinstance(self.version, AnyVersion)

    @property
    def exists(self) -> bool:
        """Both the participant and (if requested) the version were found."""
        if self.participant_id is None:
            return False
        return self.any_version or self.version_id is not None


# =============================================================================
# Matrix lines and integrations
# =============================================================================


def _desc_nulls_first(value: int | None) -> tuple[int, int]:
    return (0, 0) if value is None else (1, -value)


@dataclass(frozen=True, slots=True)
class MatrixLine:
    """One consumer/provider/verification relationship.

    A null ``provider_version_number`` means the pact was published but has
    never been verified.  Lines order naturally by consumer name, then the
    most recent consumer version and pact revision, then provider name,
    then the most recent provider version and verification.
    """

    consumer_id: int
    consumer_name: str
    consumer_version_id: int
    consumer_version_number: str
    consumer_version_order: int
    pact_publication_id: int
    pact_revision_number: int
    provider_id: int
    provider_name: str
    provider_version_id: int | None = None
    provider_version_number: str | None = None
    provider_version_order: int | None = None
    verification_id: int | None = None
    success: bool | None = None
    pact_created_at: datetime.datetime | None = None
    verification_executed_at: datetime.datetime | None = None
    consumer_version_tags: tuple[str, ...] = ()
    provider_version_tags: tuple[str, ...] = ()

    @property
    def verified(self) -> bool:
        return self.provider_version_number is not None

    def sort_key(self) -> tuple:
        return (
            self.consumer_name,
            -self.consumer_version_order,
            -self.pact_revision_number,
            self.provider_name,
            _desc_nulls_first(self.provider_version_order),
            _desc_nulls_first(self.verification_id),
        )

    def __lt__(self, other: MatrixLine) -> bool:
        if not isinstance(other, MatrixLine):
            return NotImplemented
        return self.sort_key() < other.sort_key()


@dataclass(frozen=True, slots=True, eq=False)
class Integration:
    """A pair of participants that has exchanged at least one pact.

    The pair is unordered: equality and hashing use the two participant
    identifiers only, so A consuming B and B consuming A are one
    integration.  ``consumer_*``/``provider_*`` describe the first pact
    seen for the pair.
    """

    consumer_id: int
    provider_id: int
    consumer_name: str
    provider_name: str

    @property
    def participant_ids(self) -> frozenset[int]:
        return frozenset((self.consumer_id, self.provider_id))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Integration):
            return NotImplemented
        return self.participant_ids == other.participant_ids

    def __hash__(self) -> int:
        return hash(self.participant_ids)

    @property
    def participant_names(self) -> tuple[str, str]:
        return (self.consumer_name, self.provider_name)

    def involves(self, participant_name: str) -> bool:
        folded = participant_name.casefold()
        return any(name.casefold() == folded for name in self.participant_names)


# =============================================================================
# Query results
# =============================================================================


@dataclass(frozen=True)
class QueryResults:
    """Immutable outcome of a matrix query.

    Behaves like a sequence of :class:`MatrixLine`.
    ``unfiltered_lines`` holds the grouped lines before the ``success``
    filter; the deployment status summary is computed from them so a
    filtered-out failure is still reported as a failure.
    """

    lines: tuple[MatrixLine, ...]
    selectors: tuple[Selector, ...]
    options: MatrixOptions
    resolved_selectors: tuple[ResolvedSelector, ...]
    integrations: tuple[Integration, ...] = ()
    unfiltered_lines: tuple[MatrixLine, ...] | None = None

    def __iter__(self) -> Iterator[MatrixLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def __getitem__(self, index: int) -> MatrixLine:
        return self.lines[index]

    @property
    def deployment_status_summary(self) -> DeploymentStatusSummary:
        from pact_matrix.matrix.summary import DeploymentStatusSummary

        return DeploymentStatusSummary(
            lines=self.lines if self.unfiltered_lines is None else self.unfiltered_lines,
            resolved_selectors=self.resolved_selectors,
            integrations=self.integrations,
        )


# =============================================================================
# Refresh
# =============================================================================


@dataclass(frozen=True, slots=True)
class RefreshFilter:
    """Names describing which part of the matrix changed."""

    consumer_name: str | None = None
    provider_name: str | None = None
    participant_name: str | None = None
    tag_name: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshCriteria:
    """Identifier-based restriction for recomputing the materialized views.

    Unset fields do not restrict.  ``participant_id`` matches either side.
    """

    consumer_id: int | None = None
    provider_id: int | None = None
    participant_id: int | None = None
    tag_name: str | None = None

    @property
    def unrestricted(self) -> bool:
        return (
            self.consumer_id is None
            and self.provider_id is None
            and self.participant_id is None
            and self.tag_name is None
        )


__all__ = [
    "LatestBy",
    "ByName",
    "ByVersion",
    "ByTag",
    "ByTagLatest",
    "Latest",
    "Selector",
    "parse_selector",
    "MatrixOptions",
    "AnyVersion",
    "ANY_VERSION",
    "SpecificVersion",
    "VersionRef",
    "ResolvedSelector",
    "MatrixLine",
    "Integration",
    "QueryResults",
    "RefreshFilter",
    "RefreshCriteria",
]
