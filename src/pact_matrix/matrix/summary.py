"""Deployment status summary for a matrix query.

Answers "can these versions be deployed together?" from the grouped lines
of a query (taken before any ``success`` filter), the selectors they were
resolved from and the integrations relevant to those selectors.

Examples:
    >>> summary = service.find(selectors, options).deployment_status_summary
    >>> summary.deployable
    False
    >>> summary.reasons
    ('One or more verifications have failed',)

Tags:
    pact-matrix, deployment, summary, can-i-deploy
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

from pact_matrix.matrix.types import Integration, MatrixLine, ResolvedSelector

ALL_SUCCESSFUL = "All verification results are published and successful"
NO_RESULTS = "No results matched the given query"
MISSING_VERIFICATIONS = "Missing one or more verification results"
FAILED_VERIFICATIONS = "One or more verifications have failed"


@dataclass(frozen=True)
class DeploymentStatusSummary:
    lines: tuple[MatrixLine, ...]
    resolved_selectors: tuple[ResolvedSelector, ...]
    integrations: tuple[Integration, ...]

    @cached_property
    def missing_selectors(self) -> tuple[ResolvedSelector, ...]:
        """Selectors naming a participant or version that does not exist."""
        return tuple(s for s in self.resolved_selectors if not s.exists)

    @cached_property
    def integrations_without_a_line(self) -> tuple[Integration, ...]:
        covered = {frozenset((line.consumer_id, line.provider_id)) for line in self.lines}
        return tuple(i for i in self.integrations if i.participant_ids not in covered)

    @property
    def counts(self) -> dict[str, int]:
        return {
            "success": sum(1 for line in self.lines if line.success is True),
            "failed": sum(1 for line in self.lines if line.success is False),
            "unknown": sum(1 for line in self.lines if line.success is None)
            + len(self.integrations_without_a_line),
        }

    @property
    def deployable(self) -> bool | None:
        """``None`` when nothing is known, otherwise whether every check passed."""
        if self.missing_selectors:
            return False
        if not self.lines and not self.integrations:
            return None
        if self.integrations_without_a_line:
            return False
        return all(line.success is True for line in self.lines)

    @property
    def reasons(self) -> tuple[str, ...]:
        reasons: list[str] = []
        for selector in self.missing_selectors:
            if selector.participant_id is None:
                reasons.append(f"No participant named {selector.participant_name} exists")
            else:
                reasons.append(
                    f"No version {selector.version_number} of {selector.participant_name} exists"
                )
        for integration in self.integrations_without_a_line:
            reasons.append(
                f"There is no verified pact between {integration.consumer_name}"
                f" and {integration.provider_name}"
            )
        if any(line.success is None for line in self.lines):
            reasons.append(MISSING_VERIFICATIONS)
        if any(line.success is False for line in self.lines):
            reasons.append(FAILED_VERIFICATIONS)

        if reasons:
            return tuple(reasons)
        if self.deployable is None:
            return (NO_RESULTS,)
        return (ALL_SUCCESSFUL,)


__all__ = ["DeploymentStatusSummary"]
