"""Selector resolution and matrix aggregation.

Modules
-------
types         selectors, options, resolved selectors, lines, results
identity      IdentityResolver
selectors     SelectorResolver
integrations  IntegrationGrapher
grouping      revision deduplication, latestby grouping, success filter
summary       DeploymentStatusSummary
service       MatrixService (imported from ``pact_matrix``)
"""

from pact_matrix.matrix.grouping import (
    apply_latestby,
    filter_success,
    remove_overwritten_revisions,
)
from pact_matrix.matrix.summary import DeploymentStatusSummary
from pact_matrix.matrix.types import (
    ANY_VERSION,
    AnyVersion,
    ByName,
    ByTag,
    ByTagLatest,
    ByVersion,
    Integration,
    Latest,
    MatrixLine,
    MatrixOptions,
    QueryResults,
    RefreshCriteria,
    RefreshFilter,
    ResolvedSelector,
    Selector,
    SpecificVersion,
    parse_selector,
)

__all__ = [
    "apply_latestby",
    "filter_success",
    "remove_overwritten_revisions",
    "DeploymentStatusSummary",
    "ANY_VERSION",
    "AnyVersion",
    "ByName",
    "ByTag",
    "ByTagLatest",
    "ByVersion",
    "Integration",
    "Latest",
    "MatrixLine",
    "MatrixOptions",
    "QueryResults",
    "RefreshCriteria",
    "RefreshFilter",
    "ResolvedSelector",
    "Selector",
    "SpecificVersion",
    "parse_selector",
]
