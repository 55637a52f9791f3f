"""pact-matrix — contract verification matrix resolution.

Given selectors naming participants (by name, explicit version, tag or
"latest"), compute which participant versions have been verified against
each other and whether verification succeeded.

Example::

    from pact_matrix import ByTagLatest, ByVersion, MatrixOptions, MatrixService

    results = MatrixService(session).find(
        [ByVersion("Foo", "2.0.0")],
        MatrixOptions(latestby="cvp", latest=True, tag="prod"),
    )
    results.deployment_status_summary.deployable
"""

from pact_matrix.core.errors import MatrixError, NotFoundError, ValidationError
from pact_matrix.core.settings import MatrixSettings
from pact_matrix.matrix import (
    ByName,
    ByTag,
    ByTagLatest,
    ByVersion,
    DeploymentStatusSummary,
    Integration,
    Latest,
    MatrixLine,
    MatrixOptions,
    QueryResults,
    RefreshCriteria,
    RefreshFilter,
    ResolvedSelector,
    parse_selector,
)
from pact_matrix.matrix.service import MatrixService, open_matrix_service

__version__ = "0.1.0"

__all__ = [
    "MatrixError",
    "NotFoundError",
    "ValidationError",
    "MatrixSettings",
    "ByName",
    "ByTag",
    "ByTagLatest",
    "ByVersion",
    "DeploymentStatusSummary",
    "Integration",
    "Latest",
    "MatrixLine",
    "MatrixOptions",
    "QueryResults",
    "RefreshCriteria",
    "RefreshFilter",
    "ResolvedSelector",
    "parse_selector",
    "MatrixService",
    "open_matrix_service",
]
