"""syld - Find the upstream projects behind your installed packages.

This package groups system packages by the upstream project they come from
and enriches each project with licensing, funding and contribution data.
"""

__version__ = "0.1.0"

from syld.models import (
    FundingChannel,
    PackageRecord,
    PackageSource,
    ProjectGroup,
    ProjectReport,
    UpstreamProject,
)

__all__ = [
    "__version__",
    "FundingChannel",
    "PackageRecord",
    "PackageSource",
    "ProjectGroup",
    "ProjectReport",
    "UpstreamProject",
]
