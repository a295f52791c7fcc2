"""Assembly of per-project report entries.

Reporters consume the ProjectReport list built here and never regroup
packages themselves.
"""

from typing import Optional

from syld.grouping import group_by_project
from syld.models import PackageRecord, ProjectGroup, ProjectReport, UpstreamProject


def _fused_project(
    group: ProjectGroup, enrichment: dict[str, UpstreamProject]
) -> Optional[UpstreamProject]:
    """Find the enriched project for a group.

    Exact groups are looked up by key. A merged ancestor group has no project
    of its own, so the first member URL with enrichment data is used.
    """
    if group.key in enrichment:
        return enrichment[group.key]
    for url in group.member_urls:
        if url in enrichment:
            return enrichment[url]
    return None


def build_report(
    packages: list[PackageRecord],
    enrichment: Optional[dict[str, UpstreamProject]] = None,
) -> list[ProjectReport]:
    """Group packages and attach enriched project data.

    Args:
        packages: Packages from a scan.
        enrichment: Enriched projects keyed by normalized URL, if any.

    Returns:
        One entry per project group, in group order.
    """
    enrichment = enrichment or {}
    return [
        ProjectReport(
            key=group.key,
            member_urls=list(group.member_urls),
            package_names=sorted(pkg.name for pkg in group.members),
            project=_fused_project(group, enrichment),
        )
        for group in group_by_project(packages)
    ]
