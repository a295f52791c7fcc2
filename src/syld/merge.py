"""Merging of enrichment results onto a base project.

Merging is first-writer-wins: a field already populated on the base is never
replaced, and collections only grow. Applying a list of enrichers in order
therefore gives each field to the first enricher that fills it, which makes
the enricher order a priority order.
"""

import copy

from syld.models import UpstreamProject

# Optional scalar fields filled only when unset on the base.
SCALAR_FIELDS = (
    "repo_url",
    "homepage",
    "bug_tracker",
    "contributing_url",
    "documentation_url",
    "good_first_issues_url",
    "stars",
    "is_open_source",
)


def merge_enrichment(
    base: UpstreamProject, contribution: UpstreamProject
) -> UpstreamProject:
    """Merge one enricher's contribution onto a base project.

    Args:
        base: The project as known so far.
        contribution: The project as returned by an enricher.

    Returns:
        A new UpstreamProject. Neither input is modified.
    """
    result = copy.deepcopy(base)

    for name in SCALAR_FIELDS:
        if getattr(result, name) is None:
            value = getattr(contribution, name)
            if value is not None:
                setattr(result, name, value)

    for license_id in contribution.licenses:
        if license_id not in result.licenses:
            result.licenses.append(license_id)

    # Funding is deduplicated by URL; the first platform label seen wins.
    seen_urls = {channel.url for channel in result.funding}
    for channel in contribution.funding:
        if channel.url not in seen_urls:
            result.funding.append(copy.copy(channel))
            seen_urls.add(channel.url)

    return result
