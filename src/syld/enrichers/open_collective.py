"""Open Collective enricher.

Checks whether a project has an Open Collective page and adds it as a
funding channel.
"""

import copy

from syld.enrichers.http import HttpEnricher
from syld.models import FundingChannel, UpstreamProject

PLATFORM = "Open Collective"


def collective_slug(project_name: str) -> str:
    """Derive an Open Collective slug from a project name."""
    return project_name.strip().lower().replace(" ", "-")


class OpenCollectiveEnricher(HttpEnricher):
    """Enricher that looks up a project's collective by its name."""

    API_URL = "https://api.opencollective.com/v1/collectives/{slug}"

    @property
    def name(self) -> str:
        return "open_collective"

    def is_available(self) -> bool:
        return True

    async def enrich(self, project: UpstreamProject) -> UpstreamProject:
        enriched = copy.deepcopy(project)

        if any(f.platform == PLATFORM for f in project.funding):
            return enriched

        slug = collective_slug(project.name)
        if not slug:
            return enriched

        if await self._exists(self.API_URL.format(slug=slug)):
            enriched.funding.append(
                FundingChannel(platform=PLATFORM, url=f"https://opencollective.com/{slug}")
            )

        return enriched
