"""Liberapay enricher.

Checks whether a Liberapay account exists under the project's name and adds
it as a funding channel.
"""

import copy

from syld.enrichers.http import HttpEnricher
from syld.models import FundingChannel, UpstreamProject

PLATFORM = "Liberapay"


class LiberapayEnricher(HttpEnricher):
    """Enricher that queries Liberapay's public account endpoint."""

    @property
    def name(self) -> str:
        return "liberapay"

    def is_available(self) -> bool:
        return True

    async def enrich(self, project: UpstreamProject) -> UpstreamProject:
        enriched = copy.deepcopy(project)

        if any(f.platform == PLATFORM for f in project.funding):
            return enriched

        account = project.name.strip()
        if not account or "/" in account:
            return enriched

        if await self._exists(f"https://liberapay.com/{account}/public.json"):
            enriched.funding.append(
                FundingChannel(platform=PLATFORM, url=f"https://liberapay.com/{account}")
            )

        return enriched
