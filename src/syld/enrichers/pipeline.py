"""Enrichment pipeline applying enrichers to every upstream project.

This module drives enrichment for a scan: it builds one base project per
distinct package URL, serves fresh results from the enrichment cache, and
otherwise runs every enricher in priority order, merging each contribution
onto the project before writing the result back to the cache.
"""

import logging
from typing import Optional

from syld.cache import CacheCorruptionError, EnrichmentCache
from syld.enrichers.base import BaseEnricher
from syld.grouping import normalize_url
from syld.merge import merge_enrichment
from syld.models import PackageRecord, UpstreamProject

logger = logging.getLogger(__name__)

# Enriched projects keyed by normalized package URL.
EnrichmentMap = dict[str, UpstreamProject]


class EnrichmentObserver:
    """Receives progress notifications from the pipeline.

    The default implementation ignores everything; the CLI passes one that
    drives a progress bar.
    """

    def started(self, total: int, enricher_names: list[str]) -> None:
        """Called once before the first project is processed."""

    def advance(self, project_name: str) -> None:
        """Called after each project, whether it came from cache or not."""

    def finished(self, enriched_count: int) -> None:
        """Called once after the last project."""


def base_projects(packages: list[PackageRecord]) -> EnrichmentMap:
    """Build one base project per distinct normalized package URL.

    The first package seen for a URL provides the project name, the raw URL
    (used as repository URL and cache key) and the initial licenses.
    Packages without a URL are skipped.
    """
    projects: EnrichmentMap = {}
    for pkg in packages:
        key = normalize_url(pkg.url)
        if not key or key in projects:
            continue
        projects[key] = UpstreamProject(
            name=pkg.name,
            repo_url=pkg.url,
            licenses=list(dict.fromkeys(pkg.licenses)),
        )
    return projects


class EnrichmentPipeline:
    """Runs enrichers over upstream projects, one project at a time.

    Enrichers are applied strictly in the order given, and each call is
    awaited before the next starts, so that rate-limited APIs are never hit
    concurrently. Because merging is first-writer-wins, this order is also
    the priority order between sources.

    Attributes:
        enrichers: Enrichers in priority order.
        cache: Optional enrichment cache.
        observer: Progress observer.
    """

    def __init__(
        self,
        enrichers: list[BaseEnricher],
        cache: Optional[EnrichmentCache] = None,
        observer: Optional[EnrichmentObserver] = None,
    ) -> None:
        self.enrichers = list(enrichers)
        self.cache = cache
        self.observer = observer or EnrichmentObserver()

    async def enrich_project(self, project: UpstreamProject) -> UpstreamProject:
        """Apply every enricher to one project.

        A failing enricher is logged and skipped; it never aborts the run.

        Args:
            project: Base project. Not modified.

        Returns:
            The fused project.
        """
        enriched = project
        for enricher in self.enrichers:
            try:
                contribution = await enricher.enrich(enriched)
            except Exception as e:
                logger.warning(
                    "%s enrichment failed for %s: %s", enricher.name, project.name, e
                )
                continue
            enriched = merge_enrichment(enriched, contribution)
        return enriched

    def _cached(self, key: str) -> Optional[UpstreamProject]:
        if self.cache is None:
            return None
        try:
            return self.cache.get(key)
        except CacheCorruptionError as e:
            logger.error("Ignoring corrupt enrichment cache entry: %s", e)
            return None

    def _store(self, key: str, project: UpstreamProject) -> None:
        if self.cache is None:
            return
        try:
            self.cache.set(key, project)
        except Exception as e:
            logger.warning("Failed to cache enrichment for %s: %s", project.name, e)

    async def enrich_packages(self, packages: list[PackageRecord]) -> EnrichmentMap:
        """Enrich the upstream projects behind a list of packages.

        Args:
            packages: Packages from a scan.

        Returns:
            Fused projects keyed by normalized package URL.

        Raises:
            InvalidProjectError: If a base project has no usable identity.
        """
        projects = base_projects(packages)
        self.observer.started(len(projects), [e.name for e in self.enrichers])

        results: EnrichmentMap = {}
        from_cache = 0

        for key, base in projects.items():
            cache_key = base.identity_key

            cached = self._cached(cache_key)
            if cached is not None:
                logger.debug("Using cached enrichment for %s", cache_key)
                results[key] = cached
                from_cache += 1
                self.observer.advance(base.name)
                continue

            enriched = await self.enrich_project(base)
            self._store(cache_key, enriched)
            results[key] = enriched
            self.observer.advance(base.name)

        logger.info(
            "Enriched %d projects (%d from cache)", len(results), from_cache
        )
        self.observer.finished(len(results))
        return results

    async def close(self) -> None:
        """Close every enricher."""
        for enricher in self.enrichers:
            await enricher.close()

    async def __aenter__(self) -> "EnrichmentPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
