"""Enrichers filling in upstream project metadata from various sources.

This module provides the enricher interface, the concrete enrichers
(license classification, GitHub, Open Collective, Liberapay) and the
pipeline that applies them in priority order.
"""

import logging

from syld.config import Config
from syld.enrichers.base import BaseEnricher, EnrichmentError
from syld.enrichers.github import GitHubEnricher
from syld.enrichers.license_classify import LicenseClassifyEnricher
from syld.enrichers.liberapay import LiberapayEnricher
from syld.enrichers.open_collective import OpenCollectiveEnricher
from syld.enrichers.pipeline import EnrichmentObserver, EnrichmentPipeline

__all__ = [
    "BaseEnricher",
    "EnrichmentError",
    "EnrichmentObserver",
    "EnrichmentPipeline",
    "GitHubEnricher",
    "LicenseClassifyEnricher",
    "LiberapayEnricher",
    "OpenCollectiveEnricher",
    "active_enrichers",
]

logger = logging.getLogger(__name__)


def active_enrichers(config: Config) -> list[BaseEnricher]:
    """Return the enrichers usable in the current environment.

    Candidates are instantiated in the order listed by ``config.enrichers``
    and filtered through ``is_available()``.

    Args:
        config: Runtime configuration.

    Returns:
        Available enrichers in priority order.
    """
    candidates: dict[str, BaseEnricher] = {
        "license_classify": LicenseClassifyEnricher(),
        "github": GitHubEnricher(github_token=config.github_token),
        "open_collective": OpenCollectiveEnricher(),
        "liberapay": LiberapayEnricher(),
    }

    enrichers = []
    for name in config.enrichers:
        enricher = candidates[name]
        if enricher.is_available():
            enrichers.append(enricher)
        else:
            logger.info("Enricher %s is not available, skipping", name)
    return enrichers
