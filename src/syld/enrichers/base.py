"""Base interface for enrichment backends.

Enrichers fill in missing metadata on an upstream project from a single
source, such as the GitHub API or a local license classification table.
"""

from abc import ABC, abstractmethod

from syld.models import UpstreamProject


class EnrichmentError(Exception):
    """Raised when an enricher cannot complete for a project.

    The pipeline treats this as "no contribution from this enricher" and
    moves on to the next one.
    """


class BaseEnricher(ABC):
    """Abstract base class for enrichment backends.

    Enrichers are applied one after another, in priority order, to the same
    project. Each returns an augmented copy of the project and must leave its
    input untouched.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a stable, lowercase identifier for logging and configuration.

        The identifier must not change meaning between releases.

        Returns:
            Name like "github", "liberapay", etc.
        """
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check whether this enricher can run in the current environment.

        Called once at startup. Must be cheap: check credentials or local
        files only, never the network.

        Returns:
            True if the enricher can be used.
        """
        ...

    @abstractmethod
    async def enrich(self, project: UpstreamProject) -> UpstreamProject:
        """Enrich a project with metadata from this source.

        Fields this enricher cannot determine are copied from the input.

        Args:
            project: Project to enrich. Not modified.

        Returns:
            A new UpstreamProject with additional fields filled in.

        Raises:
            EnrichmentError: If the source could not be queried.
        """
        ...

    async def close(self) -> None:
        """Release any resources held by the enricher."""
