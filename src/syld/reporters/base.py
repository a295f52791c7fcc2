"""Base interface for output reporters.

Reporters render grouped, optionally enriched, project entries to a
terminal table, JSON or HTML.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

from syld.models import PackageRecord, ProjectReport


class BaseReporter(ABC):
    """Abstract base class for output reporters."""

    @abstractmethod
    def render(
        self,
        reports: list[ProjectReport],
        packages: list[PackageRecord],
        scanned_at: datetime,
    ) -> str:
        """Render a report.

        Args:
            reports: One entry per project group, as built by build_report().
            packages: All packages of the scan.
            scanned_at: When the scan was taken.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(
        self,
        reports: list[ProjectReport],
        packages: list[PackageRecord],
        scanned_at: datetime,
        output_path: Path,
    ) -> None:
        """Render and write output to a file."""
        content = self.render(reports, packages, scanned_at)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name, like "terminal", "json" or "html"."""
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format."""
        ...
