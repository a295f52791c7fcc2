"""Terminal reporter rendering rich tables."""

import io
from collections import Counter
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.table import Table

from syld.grouping import NO_URL_KEY
from syld.models import PackageRecord, ProjectReport, UpstreamProject
from syld.reporters.base import BaseReporter


def _license_cell(project: Optional[UpstreamProject]) -> str:
    if project is None or not project.licenses:
        return "-"
    text = ", ".join(project.licenses)
    if project.is_open_source is False:
        text += " (not OSI)"
    return text


def _funding_cell(project: Optional[UpstreamProject]) -> str:
    if project is None or not project.funding:
        return "-"
    return ", ".join(dict.fromkeys(ch.platform for ch in project.funding))


class TerminalReporter(BaseReporter):
    """Reporter printing a per-source summary and a project table.

    Attributes:
        limit: Maximum number of projects to list. 0 shows all.
        width: Console width used for rendering.
    """

    def __init__(self, limit: int = 0, width: int = 120) -> None:
        self.limit = limit
        self.width = width

    def render(
        self,
        reports: list[ProjectReport],
        packages: list[PackageRecord],
        scanned_at: datetime,
    ) -> str:
        buffer = io.StringIO()
        console = Console(file=buffer, width=self.width, no_color=True)

        if not packages:
            console.print("No packages found.")
            return buffer.getvalue()

        by_source = Counter(str(pkg.source) for pkg in packages)
        summary = Table("Source", "Packages")
        for source in sorted(by_source):
            summary.add_row(source, str(by_source[source]))
        console.print(summary)

        projects = [r for r in reports if r.key != NO_URL_KEY]
        without_url = sum(len(r.package_names) for r in reports if r.key == NO_URL_KEY)

        console.print(f"Scan date:              {scanned_at:%Y-%m-%d %H:%M} UTC")
        console.print(f"Total packages:         {len(packages)}")
        console.print(f"Upstream projects:      {len(projects)}")
        console.print(f"Packages without URL:   {without_url}")

        shown = projects if self.limit == 0 else projects[: self.limit]
        if shown:
            table = Table("Project", "Packages", "Licenses", "Stars", "Funding")
            for report in shown:
                project = report.project
                stars = "-" if project is None or project.stars is None else str(project.stars)
                table.add_row(
                    report.key,
                    ", ".join(report.package_names),
                    _license_cell(project),
                    stars,
                    _funding_cell(project),
                )
            console.print(table)

        remaining = len(projects) - len(shown)
        if remaining > 0:
            console.print(f"... and {remaining} more projects (use --limit 0 to show all)")

        return buffer.getvalue()

    @property
    def format_name(self) -> str:
        return "terminal"

    @property
    def default_extension(self) -> str:
        return ".txt"
