"""JSON reporter producing a machine-readable scan report."""

import json
from datetime import datetime
from typing import Any

from syld.grouping import NO_URL_KEY, normalize_url
from syld.models import PackageRecord, ProjectReport
from syld.reporters.base import BaseReporter


class JsonReporter(BaseReporter):
    """Reporter that serializes the report to pretty-printed JSON.

    The no-URL bucket is not listed under ``projects``; its packages are
    counted in ``packages_without_url`` and appear in ``packages``.
    """

    def build(
        self,
        reports: list[ProjectReport],
        packages: list[PackageRecord],
        scanned_at: datetime,
    ) -> dict[str, Any]:
        """Build the JSON document as a dictionary."""
        projects = []
        for report in reports:
            if report.key == NO_URL_KEY:
                continue
            entry: dict[str, Any] = {
                "url": report.key,
                "project_urls": report.member_urls,
                "package_names": report.package_names,
            }
            if report.project is not None:
                entry["project"] = report.project.to_dict()
            projects.append(entry)

        return {
            "scan_timestamp": scanned_at.isoformat(),
            "total_packages": len(packages),
            "total_projects": len(projects),
            "packages_without_url": sum(
                1 for pkg in packages if normalize_url(pkg.url) == NO_URL_KEY
            ),
            "enriched_projects": sum(1 for p in projects if "project" in p),
            "projects": projects,
            "packages": [pkg.to_dict() for pkg in packages],
        }

    def render(
        self,
        reports: list[ProjectReport],
        packages: list[PackageRecord],
        scanned_at: datetime,
    ) -> str:
        return json.dumps(self.build(reports, packages, scanned_at), indent=2)

    @property
    def format_name(self) -> str:
        return "json"

    @property
    def default_extension(self) -> str:
        return ".json"
