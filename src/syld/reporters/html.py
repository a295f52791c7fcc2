"""HTML reporter generating a standalone report page.

Uses a Jinja2 template bundled in ``syld.templates``, or a custom one.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

from syld.grouping import NO_URL_KEY
from syld.models import PackageRecord, ProjectReport
from syld.reporters.base import BaseReporter


class HtmlReporter(BaseReporter):
    """Reporter rendering the project list into an HTML page.

    Autoescaping is always on, since package metadata comes from package
    databases and remote APIs.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the HTML reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=True,
            )
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        template_content = (
            files("syld.templates")
            .joinpath("report.html.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(autoescape=select_autoescape(default_for_string=True))
        return env.from_string(template_content)

    def render(
        self,
        reports: list[ProjectReport],
        packages: list[PackageRecord],
        scanned_at: datetime,
    ) -> str:
        projects = [r for r in reports if r.key != NO_URL_KEY]
        orphans = [name for r in reports if r.key == NO_URL_KEY for name in r.package_names]
        return self.template.render(
            projects=projects,
            orphans=orphans,
            total_packages=len(packages),
            scanned_at=scanned_at,
        )

    @property
    def format_name(self) -> str:
        return "html"

    @property
    def default_extension(self) -> str:
        return ".html"
