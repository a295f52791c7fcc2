"""Discoverer for packages installed with apt/dpkg.

Reads the dpkg status database, a single file of RFC 822 style paragraphs
separated by blank lines.
"""

import logging
from pathlib import Path
from typing import Optional

from syld.discoverers.base import DatabaseDiscoverer
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)


def parse_dpkg_entry(entry: str) -> Optional[PackageRecord]:
    """Parse one paragraph of the dpkg status file.

    Continuation lines start with a space; in the Description field a lone
    ``.`` stands for an empty line.

    Args:
        entry: Text of one paragraph.

    Returns:
        The package, or None if its Status says it is not installed.

    Raises:
        ValueError: If the Package or Version field is missing.
    """
    fields: dict[str, str] = {}
    description: list[str] = []
    current = None

    for line in entry.splitlines():
        if line.startswith(" "):
            if current == "Description":
                rest = line[1:]
                description.append("" if rest == "." else rest)
            continue

        key, sep, value = line.partition(": ")
        if not sep:
            current = None
            continue

        current = key
        if key == "Description":
            description = [value]
        else:
            fields[key] = value

    status = fields.get("Status")
    if status is not None and "installed" not in status.split():
        return None

    if "Package" not in fields:
        raise ValueError("Missing Package field in dpkg entry")
    if "Version" not in fields:
        raise ValueError("Missing Version field in dpkg entry")

    return PackageRecord(
        name=fields["Package"],
        version=fields["Version"],
        source=PackageSource.APT,
        description="\n".join(description) if description else None,
        url=fields.get("Homepage"),
    )


def parse_dpkg_status(content: str) -> list[PackageRecord]:
    """Parse a whole dpkg status file.

    Malformed paragraphs are logged and skipped, as are packages that are not
    fully installed.
    """
    packages = []
    for paragraph in content.split("\n\n"):
        paragraph = paragraph.strip("\n")
        if not paragraph.strip():
            continue
        try:
            pkg = parse_dpkg_entry(paragraph)
        except ValueError as e:
            logger.warning("Failed to parse dpkg entry: %s", e)
            continue
        if pkg is not None:
            packages.append(pkg)
    return packages


class AptDiscoverer(DatabaseDiscoverer):
    """Discoverer reading /var/lib/dpkg/status."""

    DEFAULT_DB_PATH = Path("/var/lib/dpkg/status")

    @property
    def name(self) -> str:
        return "apt"

    def is_available(self) -> bool:
        return self.db_path.is_file()

    def discover(self) -> list[PackageRecord]:
        content = self.db_path.read_text(encoding="utf-8", errors="replace")
        return parse_dpkg_status(content)
