"""Discoverer for applications installed with Flatpak.

Only applications are listed; runtimes are support libraries the user did
not pick themselves.
"""

import logging

from syld.discoverers.base import CommandDiscoverer
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)

COLUMNS = "application,version,description,origin"


def parse_flatpak_line(line: str) -> PackageRecord:
    """Parse one line of ``flatpak list --columns=...`` output.

    Columns are application ID, version, description and origin remote.

    Raises:
        ValueError: If the application ID is empty.
    """
    fields = [f.strip() for f in line.split("\t")]
    if not fields[0]:
        raise ValueError(f"Missing application ID in flatpak line: {line!r}")

    version = fields[1] if len(fields) > 1 and fields[1] else "unknown"
    description = fields[2] if len(fields) > 2 and fields[2] else None
    return PackageRecord(
        name=fields[0],
        version=version,
        source=PackageSource.FLATPAK,
        description=description,
    )


def parse_flatpak_output(output: str) -> list[PackageRecord]:
    packages = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            packages.append(parse_flatpak_line(line))
        except ValueError as e:
            logger.warning("Failed to parse flatpak entry: %s", e)
    return packages


class FlatpakDiscoverer(CommandDiscoverer):
    """Discoverer running ``flatpak list --app``."""

    EXECUTABLE = "flatpak"

    @property
    def name(self) -> str:
        return "flatpak"

    def discover(self) -> list[PackageRecord]:
        return parse_flatpak_output(self._run("list", "--app", f"--columns={COLUMNS}"))
