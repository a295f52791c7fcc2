"""Discoverer for packages installed with dnf/rpm.

Queries the RPM database through ``rpm -qa`` with a tab-separated query
format instead of linking against librpm.
"""

import logging
from typing import Optional

from syld.discoverers.base import CommandDiscoverer
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)

QUERY_FORMAT = "%{NAME}\t%{VERSION}-%{RELEASE}\t%{SUMMARY}\t%{URL}\t%{LICENSE}\n"

# rpm prints this for tags a package does not set
RPM_NONE = "(none)"


def _field(fields: list[str], index: int) -> Optional[str]:
    if index >= len(fields):
        return None
    value = fields[index].strip()
    if not value or value == RPM_NONE:
        return None
    return value


def parse_rpm_line(line: str) -> PackageRecord:
    """Parse one line of ``rpm -qa --queryformat`` output.

    Columns are NAME, VERSION-RELEASE, SUMMARY, URL and LICENSE. Missing
    trailing columns are allowed.

    Raises:
        ValueError: If the name column is empty.
    """
    fields = line.split("\t")
    name = _field(fields, 0)
    if name is None:
        raise ValueError(f"Missing package name in rpm line: {line!r}")

    license_ = _field(fields, 4)
    return PackageRecord(
        name=name,
        version=_field(fields, 1) or "unknown",
        source=PackageSource.DNF,
        description=_field(fields, 2),
        url=_field(fields, 3),
        licenses=(license_,) if license_ else (),
    )


def parse_rpm_output(output: str) -> list[PackageRecord]:
    """Parse the whole output of the rpm query, skipping malformed lines."""
    packages = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            packages.append(parse_rpm_line(line))
        except ValueError as e:
            logger.warning("Failed to parse rpm entry: %s", e)
    return packages


class DnfDiscoverer(CommandDiscoverer):
    """Discoverer for Fedora, RHEL and other RPM-based systems."""

    EXECUTABLE = "rpm"

    @property
    def name(self) -> str:
        return "dnf"

    def discover(self) -> list[PackageRecord]:
        return parse_rpm_output(self._run("-qa", "--queryformat", QUERY_FORMAT))
