"""Discoverer for packages installed with pacman.

The pacman database at /var/lib/pacman/local holds one directory per
installed package, each with a ``desc`` file of ``%FIELD%`` blocks.
"""

import logging
from pathlib import Path

from syld.discoverers.base import DatabaseDiscoverer
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)


def parse_desc(content: str) -> PackageRecord:
    """Parse the content of a pacman ``desc`` file.

    Each field starts with a ``%NAME%`` header line followed by one value per
    line, and ends at a blank line.

    Args:
        content: Text of the desc file.

    Returns:
        The package described by the file.

    Raises:
        ValueError: If %NAME% or %VERSION% is missing.
    """
    fields: dict[str, list[str]] = {}
    current = None

    for line in content.splitlines():
        line = line.strip()
        if not line:
            current = None
            continue
        if line.startswith("%") and line.endswith("%") and len(line) > 1:
            current = line
            fields.setdefault(current, [])
            continue
        if current is not None:
            fields[current].append(line)

    def first(field: str):
        values = fields.get(field)
        return values[0] if values else None

    name = first("%NAME%")
    version = first("%VERSION%")
    if name is None:
        raise ValueError("Missing %NAME% in desc file")
    if version is None:
        raise ValueError("Missing %VERSION% in desc file")

    return PackageRecord(
        name=name,
        version=version,
        source=PackageSource.PACMAN,
        description=first("%DESC%"),
        url=first("%URL%"),
        licenses=tuple(fields.get("%LICENSE%", [])),
    )


class PacmanDiscoverer(DatabaseDiscoverer):
    """Discoverer reading the local pacman database."""

    DEFAULT_DB_PATH = Path("/var/lib/pacman/local")

    @property
    def name(self) -> str:
        return "pacman"

    def is_available(self) -> bool:
        return self.db_path.is_dir()

    def discover(self) -> list[PackageRecord]:
        if not self.db_path.is_dir():
            raise FileNotFoundError(f"pacman database not found: {self.db_path}")

        packages = []
        for desc_path in sorted(self.db_path.glob("*/desc")):
            try:
                packages.append(parse_desc(desc_path.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError, ValueError) as e:
                logger.warning("Failed to parse %s: %s", desc_path, e)

        return packages
