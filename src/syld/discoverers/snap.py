"""Discoverer for applications installed with Snap.

``snap list`` gives names and versions. Each mounted snap also ships a
``meta/snap.yaml`` with its summary and license, read when present.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from syld.discoverers.base import CommandDiscoverer
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)

DEFAULT_SNAP_ROOT = Path("/snap")


def parse_snap_list(output: str) -> list[PackageRecord]:
    """Parse the columnar output of ``snap list``.

    The first non-empty line is the header (Name, Version, Rev, Tracking,
    Publisher, Notes); columns are separated by runs of spaces.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    packages = []
    for line in lines[1:]:
        fields = line.split()
        packages.append(
            PackageRecord(
                name=fields[0],
                version=fields[1] if len(fields) > 1 else "unknown",
                source=PackageSource.SNAP,
            )
        )
    return packages


def parse_snap_yaml(content: str) -> dict[str, Any]:
    """Extract the description and license from a snap.yaml file.

    Args:
        content: Text of meta/snap.yaml.

    Returns:
        A dict with optional "description" and "licenses" keys. The summary
        line is preferred over the long description.

    Raises:
        ValueError: If the content is not valid YAML.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid snap.yaml: {e}") from e

    if not isinstance(data, dict):
        return {}

    meta: dict[str, Any] = {}
    description = data.get("summary") or data.get("description")
    if isinstance(description, str) and description.strip():
        meta["description"] = description.strip()
    license_ = data.get("license")
    if isinstance(license_, str) and license_.strip():
        meta["licenses"] = (license_.strip(),)
    return meta


class SnapDiscoverer(CommandDiscoverer):
    """Discoverer running ``snap list``.

    Attributes:
        snap_root: Mount point of installed snaps.
    """

    EXECUTABLE = "snap"

    def __init__(self, executable: Optional[str] = None, snap_root: Path = DEFAULT_SNAP_ROOT) -> None:
        super().__init__(executable)
        self.snap_root = snap_root

    @property
    def name(self) -> str:
        return "snap"

    def discover(self) -> list[PackageRecord]:
        return [self._with_metadata(pkg) for pkg in parse_snap_list(self._run("list"))]

    def _with_metadata(self, pkg: PackageRecord) -> PackageRecord:
        yaml_path = self.snap_root / pkg.name / "current" / "meta" / "snap.yaml"
        if not yaml_path.is_file():
            return pkg
        try:
            meta = parse_snap_yaml(yaml_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Failed to read %s: %s", yaml_path, e)
            return pkg
        return dataclasses.replace(pkg, **meta)
