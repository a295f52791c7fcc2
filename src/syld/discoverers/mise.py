"""Discoverer for developer tools installed with mise.

``mise ls --json`` maps each tool name to the list of its installed
versions.
"""

import json
import logging
from typing import Any, Optional

from syld.discoverers.base import CommandDiscoverer, DiscoveryError
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)


def _describe(tool: str, source: Optional[dict[str, Any]]) -> str:
    if not isinstance(source, dict) or not source.get("type"):
        return f"{tool} (installed via mise)"
    if source.get("path"):
        return f"{tool} (from {source['type']}: {source['path']})"
    return f"{tool} (from {source['type']})"


def parse_mise_ls(output: str) -> list[PackageRecord]:
    """Parse the JSON printed by ``mise ls --json``.

    Args:
        output: Command output, a JSON object of tool name to version entries.

    Returns:
        One package per installed tool version, sorted by name and version.

    Raises:
        ValueError: If the output is not a JSON object.
    """
    if not output.strip():
        return []

    try:
        tools = json.loads(output)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid mise ls output: {e}") from e
    if not isinstance(tools, dict):
        raise ValueError("Invalid mise ls output: expected a JSON object")

    packages = []
    for tool, entries in tools.items():
        if not isinstance(entries, list):
            logger.warning("Skipping mise tool %s: unexpected entry %r", tool, entries)
            continue
        for entry in entries:
            if not isinstance(entry, dict) or not entry.get("version"):
                logger.warning("Skipping mise entry without version for %s", tool)
                continue
            packages.append(
                PackageRecord(
                    name=tool,
                    version=str(entry["version"]),
                    source=PackageSource.MISE,
                    description=_describe(tool, entry.get("source")),
                )
            )

    return sorted(packages, key=lambda p: (p.name, p.version))


class MiseDiscoverer(CommandDiscoverer):
    """Discoverer running ``mise ls --json``."""

    EXECUTABLE = "mise"

    @property
    def name(self) -> str:
        return "mise"

    def discover(self) -> list[PackageRecord]:
        try:
            return parse_mise_ls(self._run("ls", "--json"))
        except ValueError as e:
            raise DiscoveryError(str(e)) from e
