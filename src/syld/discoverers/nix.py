"""Discoverer for packages installed with Nix.

Covers packages in the user's default profile (``nix profile list``) and,
on NixOS, the system profile. Names and versions come from store paths of
the form ``/nix/store/<32-char hash>-<name>-<version>``.
"""

import logging
from pathlib import Path
from typing import Optional

from syld.discoverers.base import CommandDiscoverer, DiscoveryError
from syld.models import PackageRecord, PackageSource

logger = logging.getLogger(__name__)

STORE_DIR = "/nix/store/"
HASH_LENGTH = 32
DEFAULT_SYSTEM_PROFILE = Path("/run/current-system/sw")


def split_name_version(name_version: str) -> tuple[str, str]:
    """Split a derivation name like ``my-package-1.0.2`` into name and version.

    Examples:
        ``firefox-128.0`` -> ("firefox", "128.0")
        ``python3-3.12.0`` -> ("python3", "3.12.0")
        ``some-lib`` -> ("some-lib", "unknown")
    """
    split_at = None
    for i, char in enumerate(name_version):
        if char == "-" and name_version[i + 1 : i + 2].isdigit():
            split_at = i
    if split_at is None or split_at == 0:
        return name_version, "unknown"
    return name_version[:split_at], name_version[split_at + 1 :]


def parse_store_path(path: str) -> Optional[PackageRecord]:
    """Build a package from a Nix store path.

    Returns:
        The package, or None if the path is not a store path with a name.
    """
    if not path.startswith(STORE_DIR):
        return None
    entry = path[len(STORE_DIR):].split("/", 1)[0]
    if len(entry) <= HASH_LENGTH + 1 or entry[HASH_LENGTH] != "-":
        return None

    name, version = split_name_version(entry[HASH_LENGTH + 1 :])
    return PackageRecord(name=name, version=version, source=PackageSource.NIX)


def parse_profile_list(output: str) -> list[PackageRecord]:
    """Parse ``nix profile list`` output.

    Nix 2.20 and later print blocks of ``Name:``/``Store paths:`` lines;
    older releases print one line per element ending in its store path.
    Only the first store path of an element is used.
    """
    packages = []
    for line in output.splitlines():
        store_paths = [f for f in line.split() if f.startswith(STORE_DIR)]
        if not store_paths:
            continue
        pkg = parse_store_path(store_paths[0])
        if pkg is not None:
            packages.append(pkg)
    return packages


def parse_store_references(output: str) -> list[PackageRecord]:
    """Parse ``nix-store --query --references`` output, one store path per line."""
    packages = []
    for line in output.splitlines():
        pkg = parse_store_path(line.strip())
        if pkg is not None:
            packages.append(pkg)
    return packages


def dedup_by_name(packages: list[PackageRecord]) -> list[PackageRecord]:
    """Drop repeated names, keeping the last occurrence at its position."""
    last_index = {pkg.name: i for i, pkg in enumerate(packages)}
    return [pkg for i, pkg in enumerate(packages) if last_index[pkg.name] == i]


class NixDiscoverer(CommandDiscoverer):
    """Discoverer for Nix profiles and the NixOS system profile.

    Attributes:
        system_profile: Path of the NixOS system profile.
    """

    EXECUTABLE = "nix"

    def __init__(
        self,
        executable: Optional[str] = None,
        system_profile: Path = DEFAULT_SYSTEM_PROFILE,
    ) -> None:
        super().__init__(executable)
        self.system_profile = system_profile

    @property
    def name(self) -> str:
        return "nix"

    def is_available(self) -> bool:
        return Path(STORE_DIR).is_dir()

    def discover(self) -> list[PackageRecord]:
        packages = []

        try:
            packages.extend(parse_profile_list(self._run("profile", "list")))
        except DiscoveryError as e:
            logger.warning("Could not list the Nix profile: %s", e)

        if self.system_profile.is_dir():
            try:
                output = self._run(
                    "--query", "--references", str(self.system_profile), program="nix-store"
                )
                packages.extend(parse_store_references(output))
            except DiscoveryError as e:
                logger.warning("Could not list NixOS system packages: %s", e)

        # System packages come last and win over profile entries of the same name.
        return dedup_by_name(packages)
