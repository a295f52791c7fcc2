"""Package discoverers for the supported package managers.

Each discoverer reads one package manager's local database, or asks its
command-line tool, and produces PackageRecord objects.
"""

from syld.discoverers.apt import AptDiscoverer
from syld.discoverers.base import (
    BaseDiscoverer,
    CommandDiscoverer,
    DatabaseDiscoverer,
    DiscoveryError,
)
from syld.discoverers.dnf import DnfDiscoverer
from syld.discoverers.flatpak import FlatpakDiscoverer
from syld.discoverers.mise import MiseDiscoverer
from syld.discoverers.nix import NixDiscoverer
from syld.discoverers.pacman import PacmanDiscoverer
from syld.discoverers.snap import SnapDiscoverer

__all__ = [
    "AptDiscoverer",
    "BaseDiscoverer",
    "CommandDiscoverer",
    "DatabaseDiscoverer",
    "DiscoveryError",
    "DnfDiscoverer",
    "FlatpakDiscoverer",
    "MiseDiscoverer",
    "NixDiscoverer",
    "PacmanDiscoverer",
    "SnapDiscoverer",
    "active_discoverers",
]

# Registry of known discoverers: system package managers first, then
# application stores and per-user tool managers.
_DISCOVERERS: list[type[BaseDiscoverer]] = [
    AptDiscoverer,
    DnfDiscoverer,
    PacmanDiscoverer,
    FlatpakDiscoverer,
    SnapDiscoverer,
    NixDiscoverer,
    MiseDiscoverer,
]


def active_discoverers() -> list[BaseDiscoverer]:
    """Return the discoverers whose package manager is present on this system.

    Returns:
        Discoverer instances that passed their availability check.
    """
    discoverers = [discoverer_cls() for discoverer_cls in _DISCOVERERS]
    return [d for d in discoverers if d.is_available()]
