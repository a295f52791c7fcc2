"""Core data models for syld.

This module defines the fundamental data structures used throughout the
system: installed package records, upstream projects with their fused
metadata, and the project groups produced by the grouper.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class InvalidProjectError(ValueError):
    """Raised when an upstream project has neither a repository URL nor a homepage."""


class PackageSource(str, Enum):
    """The package manager that installed a package."""

    PACMAN = "pacman"
    APT = "apt"
    DNF = "dnf"
    FLATPAK = "flatpak"
    SNAP = "snap"
    NIX = "nix"
    MISE = "mise"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PackageRecord:
    """Immutable record of a package installed on the system.

    Produced by a discoverer and never modified afterwards. Frozen for
    hashability so records can be used as dictionary keys.

    Attributes:
        name: Package name as reported by the package manager. Not globally
            unique (the same name may exist in several managers).
        version: Manager-specific version string. Not comparable across
            package managers.
        source: Package manager that installed the package.
        description: Optional short description.
        url: Optional homepage or source URL reported by the manager.
        licenses: License identifiers, SPDX when the manager provides them.
    """

    name: str
    version: str
    source: PackageSource
    description: Optional[str] = None
    url: Optional[str] = None
    licenses: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "url": self.url,
            "source": self.source.value,
            "licenses": list(self.licenses),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PackageRecord":
        return cls(
            name=data["name"],
            version=data["version"],
            source=PackageSource(data["source"]),
            description=data.get("description"),
            url=data.get("url"),
            licenses=tuple(data.get("licenses") or ()),
        )


@dataclass
class FundingChannel:
    """A way to financially support a project.

    Attributes:
        platform: Platform label (e.g., "GitHub Sponsors", "Liberapay").
        url: URL of the funding page. Channels are deduplicated by this value.
    """

    platform: str
    url: str


@dataclass
class UpstreamProject:
    """An upstream open source project backing one or more installed packages.

    Created from the first package seen for a project URL, then filled in by
    enrichment backends. Fields left as None are "unset" and may still be
    populated by a later backend.

    Attributes:
        name: Canonical project name.
        repo_url: Source repository URL.
        homepage: Project homepage.
        licenses: License identifiers, deduplicated.
        funding: Funding channels, deduplicated by URL.
        bug_tracker: Bug tracker URL.
        contributing_url: Contributing guide URL.
        documentation_url: Documentation URL.
        good_first_issues_url: Link to beginner-friendly issues.
        stars: Star count on the hosting platform.
        is_open_source: Whether all licenses are OSI-approved. None means unknown.
    """

    name: str
    repo_url: Optional[str] = None
    homepage: Optional[str] = None
    licenses: list[str] = field(default_factory=list)
    funding: list[FundingChannel] = field(default_factory=list)
    bug_tracker: Optional[str] = None
    contributing_url: Optional[str] = None
    documentation_url: Optional[str] = None
    good_first_issues_url: Optional[str] = None
    stars: Optional[int] = None
    is_open_source: Optional[bool] = None

    @property
    def identity_key(self) -> str:
        """Return the key identifying this project in the enrichment cache.

        Returns:
            The repository URL, falling back to the homepage.

        Raises:
            InvalidProjectError: If the project has neither.
        """
        key = self.repo_url or self.homepage
        if not key:
            raise InvalidProjectError(
                f"Project '{self.name}' has neither a repository URL nor a homepage"
            )
        return key

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "repo_url": self.repo_url,
            "homepage": self.homepage,
            "licenses": list(self.licenses),
            "funding": [
                {"platform": channel.platform, "url": channel.url}
                for channel in self.funding
            ],
            "bug_tracker": self.bug_tracker,
            "contributing_url": self.contributing_url,
            "documentation_url": self.documentation_url,
            "good_first_issues_url": self.good_first_issues_url,
            "stars": self.stars,
            "is_open_source": self.is_open_source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UpstreamProject":
        """Build a project from a snapshot produced by to_dict().

        Fields missing from the snapshot (written by an older release) are
        left unset. Unknown keys are ignored.

        Raises:
            KeyError: If the snapshot has no name.
            TypeError: If a field has the wrong shape.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Expected a JSON object, got {type(data).__name__}")

        licenses = data.get("licenses") or []
        if not isinstance(licenses, list):
            raise TypeError("licenses must be a list")

        funding = data.get("funding") or []
        if not isinstance(funding, list):
            raise TypeError("funding must be a list")

        return cls(
            name=data["name"],
            repo_url=data.get("repo_url"),
            homepage=data.get("homepage"),
            licenses=[str(lic) for lic in licenses],
            funding=[
                FundingChannel(platform=ch["platform"], url=ch["url"])
                for ch in funding
            ],
            bug_tracker=data.get("bug_tracker"),
            contributing_url=data.get("contributing_url"),
            documentation_url=data.get("documentation_url"),
            good_first_issues_url=data.get("good_first_issues_url"),
            stars=data.get("stars"),
            is_open_source=data.get("is_open_source"),
        )


@dataclass
class ProjectGroup:
    """Packages believed to belong to the same upstream project.

    Attributes:
        key: Normalized URL, or the ancestor prefix for a merged group.
            The empty string is the bucket of packages without a URL.
        member_urls: Normalized URLs folded into a merged ancestor group.
            Empty for exact groups.
        members: Packages in this group.
    """

    key: str
    member_urls: list[str] = field(default_factory=list)
    members: list[PackageRecord] = field(default_factory=list)


@dataclass
class ProjectReport:
    """One report entry per project group, consumed by the reporters.

    Attributes:
        key: Grouping key of the project group.
        member_urls: Member URLs of a merged ancestor group.
        package_names: Sorted names of the packages in the group.
        project: Fused upstream project, if enrichment produced one.
    """

    key: str
    member_urls: list[str]
    package_names: list[str]
    project: Optional[UpstreamProject] = None
