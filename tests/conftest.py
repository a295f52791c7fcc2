"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest

from syld.models import FundingChannel, PackageRecord, PackageSource, UpstreamProject


@pytest.fixture
def sample_packages() -> list[PackageRecord]:
    """A small scan spanning both sources and a package without URL."""
    return [
        PackageRecord(
            "firefox",
            "128.0-1",
            PackageSource.PACMAN,
            url="https://www.mozilla.org/firefox/",
            licenses=("MPL-2.0",),
        ),
        PackageRecord(
            "linux",
            "6.9.1-1",
            PackageSource.PACMAN,
            url="https://www.kernel.org/",
            licenses=("GPL-2.0-only",),
        ),
        PackageRecord(
            "avahi", "0.8-10", PackageSource.APT, url="http://0pointer.de/projects/avahi/"
        ),
        PackageRecord(
            "pulseaudio",
            "17.0-3",
            PackageSource.PACMAN,
            url="https://0pointer.de/projects/pulseaudio",
        ),
        PackageRecord("orphan", "1.0", PackageSource.APT),
    ]


@pytest.fixture
def sample_project() -> UpstreamProject:
    """A fully populated upstream project."""
    return UpstreamProject(
        name="requests",
        repo_url="https://github.com/psf/requests",
        homepage="https://requests.readthedocs.io",
        licenses=["Apache-2.0"],
        funding=[
            FundingChannel(platform="Open Collective", url="https://opencollective.com/requests")
        ],
        bug_tracker="https://github.com/psf/requests/issues",
        stars=52000,
        is_open_source=True,
    )


@pytest.fixture
def scanned_at() -> datetime:
    return datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
