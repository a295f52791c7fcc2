"""Tests for core data models."""

import pytest

from syld.models import (
    FundingChannel,
    InvalidProjectError,
    PackageRecord,
    PackageSource,
    UpstreamProject,
)


def test_identity_key_prefers_repo_url():
    project = UpstreamProject(name="p", repo_url="https://git.example/p", homepage="https://p.example")
    assert project.identity_key == "https://git.example/p"


def test_identity_key_falls_back_to_homepage():
    project = UpstreamProject(name="p", homepage="https://p.example")
    assert project.identity_key == "https://p.example"


def test_identity_key_without_urls_raises():
    """Test that a project with no URL at all is rejected."""
    project = UpstreamProject(name="nameless")

    with pytest.raises(InvalidProjectError, match="nameless"):
        project.identity_key


def test_invalid_project_error_is_value_error():
    assert issubclass(InvalidProjectError, ValueError)


def test_upstream_project_round_trip(sample_project):
    assert UpstreamProject.from_dict(sample_project.to_dict()) == sample_project


def test_upstream_project_from_dict_rejects_non_dict():
    with pytest.raises(TypeError):
        UpstreamProject.from_dict(["name"])


def test_upstream_project_from_dict_requires_name():
    with pytest.raises(KeyError):
        UpstreamProject.from_dict({"repo_url": "https://x"})


def test_package_record_round_trip():
    record = PackageRecord(
        name="avahi",
        version="0.8-10",
        source=PackageSource.APT,
        url="http://avahi.org",
        licenses=("LGPL-2.1-or-later",),
    )

    data = record.to_dict()

    assert data["source"] == "apt"
    assert PackageRecord.from_dict(data) == record


def test_package_record_is_hashable():
    record = PackageRecord(name="a", version="1", source=PackageSource.PACMAN)
    assert {record: 1}[record] == 1


def test_package_source_str():
    assert str(PackageSource.FLATPAK) == "flatpak"


def test_funding_channel_equality():
    assert FundingChannel("Liberapay", "https://liberapay.com/x") == FundingChannel(
        "Liberapay", "https://liberapay.com/x"
    )
