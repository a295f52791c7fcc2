"""Tests for the first-writer-wins merge."""

import copy

from syld.merge import merge_enrichment
from syld.models import FundingChannel, UpstreamProject


def test_populated_scalar_is_kept():
    """Test that a base value is never replaced."""
    base = UpstreamProject(name="p", repo_url="https://x", stars=100)
    contribution = UpstreamProject(name="p", repo_url="https://x", stars=5)

    assert merge_enrichment(base, contribution).stars == 100


def test_unset_scalar_is_filled():
    """Test that missing fields are taken from the contribution."""
    base = UpstreamProject(name="p", repo_url="https://x")
    contribution = UpstreamProject(
        name="p",
        homepage="https://home",
        bug_tracker="https://x/issues",
        stars=5,
    )

    merged = merge_enrichment(base, contribution)

    assert merged.repo_url == "https://x"
    assert merged.homepage == "https://home"
    assert merged.bug_tracker == "https://x/issues"
    assert merged.stars == 5


def test_false_is_a_populated_value():
    """Test that is_open_source=False is not overwritten."""
    base = UpstreamProject(name="p", repo_url="https://x", is_open_source=False)
    contribution = UpstreamProject(name="p", repo_url="https://x", is_open_source=True)

    assert merge_enrichment(base, contribution).is_open_source is False


def test_zero_stars_is_a_populated_value():
    base = UpstreamProject(name="p", repo_url="https://x", stars=0)
    contribution = UpstreamProject(name="p", repo_url="https://x", stars=10)

    assert merge_enrichment(base, contribution).stars == 0


def test_funding_deduplicated_by_url():
    """Test that funding is a union keyed by URL."""
    base = UpstreamProject(
        name="p",
        repo_url="https://x",
        funding=[FundingChannel(platform="GitHub Sponsors", url="X")],
    )
    contribution = UpstreamProject(
        name="p",
        repo_url="https://x",
        funding=[
            FundingChannel(platform="Other label", url="X"),
            FundingChannel(platform="Liberapay", url="Y"),
        ],
    )

    merged = merge_enrichment(base, contribution)

    assert [ch.url for ch in merged.funding] == ["X", "Y"]
    assert merged.funding[0].platform == "GitHub Sponsors"


def test_licenses_are_unioned_in_order():
    base = UpstreamProject(name="p", repo_url="https://x", licenses=["MIT"])
    contribution = UpstreamProject(
        name="p", repo_url="https://x", licenses=["Apache-2.0", "MIT"]
    )

    assert merge_enrichment(base, contribution).licenses == ["MIT", "Apache-2.0"]


def test_inputs_are_not_modified(sample_project):
    """Test that merge returns a new object and leaves its inputs alone."""
    base = UpstreamProject(name="requests", repo_url="https://github.com/psf/requests")
    base_before = copy.deepcopy(base)
    contribution_before = copy.deepcopy(sample_project)

    merged = merge_enrichment(base, sample_project)

    assert base == base_before
    assert sample_project == contribution_before
    assert merged is not base

    merged.funding.append(FundingChannel(platform="Extra", url="Z"))
    assert len(sample_project.funding) == 1


def test_name_comes_from_base():
    base = UpstreamProject(name="base-name", repo_url="https://x")
    contribution = UpstreamProject(name="other-name", repo_url="https://x")

    assert merge_enrichment(base, contribution).name == "base-name"
