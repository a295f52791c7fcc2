"""Tests for the Open Collective and Liberapay enrichers."""

import re
from typing import AsyncGenerator

import pytest
from aioresponses import aioresponses

from syld.enrichers.base import EnrichmentError
from syld.enrichers.liberapay import LiberapayEnricher
from syld.enrichers.open_collective import OpenCollectiveEnricher, collective_slug
from syld.models import FundingChannel, UpstreamProject


@pytest.fixture
async def open_collective() -> AsyncGenerator[OpenCollectiveEnricher, None]:
    enricher = OpenCollectiveEnricher()
    yield enricher
    await enricher.close()


@pytest.fixture
async def liberapay() -> AsyncGenerator[LiberapayEnricher, None]:
    enricher = LiberapayEnricher()
    yield enricher
    await enricher.close()


class TestOpenCollectiveEnricher:
    """Test suite for OpenCollectiveEnricher."""

    def test_collective_slug(self) -> None:
        assert collective_slug(" Home Assistant ") == "home-assistant"

    def test_name(self, open_collective: OpenCollectiveEnricher) -> None:
        assert open_collective.name == "open_collective"
        assert open_collective.is_available()

    async def test_collective_found(self, open_collective: OpenCollectiveEnricher) -> None:
        project = UpstreamProject(name="webpack", repo_url="https://github.com/webpack/webpack")

        with aioresponses() as m:
            m.get("https://api.opencollective.com/v1/collectives/webpack", payload={"slug": "webpack"})

            result = await open_collective.enrich(project)

        assert result.funding == [
            FundingChannel("Open Collective", "https://opencollective.com/webpack")
        ]
        assert project.funding == []

    async def test_collective_missing(self, open_collective: OpenCollectiveEnricher) -> None:
        project = UpstreamProject(name="nothing-here", homepage="https://example.org")

        with aioresponses() as m:
            m.get("https://api.opencollective.com/v1/collectives/nothing-here", status=404)

            result = await open_collective.enrich(project)

        assert result == project

    async def test_skips_when_channel_known(self, open_collective: OpenCollectiveEnricher) -> None:
        """Test that no request is made when a channel is already present."""
        project = UpstreamProject(
            name="webpack",
            repo_url="https://github.com/webpack/webpack",
            funding=[FundingChannel("Open Collective", "https://opencollective.com/webpack")],
        )

        with aioresponses() as m:
            result = await open_collective.enrich(project)
            assert not m.requests

        assert result == project

    async def test_network_error_raises(self, open_collective: OpenCollectiveEnricher) -> None:
        project = UpstreamProject(name="webpack", repo_url="https://github.com/webpack/webpack")

        with aioresponses() as m:
            m.get(
                re.compile(r"https://api\.opencollective\.com/.*"),
                exception=TimeoutError("timed out"),
            )

            with pytest.raises(EnrichmentError):
                await open_collective.enrich(project)


class TestLiberapayEnricher:
    """Test suite for LiberapayEnricher."""

    def test_name(self, liberapay: LiberapayEnricher) -> None:
        assert liberapay.name == "liberapay"
        assert liberapay.is_available()

    async def test_account_found(self, liberapay: LiberapayEnricher) -> None:
        project = UpstreamProject(name="inkscape", homepage="https://inkscape.org")

        with aioresponses() as m:
            m.get("https://liberapay.com/inkscape/public.json", payload={"id": 1})

            result = await liberapay.enrich(project)

        assert result.funding == [FundingChannel("Liberapay", "https://liberapay.com/inkscape")]

    async def test_account_missing(self, liberapay: LiberapayEnricher) -> None:
        project = UpstreamProject(name="inkscape", homepage="https://inkscape.org")

        with aioresponses() as m:
            m.get("https://liberapay.com/inkscape/public.json", status=404)

            result = await liberapay.enrich(project)

        assert result.funding == []

    async def test_name_with_slash_skipped(self, liberapay: LiberapayEnricher) -> None:
        project = UpstreamProject(name="a/b", homepage="https://example.org")

        with aioresponses() as m:
            result = await liberapay.enrich(project)
            assert not m.requests

        assert result == project
