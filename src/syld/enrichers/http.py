"""Shared HTTP plumbing for network-backed enrichers."""

import asyncio
import logging
from typing import Any, Optional

import aiohttp

from syld.enrichers.base import BaseEnricher, EnrichmentError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 10


class HttpEnricher(BaseEnricher):
    """Base class for enrichers that make HTTP requests.

    Owns one lazily created aiohttp.ClientSession per enricher. Every request
    is bounded by a 10 second total timeout; timeouts and connection errors
    surface as EnrichmentError rather than hanging the pipeline.
    """

    def __init__(self) -> None:
        self._session: Optional[aiohttp.ClientSession] = None

    def _headers(self) -> dict[str, str]:
        """Return headers sent with every request. Subclasses may extend."""
        return {"User-Agent": "syld"}

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT_SECONDS),
            )
        return self._session

    async def _get_json(self, url: str) -> Optional[Any]:
        """GET a JSON document.

        Args:
            url: URL to fetch.

        Returns:
            The decoded JSON body, or None if the resource does not exist (404).

        Raises:
            EnrichmentError: On network errors, timeouts, undecodable bodies
                or any other non-200 status.
        """
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                if response.status == 404:
                    logger.debug("%s: %s not found", self.name, url)
                    return None
                if response.status != 200:
                    raise EnrichmentError(
                        f"{self.name}: {url} returned HTTP {response.status}"
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise EnrichmentError(f"{self.name}: request to {url} failed: {e}") from e

    async def _exists(self, url: str) -> bool:
        """Check whether a URL answers with a success status.

        Raises:
            EnrichmentError: On network errors or timeouts.
        """
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                return 200 <= response.status < 300
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise EnrichmentError(f"{self.name}: request to {url} failed: {e}") from e

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
