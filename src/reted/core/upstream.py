"""Talks API client.

Async HTTP client for the third-party talks API (v1 JSON endpoints).
Returns parsed JSON payloads; decoding into records happens in the service.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Talks API request failed (transport error or unexpected status)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class UpstreamNotFoundError(UpstreamError):
    """Talks API answered 404 for the requested resource."""


class TalksClient:
    """Async HTTP client for the talks API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        api_key: str | None = None,
    ) -> None:
        """Initialize talks API client.

        Args:
            client: httpx AsyncClient used for all requests
            base_url: API base URL (e.g., https://api.ted.com/v1)
            api_key: API key sent as the ``api-key`` query parameter
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

    async def get_talk(self, slug: str) -> dict[str, Any]:
        """Get a single talk by slug.

        Raises:
            UpstreamNotFoundError: If the talk does not exist
            UpstreamError: If the request fails
        """
        logger.info(f"Fetching talk {slug}")
        return await self._get(f"/talks/{slug}.json")

    async def get_newest(self, limit: int = 12) -> dict[str, Any]:
        """Get the most recently published talks."""
        logger.info(f"Fetching {limit} newest talks")
        return await self._get(
            "/talks.json",
            {"limit": str(limit), "order": "published_at:desc"},
        )

    async def search(self, query: str, limit: int = 20) -> dict[str, Any]:
        """Search talks by free text."""
        logger.info(f'Searching talks for "{query}"')
        return await self._get(
            "/search.json",
            {"q": query, "categories": "talks", "limit": str(limit)},
        )

    async def get_subtitles(self, talk_id: int, language: str) -> dict[str, Any]:
        """Get subtitle captions of a talk in one language."""
        logger.info(f"Fetching {language} subtitles for talk {talk_id}")
        return await self._get(
            f"/talks/{talk_id}/subtitles.json",
            {"language": language},
        )

    async def _get(
        self, path: str, params: dict[str, str] | None = None
    ) -> dict[str, Any]:
        query = dict(params or {})
        if self.api_key:
            query["api-key"] = self.api_key

        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} params={sorted(k for k in query if k != 'api-key')}")
        try:
            response = await self.client.get(
                url,
                params=query,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise UpstreamError(f"Request to {path} failed: {e}") from e

        if response.status_code == 404:
            raise UpstreamNotFoundError(f"Not found: {path}", status=404)
        if response.status_code >= 400:
            logger.error(f"Error response ({response.status_code}): {response.text}")
            raise UpstreamError(
                f"Unexpected status {response.status_code} for {path}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {path}") from e
        if not isinstance(data, dict):
            raise UpstreamError(f"Unexpected payload from {path}")
        return data
