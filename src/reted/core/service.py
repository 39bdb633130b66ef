"""Talk service.

Consults the cache first, falls back to the talks API and populates the
cache with the decoded records.
"""

import logging
import random
from typing import Any

from reted.core.cache import Cache, compute_key_hash
from reted.core.decoder import (
    DecodeError,
    SubtitleCue,
    Talk,
    TalkSummary,
    decode_search_results,
    decode_subtitles,
    decode_talk,
    decode_talk_list,
)
from reted.core.upstream import TalksClient, UpstreamError, UpstreamNotFoundError

logger = logging.getLogger(__name__)

TALKS_NAMESPACE = "talks"
LISTS_NAMESPACE = "lists"
SEARCH_NAMESPACE = "search"
SUBTITLES_NAMESPACE = "subtitles"


class TalkService:
    """Cache-backed access to talk data."""

    def __init__(
        self,
        client: TalksClient,
        cache: Cache,
        *,
        home_limit: int = 12,
        search_limit: int = 20,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize service.

        Args:
            client: Talks API client
            cache: Cache for decoded payloads
            home_limit: Number of talks listed on the home page
            search_limit: Maximum number of search results
            rng: Random source for random talk selection
        """
        self._client = client
        self._cache = cache
        self._home_limit = home_limit
        self._search_limit = search_limit
        self._rng = rng or random.Random()

    async def get_talk(self, slug: str) -> Talk:
        """Return a talk by slug.

        Raises:
            UpstreamNotFoundError: If the talk does not exist upstream
            UpstreamError: If the upstream request or decoding fails
        """
        cached = self._cache.get(TALKS_NAMESPACE, slug)
        if cached is not None:
            try:
                return Talk.from_dict(cached)
            except DecodeError:
                logger.warning(f"Discarding unreadable cache entry for talk {slug}")
                self._cache.invalidate(TALKS_NAMESPACE, slug)

        payload = await self._client.get_talk(slug)
        talk = _decode(decode_talk, payload, f"talk {slug}")
        self._cache.set(TALKS_NAMESPACE, slug, talk.to_dict())
        # Upstream also resolves numeric ids, cache under the canonical slug too
        if talk.slug != slug:
            self._cache.set(TALKS_NAMESPACE, talk.slug, talk.to_dict())
        return talk

    async def get_newest(self) -> list[TalkSummary]:
        """Return the newest talks for the home page."""
        key = f"newest-{self._home_limit}"
        cached = self._cache.get(LISTS_NAMESPACE, key)
        if cached is not None:
            summaries = _read_summaries(cached.get("talks"))
            if summaries is not None:
                return summaries

        payload = await self._client.get_newest(self._home_limit)
        summaries = _decode(decode_talk_list, payload, "newest talks")
        self._cache.set(
            LISTS_NAMESPACE, key, {"talks": [s.to_dict() for s in summaries]}
        )
        return summaries

    async def search(self, query: str) -> list[TalkSummary]:
        """Return talks matching a free-text query."""
        key = compute_key_hash(query)
        cached = self._cache.get(SEARCH_NAMESPACE, key)
        if cached is not None:
            summaries = _read_summaries(cached.get("results"))
            if summaries is not None:
                return summaries

        payload = await self._client.search(query, self._search_limit)
        summaries = _decode(decode_search_results, payload, f'search "{query}"')
        self._cache.set(
            SEARCH_NAMESPACE,
            key,
            {"query": query, "results": [s.to_dict() for s in summaries]},
        )
        return summaries

    async def random_talk(self) -> Talk:
        """Return one talk picked at random from the newest listing.

        Raises:
            UpstreamNotFoundError: If there are no talks to pick from
        """
        summaries = await self.get_newest()
        if not summaries:
            raise UpstreamNotFoundError("No talks available", status=404)
        choice = self._rng.choice(summaries)
        logger.info(f"Picked random talk {choice.slug}")
        return await self.get_talk(choice.slug)

    async def get_subtitles(
        self, slug: str, language: str
    ) -> tuple[list[SubtitleCue], int]:
        """Return subtitle cues and preroll lag for a talk in one language."""
        key = f"{slug}.{language}"
        cached = self._cache.get(SUBTITLES_NAMESPACE, key)
        if cached is not None:
            try:
                return _read_cues(cached)
            except (DecodeError, KeyError, TypeError):
                self._cache.invalidate(SUBTITLES_NAMESPACE, key)

        talk = await self.get_talk(slug)
        payload = await self._client.get_subtitles(talk.id, language)
        cues, lag = _decode(decode_subtitles, payload, f"subtitles {key}")
        self._cache.set(
            SUBTITLES_NAMESPACE,
            key,
            {"lag": lag, "cues": [cue.to_dict() for cue in cues]},
        )
        return cues, lag


def _decode(decoder: Any, payload: object, what: str) -> Any:
    try:
        return decoder(payload)
    except DecodeError as e:
        logger.error(f"Could not decode {what}: {e}")
        raise UpstreamError(f"Malformed upstream payload for {what}") from e


def _read_summaries(items: object) -> list[TalkSummary] | None:
    if not isinstance(items, list):
        return None
    try:
        return [TalkSummary.from_dict(item) for item in items]
    except DecodeError:
        return None


def _read_cues(data: dict[str, Any]) -> tuple[list[SubtitleCue], int]:
    lag = data["lag"]
    if not isinstance(lag, int):
        raise DecodeError("lag must be an integer")
    cues = [
        SubtitleCue(start=c["start"], duration=c["duration"], content=c["content"])
        for c in data["cues"]
    ]
    return cues, lag
