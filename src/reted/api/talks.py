"""Talk API endpoints.

Serves home listings, single talks, random talks and subtitles from the
cache-backed talk service.
"""

import logging

from aiohttp import web

from reted.app_keys import service_key
from reted.core.upstream import UpstreamError, UpstreamNotFoundError

logger = logging.getLogger(__name__)


def create_talks_routes() -> list[web.RouteDef]:
    # /random must come before the slug pattern
    return [
        web.get("/api/home", get_home),
        web.get("/api/talks/random", get_random_talk),
        web.get("/api/talks/{slug}", get_talk),
        web.get("/api/talks/{slug}/subtitles", get_subtitles),
    ]


async def get_home(request: web.Request) -> web.Response:
    service = request.app[service_key]
    try:
        talks = await service.get_newest()
    except UpstreamError as e:
        return upstream_failure(e)
    return web.json_response({"talks": [talk.to_dict() for talk in talks]})


async def get_talk(request: web.Request) -> web.Response:
    slug = request.match_info["slug"]
    service = request.app[service_key]

    try:
        talk = await service.get_talk(slug)
    except UpstreamNotFoundError:
        return web.json_response(
            {"error": "Talk not found", "slug": slug},
            status=404,
        )
    except UpstreamError as e:
        return upstream_failure(e)

    return web.json_response(
        talk.to_dict(),
        headers={"Cache-Control": "public, max-age=300"},
    )


async def get_random_talk(request: web.Request) -> web.Response:
    service = request.app[service_key]
    try:
        talk = await service.random_talk()
    except UpstreamNotFoundError:
        return web.json_response({"error": "No talks available"}, status=404)
    except UpstreamError as e:
        return upstream_failure(e)
    return web.json_response(talk.to_dict(), headers={"Cache-Control": "no-store"})


async def get_subtitles(request: web.Request) -> web.Response:
    slug = request.match_info["slug"]
    language = request.query.get("lang", "en")
    service = request.app[service_key]

    try:
        cues, lag = await service.get_subtitles(slug, language)
    except UpstreamNotFoundError:
        return web.json_response(
            {"error": "Subtitles not found", "slug": slug, "language": language},
            status=404,
        )
    except UpstreamError as e:
        return upstream_failure(e)

    return web.json_response(
        {
            "slug": slug,
            "language": language,
            "lag": lag,
            "cues": [cue.to_dict() for cue in cues],
        }
    )


def upstream_failure(error: UpstreamError) -> web.Response:
    """Map an upstream failure to a 502 JSON response."""
    logger.warning(f"Upstream failure: {error}")
    return web.json_response({"error": "Upstream request failed"}, status=502)
