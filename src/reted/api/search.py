"""Search API endpoint."""

from aiohttp import web

from reted.api.talks import upstream_failure
from reted.app_keys import service_key
from reted.core.upstream import UpstreamError


def create_search_routes() -> list[web.RouteDef]:
    return [web.get("/api/search", get_search)]


async def get_search(request: web.Request) -> web.Response:
    query = request.query.get("q", "").strip()
    if not query:
        return web.json_response({"error": "Missing search query"}, status=400)

    service = request.app[service_key]
    try:
        results = await service.search(query)
    except UpstreamError as e:
        return upstream_failure(e)

    return web.json_response(
        {"query": query, "results": [talk.to_dict() for talk in results]}
    )
