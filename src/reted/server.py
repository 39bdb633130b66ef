"""aiohttp server for ReTed.

Application factory and route registration.
"""

import logging

import httpx
from aiohttp import web

from reted.api.search import create_search_routes
from reted.api.talks import create_talks_routes
from reted.app_keys import http_client_key, service_key, static_dir_key
from reted.assets import get_static_dir
from reted.config import Config
from reted.core.cache import Cache, NullCache, TalkCache
from reted.core.service import TalkService
from reted.core.upstream import TalksClient

logger = logging.getLogger(__name__)


async def spa_fallback(request: web.Request) -> web.StreamResponse:
    """Serve index.html for SPA client-side routing.

    All non-API routes fall back to index.html to support client-side routing.
    """
    if static_dir_key not in request.app:
        raise web.HTTPNotFound(text="Front end is not bundled")
    index_path = request.app[static_dir_key] / "index.html"
    return web.FileResponse(index_path)


async def api_not_found(request: web.Request) -> web.Response:
    """Unknown API paths answer JSON 404 instead of the SPA shell."""
    return web.json_response(
        {"error": "Not found", "path": request.path},
        status=404,
    )


def create_cache(config: Config) -> Cache:
    """Create the talk cache described by the configuration."""
    if not config.cache.enabled:
        return NullCache()
    return TalkCache(config.cache.dir, ttl=config.cache.ttl)


def create_app(
    config: Config,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        http_client: Client used for upstream requests. When omitted, one is
            created and closed with the application.

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    if http_client is None:
        http_client = httpx.AsyncClient(timeout=config.upstream.timeout)
        app.on_cleanup.append(_close_http_client)

    talks_client = TalksClient(
        http_client,
        config.upstream.base_url,
        api_key=config.upstream.api_key,
    )
    service = TalkService(talks_client, create_cache(config))

    app[http_client_key] = http_client
    app[service_key] = service

    # API routes (must be registered first to take precedence over SPA fallback)
    app.router.add_routes(create_talks_routes())
    app.router.add_routes(create_search_routes())
    app.router.add_get("/api/{path:.*}", api_not_found)

    # Static file serving for frontend (bundled assets)
    try:
        static_dir = get_static_dir()
    except FileNotFoundError as e:
        logger.warning(str(e))
    else:
        app[static_dir_key] = static_dir
        assets_dir = static_dir / "assets"
        if assets_dir.exists():
            app.router.add_static("/assets", assets_dir)

    # SPA fallback - must be last to catch all non-API routes
    app.router.add_get("/{path:.*}", spa_fallback)

    return app


async def _close_http_client(app: web.Application) -> None:
    """Close the upstream HTTP client on application cleanup."""
    await app[http_client_key].aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
