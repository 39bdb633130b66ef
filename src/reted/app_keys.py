"""Application keys for type-safe app configuration access."""

from pathlib import Path

import httpx
from aiohttp import web

from reted.core.service import TalkService

service_key = web.AppKey("service", TalkService)
http_client_key = web.AppKey("http_client", httpx.AsyncClient)
static_dir_key = web.AppKey("static_dir", Path)
