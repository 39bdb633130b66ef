"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest
from reted.config import CacheConfig, Config, ServerConfig, UpstreamConfig

UPSTREAM_URL = "https://talks.test/v1"


def _talk(
    slug: str = "foo-bar",
    talk_id: int = 1,
    name: str = "Foo Bar",
    languages: dict[str, Any] | None = None,
) -> dict[str, Any]:
    if languages is None:
        languages = {"en": {"name": "English"}}
    return {
        "id": talk_id,
        "name": name,
        "description": f"A talk about {name.lower()}.",
        "slug": slug,
        "recorded_at": "2016-02-15 00:00:00",
        "published_at": "2016-05-02 15:02:11",
        "updated_at": "2016-05-03 10:00:00",
        "viewed_count": 1234,
        "images": [
            {"image": {"size": "medium", "url": f"https://img.test/{slug}.jpg"}},
        ],
        "languages": languages,
        "tags": [{"tag": "science"}, {"tag": "future"}],
        "themes": [{"theme": {"id": 7, "name": "Tales of Invention"}}],
        "speakers": [{"speaker": {"id": 42, "name": "Ada Lovelace"}}],
    }


@pytest.fixture
def make_talk() -> Callable[..., dict[str, Any]]:
    """Factory for upstream talk objects (the inner part of a talk payload)."""
    return _talk


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with a tmp_path cache directory."""
    return Config(
        server=ServerConfig(),
        cache=CacheConfig(dir=tmp_path / ".cache"),
        upstream=UpstreamConfig(base_url=UPSTREAM_URL, api_key="secret"),
    )


class FakeUpstream:
    """In-memory talks API served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.responses: dict[str, tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, payload: Any, status: int = 200) -> None:
        self.responses[path] = (status, payload)

    def add_talk(self, talk: dict[str, Any]) -> None:
        self.add(f"/v1/talks/{talk['slug']}.json", {"talk": talk})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path not in self.responses:
            return httpx.Response(404, json={"error": "not found"})
        status, payload = self.responses[request.url.path]
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
