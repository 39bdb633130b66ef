"""Tests for talk API endpoints."""

import pytest
from aiohttp.test_utils import TestClient
from reted.config import Config
from reted.server import create_app

from conftest import FakeUpstream


@pytest.fixture
def client(test_config: Config, upstream: FakeUpstream, aiohttp_client) -> TestClient:
    """Create test client with the fake upstream behind it."""
    app = create_app(test_config, http_client=upstream.client())
    return aiohttp_client(app)


class TestGetHome:
    """Tests for GET /api/home."""

    @pytest.mark.asyncio
    async def test__newest_talks__returned(
        self, upstream: FakeUpstream, make_talk, client
    ) -> None:
        """Return the newest talks as summaries."""
        upstream.add(
            "/v1/talks.json",
            {
                "talks": [
                    {"talk": make_talk("a", 1, "A")},
                    {"talk": make_talk("b", 2, "B")},
                ]
            },
        )

        test_client = await client
        response = await test_client.get("/api/home")

        assert response.status == 200
        data = await response.json()
        assert [t["slug"] for t in data["talks"]] == ["a", "b"]
        assert data["talks"][0]["image"] == "https://img.test/a.jpg"

    @pytest.mark.asyncio
    async def test__upstream_failure__returns_502(
        self, upstream: FakeUpstream, client
    ) -> None:
        upstream.add("/v1/talks.json", {"error": "down"}, status=503)

        test_client = await client
        response = await test_client.get("/api/home")

        assert response.status == 502
        data = await response.json()
        assert data["error"] == "Upstream request failed"


class TestGetTalk:
    """Tests for GET /api/talks/{slug}."""

    @pytest.mark.asyncio
    async def test__existing_talk__returns_record(
        self, upstream: FakeUpstream, make_talk, client
    ) -> None:
        upstream.add_talk(make_talk())

        test_client = await client
        response = await test_client.get("/api/talks/foo-bar")

        assert response.status == 200
        data = await response.json()
        assert data["id"] == 1
        assert data["slug"] == "foo-bar"
        assert data["speakers"] == [{"id": 42, "name": "Ada Lovelace"}]
        assert response.headers["Cache-Control"] == "public, max-age=300"

    @pytest.mark.asyncio
    async def test__cached_talk__served_without_upstream(
        self, upstream: FakeUpstream, make_talk, client
    ) -> None:
        """Second request is answered from the cache."""
        upstream.add_talk(make_talk())

        test_client = await client
        await test_client.get("/api/talks/foo-bar")
        response = await test_client.get("/api/talks/foo-bar")

        assert response.status == 200
        assert len(upstream.requests) == 1

    @pytest.mark.asyncio
    async def test__missing_talk__returns_404(self, client) -> None:
        """Return 404 for a talk unknown upstream."""
        test_client = await client
        response = await test_client.get("/api/talks/nonexistent")

        assert response.status == 404
        data = await response.json()
        assert data["error"] == "Talk not found"
        assert data["slug"] == "nonexistent"

    @pytest.mark.asyncio
    async def test__malformed_upstream_payload__returns_502(
        self, upstream: FakeUpstream, client
    ) -> None:
        upstream.add("/v1/talks/broken.json", {"talk": {"name": "No id"}})

        test_client = await client
        response = await test_client.get("/api/talks/broken")

        assert response.status == 502


class TestGetRandomTalk:
    """Tests for GET /api/talks/random."""

    @pytest.mark.asyncio
    async def test__random__returns_talk_with_id_and_slug(
        self, upstream: FakeUpstream, make_talk, client
    ) -> None:
        talk = make_talk("only-one", 9, "Only One")
        upstream.add("/v1/talks.json", {"talks": [{"talk": talk}]})
        upstream.add_talk(talk)

        test_client = await client
        response = await test_client.get("/api/talks/random")

        assert response.status == 200
        data = await response.json()
        assert data["id"] == 9
        assert data["slug"] == "only-one"
        assert response.headers["Cache-Control"] == "no-store"

    @pytest.mark.asyncio
    async def test__no_talks__returns_404(
        self, upstream: FakeUpstream, client
    ) -> None:
        upstream.add("/v1/talks.json", {"talks": []})

        test_client = await client
        response = await test_client.get("/api/talks/random")

        assert response.status == 404


class TestGetSubtitles:
    """Tests for GET /api/talks/{slug}/subtitles."""

    @pytest.mark.asyncio
    async def test__language__returns_cues(
        self, upstream: FakeUpstream, make_talk, client
    ) -> None:
        upstream.add_talk(make_talk(talk_id=5))
        upstream.add(
            "/v1/talks/5/subtitles.json",
            {
                "0": {
                    "caption": {"startTime": 0, "duration": 900, "content": "Bonjour"}
                },
                "_meta": {"preroll_offset": 15000},
            },
        )

        test_client = await client
        response = await test_client.get("/api/talks/foo-bar/subtitles?lang=fr")

        assert response.status == 200
        data = await response.json()
        assert data == {
            "slug": "foo-bar",
            "language": "fr",
            "lag": 15000,
            "cues": [{"start": 0, "duration": 900, "content": "Bonjour"}],
        }

    @pytest.mark.asyncio
    async def test__missing_language__returns_404(
        self, upstream: FakeUpstream, make_talk, client
    ) -> None:
        upstream.add_talk(make_talk())

        test_client = await client
        response = await test_client.get("/api/talks/foo-bar/subtitles?lang=xx")

        assert response.status == 404
        data = await response.json()
        assert data["language"] == "xx"
