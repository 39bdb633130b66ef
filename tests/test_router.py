"""Tests for location routing."""

import pytest
from reted.client.router import (
    Route,
    RouteKind,
    parse_location,
    route_to_url,
    talk_slug_from_permalink,
)


class TestParseLocation:
    """Tests for parse_location()."""

    def test__root__is_home(self) -> None:
        assert parse_location("/") == Route.home()

    def test__empty__is_home(self) -> None:
        assert parse_location("") == Route.home()

    @pytest.mark.parametrize(
        "slug",
        ["foo-bar", "ken_robinson_says_schools_kill_creativity", "1234", "a.b"],
    )
    def test__talk_path__yields_exact_slug(self, slug: str) -> None:
        """The slug is exactly the segment after /talks/."""
        route = parse_location(f"/talks/{slug}")

        assert route == Route.talk(slug)
        assert route.kind is RouteKind.TALK

    def test__talk_path_with_trailing_slash__yields_slug(self) -> None:
        assert parse_location("/talks/foo/") == Route.talk("foo")

    def test__nested_talk_path__is_unknown(self) -> None:
        assert parse_location("/talks/foo/transcript") is None

    def test__talks_without_slug__is_unknown(self) -> None:
        assert parse_location("/talks/") is None

    def test__search_with_query__yields_query(self) -> None:
        route = parse_location("/search?q=quantum+computing")

        assert route == Route.search("quantum computing")

    def test__search_without_query__yields_none(self) -> None:
        assert parse_location("/search") == Route.search(None)

    def test__search_with_empty_query__yields_none(self) -> None:
        assert parse_location("/search?q=") == Route.search(None)

    @pytest.mark.parametrize("query", ["%20%20", "+", "%09"])
    def test__search_with_blank_query__yields_none(self, query: str) -> None:
        assert parse_location(f"/search?q={query}") == Route.search(None)

    def test__search_query__is_trimmed(self) -> None:
        route = parse_location("/search?q=%20quantum%20")

        assert route == Route.search("quantum")

    def test__search_with_other_params_only__yields_none(self) -> None:
        assert parse_location("/search?page=2") == Route.search(None)

    def test__absolute_url__uses_path(self) -> None:
        assert parse_location("http://localhost:8080/talks/x") == Route.talk("x")

    def test__unknown_path__is_none(self) -> None:
        assert parse_location("/about") is None


class TestRouteToUrl:
    """Tests for route_to_url()."""

    def test__routes__round_trip(self) -> None:
        routes = [
            Route.home(),
            Route.talk("foo-bar"),
            Route.search("quantum computing & more"),
        ]

        for route in routes:
            assert parse_location(route_to_url(route)) == route

    def test__search_without_query__is_bare_path(self) -> None:
        assert route_to_url(Route.search(None)) == "/search"


class TestTalkSlugFromPermalink:
    """Tests for talk_slug_from_permalink()."""

    @pytest.mark.parametrize(
        ("text", "slug"),
        [
            ("https://www.ted.com/talks/foo-bar", "foo-bar"),
            ("http://ted.com/talks/foo_bar", "foo_bar"),
            ("https://www.ted.com/talks/foo-bar/", "foo-bar"),
            ("https://www.ted.com/talks/foo-bar?language=en", "foo-bar"),
            ("  https://www.ted.com/talks/foo-bar  ", "foo-bar"),
        ],
    )
    def test__permalink__yields_slug(self, text: str, slug: str) -> None:
        assert talk_slug_from_permalink(text) == slug

    @pytest.mark.parametrize(
        "text",
        [
            "quantum computing",
            "ted.com/talks/foo",
            "https://www.ted.com/speakers/foo",
            "https://www.ted.com/talks/",
            "ftp://ted.com/talks/foo",
        ],
    )
    def test__other_text__yields_none(self, text: str) -> None:
        assert talk_slug_from_permalink(text) is None
