"""Location routing for the front end.

Maps URL locations to logical routes and back.
"""

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qs, urlencode, urlsplit

SEARCH_PATH = "/search"

_TALK_PATH = re.compile(r"^/talks/(?P<slug>[^/]+)/?$")
_TALK_PERMALINK = re.compile(
    r"^https?://[^/\s]+/talks/(?P<slug>[^/?#\s]+)/?(?:[?#]\S*)?$",
    re.IGNORECASE,
)


class RouteKind(Enum):
    HOME = "home"
    TALK = "talk"
    SEARCH = "search"


@dataclass(frozen=True)
class Route:
    """Logical destination derived from a URL.

    ``slug`` is set for TALK routes, ``query`` optionally for SEARCH routes.
    """

    kind: RouteKind
    slug: str | None = None
    query: str | None = None

    @classmethod
    def home(cls) -> "Route":
        return cls(RouteKind.HOME)

    @classmethod
    def talk(cls, slug: str) -> "Route":
        return cls(RouteKind.TALK, slug=slug)

    @classmethod
    def search(cls, query: str | None) -> "Route":
        return cls(RouteKind.SEARCH, query=query)


def parse_location(location: str) -> Route | None:
    """Resolve a URL location to a route.

    Accepts either a path with optional query string ("/search?q=x") or an
    absolute URL; only the path and query are considered.

    Args:
        location: URL location

    Returns:
        Matching Route, or None when the location is not recognised
    """
    parts = urlsplit(location)
    path = parts.path or "/"

    if path == "/":
        return Route.home()

    match = _TALK_PATH.match(path)
    if match:
        return Route.talk(match.group("slug"))

    if path.rstrip("/") == SEARCH_PATH:
        values = parse_qs(parts.query).get("q")
        query = values[0].strip() if values else ""
        return Route.search(query or None)

    return None


def route_to_url(route: Route) -> str:
    """Build the location for a route. Inverse of parse_location()."""
    if route.kind is RouteKind.TALK:
        return f"/talks/{route.slug}"
    if route.kind is RouteKind.SEARCH:
        if route.query is None:
            return SEARCH_PATH
        return f"{SEARCH_PATH}?{urlencode({'q': route.query})}"
    return "/"


def talk_slug_from_permalink(text: str) -> str | None:
    """Extract the slug from a talk permalink such as
    ``https://www.ted.com/talks/foo_bar``.

    Returns:
        Talk slug, or None if text is not a talk permalink
    """
    match = _TALK_PERMALINK.match(text.strip())
    if match is None:
        return None
    return match.group("slug")
