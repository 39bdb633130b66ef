"""Messages consumed and commands produced by the navigator.

Messages are events fed to ``update``; commands are side effects the
runtime performs on its behalf. Both are plain frozen records.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from reted.client.router import Route


@dataclass(frozen=True)
class FetchError:
    """Failed fetch. ``status`` is None for transport and decoding failures."""

    status: int | None
    reason: str = ""

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


# Messages


@dataclass(frozen=True)
class LocationChanged:
    """Browser location changed (history push, replace or back)."""

    location: str


@dataclass(frozen=True)
class PageLoaded:
    """A page load finished. ``navigation`` identifies the load it was for."""

    navigation: int
    kind: Any
    result: Any


@dataclass(frozen=True)
class SubPageMsg:
    """Message originating inside a sub-page, tagged with the page kind."""

    origin: Any
    msg: Any


@dataclass(frozen=True)
class HeaderNavigate:
    """Header link clicked."""

    route: Route


@dataclass(frozen=True)
class RandomTalk:
    """Footer "random talk" requested."""


@dataclass(frozen=True)
class RandomTalkLoaded:
    navigation: int
    result: Any


# Sub-page messages shared by several pages


@dataclass(frozen=True)
class Navigate:
    """Sub-page asks to navigate to a route."""

    route: Route


@dataclass(frozen=True)
class ShowMore:
    """Reveal the next batch of listed talks."""


# Commands


@dataclass(frozen=True)
class Fetch:
    """GET a service endpoint, decode the JSON body and report the result.

    ``to_msg`` receives either the decoded value or a FetchError.
    """

    path: str
    decode: Callable[[object], Any]
    to_msg: Callable[[Any], Any]
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PushUrl:
    url: str


@dataclass(frozen=True)
class ReplaceUrl:
    url: str


@dataclass(frozen=True)
class SetTitle:
    title: str
