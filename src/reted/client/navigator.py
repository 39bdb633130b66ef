"""Page navigator.

The front end's state machine. ``update`` consumes one message at a time and
returns the next model together with the commands to perform. The model
holds a single PageStatus: the page on screen and whether a navigation is in
flight.

Every page load is numbered when it starts and its result carries that
number. A result is only accepted while the model is still waiting for that
very load, so when navigations overlap the one started last wins, whatever
order the answers arrive in. This holds even when two of them target the
same location.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from functools import partial
from typing import Any

from reted.client.messages import (
    Fetch,
    FetchError,
    HeaderNavigate,
    LocationChanged,
    Navigate,
    PageLoaded,
    PushUrl,
    RandomTalk,
    RandomTalkLoaded,
    ReplaceUrl,
    SetTitle,
    SubPageMsg,
)
from reted.client.pages import home, search, talk
from reted.client.router import (
    Route,
    RouteKind,
    parse_location,
    route_to_url,
    talk_slug_from_permalink,
)
from reted.core.decoder import DecodeError

logger = logging.getLogger(__name__)

NOT_FOUND_TITLE = "Not Found | ReTed"
ERROR_TITLE = "Error | ReTed"
RANDOM_PENDING = "/api/talks/random"


class PageKind(Enum):
    BLANK = "blank"
    NOT_FOUND = "not_found"
    ERRORED = "errored"
    HOME = "home"
    TALK = "talk"
    SEARCH = "search"


@dataclass(frozen=True)
class Page:
    """Rendered screen. ``model`` is set for HOME, TALK and SEARCH only."""

    kind: PageKind
    model: Any = None


class Transition(Enum):
    LOADED = "loaded"
    REDIRECT_FROM = "redirect_from"


@dataclass(frozen=True)
class PageStatus:
    """Page on screen plus the in-flight navigation, if any.

    While ``transition`` is REDIRECT_FROM, ``page`` is the previously loaded
    page, ``pending`` the location being loaded and ``navigation`` the
    number of that load. Loaded statuses keep the number of the last load
    so numbering never goes backwards.
    """

    transition: Transition
    page: Page
    pending: str | None = None
    navigation: int = 0

    @classmethod
    def loaded(cls, page: Page, navigation: int = 0) -> "PageStatus":
        return cls(Transition.LOADED, page, None, navigation)

    @classmethod
    def redirect_from(
        cls, page: Page, pending: str, navigation: int
    ) -> "PageStatus":
        return cls(Transition.REDIRECT_FROM, page, pending, navigation)


@dataclass(frozen=True)
class Model:
    status: PageStatus


SUB_PAGES = {
    PageKind.HOME: home,
    PageKind.TALK: talk,
    PageKind.SEARCH: search,
}

_ROUTE_PAGES = {
    RouteKind.HOME: PageKind.HOME,
    RouteKind.TALK: PageKind.TALK,
    RouteKind.SEARCH: PageKind.SEARCH,
}


def initial_model() -> Model:
    return Model(PageStatus.loaded(Page(PageKind.BLANK)))


def init(location: str) -> tuple[Model, list[Any]]:
    """Start the navigator at a location.

    The blank initial page is immediately followed by a route change to the
    starting location.
    """
    return update(LocationChanged(location), initial_model())


def update(msg: Any, model: Model) -> tuple[Model, list[Any]]:
    """Process one message.

    Args:
        msg: Incoming message
        model: Current navigator state

    Returns:
        Tuple of (next state, commands to perform)

    Raises:
        TypeError: If the message type is unknown
    """
    if isinstance(msg, LocationChanged):
        return _change_location(msg.location, model)

    if isinstance(msg, PageLoaded):
        return _page_loaded(msg, model)

    if isinstance(msg, SubPageMsg):
        return _sub_page_msg(msg, model)

    if isinstance(msg, HeaderNavigate):
        return model, [PushUrl(route_to_url(msg.route))]

    if isinstance(msg, RandomTalk):
        navigation = model.status.navigation + 1
        status = PageStatus.redirect_from(
            model.status.page, RANDOM_PENDING, navigation
        )
        command = Fetch(
            path="/api/talks/random",
            decode=decode_random_slug,
            to_msg=partial(RandomTalkLoaded, navigation),
        )
        return Model(status), [command]

    if isinstance(msg, RandomTalkLoaded):
        if not _is_pending(model, msg.navigation):
            return model, []
        if isinstance(msg.result, FetchError):
            return _failed(model, msg.result)
        # Stay in REDIRECT_FROM, the pushed location drives the load
        return model, [PushUrl(route_to_url(Route.talk(msg.result)))]

    raise TypeError(f"Unknown message: {msg!r}")


def decode_random_slug(payload: object) -> str:
    """Read the slug of a /api/talks/random response.

    Raises:
        DecodeError: If the payload lacks an id or a slug
    """
    if not isinstance(payload, dict):
        raise DecodeError("random talk payload must be an object")
    slug = payload.get("slug")
    if "id" not in payload or not isinstance(slug, str) or not slug:
        raise DecodeError("random talk payload must contain id and slug")
    return slug


def _change_location(location: str, model: Model) -> tuple[Model, list[Any]]:
    route = parse_location(location)
    if route is None:
        logger.debug(f"No route for {location}")
        return _not_found(model)

    if route.kind is RouteKind.SEARCH:
        if route.query is None:
            return _not_found(model)
        slug = talk_slug_from_permalink(route.query)
        if slug is not None:
            return model, [ReplaceUrl(route_to_url(Route.talk(slug)))]

    return _load(route, model)


def _load(route: Route, model: Model) -> tuple[Model, list[Any]]:
    kind = _ROUTE_PAGES[route.kind]
    pending = route_to_url(route)
    navigation = model.status.navigation + 1

    if route.kind is RouteKind.HOME:
        path, params = "/api/home", {}
    elif route.kind is RouteKind.TALK:
        path, params = f"/api/talks/{route.slug}", {}
    else:
        path, params = "/api/search", {"q": route.query or ""}

    command = Fetch(
        path=path,
        params=params,
        decode=SUB_PAGES[kind].decode,
        to_msg=partial(PageLoaded, navigation, kind),
    )
    status = PageStatus.redirect_from(model.status.page, pending, navigation)
    return Model(status), [command]


def _page_loaded(msg: PageLoaded, model: Model) -> tuple[Model, list[Any]]:
    if not _is_pending(model, msg.navigation):
        logger.debug(f"Ignoring stale load #{msg.navigation}")
        return model, []

    if isinstance(msg.result, FetchError):
        return _failed(model, msg.result)

    module = SUB_PAGES[msg.kind]
    sub_model = msg.result
    commands: list[Any] = []
    if msg.kind is PageKind.TALK:
        sub_model, sub_commands = talk.after_load(sub_model)
        commands.extend(_tag_commands(msg.kind, sub_commands))
    commands.append(SetTitle(module.title(sub_model)))

    status = PageStatus.loaded(Page(msg.kind, sub_model), msg.navigation)
    return Model(status), commands


def _sub_page_msg(msg: SubPageMsg, model: Model) -> tuple[Model, list[Any]]:
    if isinstance(msg.msg, Navigate):
        return model, [PushUrl(route_to_url(msg.msg.route))]

    status = model.status
    on_screen = (
        status.transition is Transition.LOADED and status.page.kind is msg.origin
    )
    if not on_screen or msg.origin not in SUB_PAGES:
        # Message from a page that is no longer on screen
        return model, []

    module = SUB_PAGES[msg.origin]
    sub_model, sub_commands = module.update(msg.msg, status.page.model)
    page = Page(msg.origin, sub_model)
    loaded = PageStatus.loaded(page, status.navigation)
    return Model(loaded), _tag_commands(msg.origin, sub_commands)


def _tag_commands(kind: PageKind, commands: list[Any]) -> list[Any]:
    tagged: list[Any] = []
    for command in commands:
        if isinstance(command, Fetch):
            to_msg = partial(_to_sub_msg, kind, command.to_msg)
            command = replace(command, to_msg=to_msg)
        tagged.append(command)
    return tagged


def _to_sub_msg(kind: PageKind, to_msg: Any, result: Any) -> SubPageMsg:
    return SubPageMsg(kind, to_msg(result))


def _is_pending(model: Model, navigation: int) -> bool:
    status = model.status
    return (
        status.transition is Transition.REDIRECT_FROM
        and status.navigation == navigation
    )


def _not_found(model: Model) -> tuple[Model, list[Any]]:
    page = Page(PageKind.NOT_FOUND)
    status = PageStatus.loaded(page, model.status.navigation)
    return Model(status), [SetTitle(NOT_FOUND_TITLE)]


def _failed(model: Model, error: FetchError) -> tuple[Model, list[Any]]:
    if error.is_not_found:
        return _not_found(model)
    logger.warning(f"Page load failed ({error.status}): {error.reason}")
    page = Page(PageKind.ERRORED)
    status = PageStatus.loaded(page, model.status.navigation)
    return Model(status), [SetTitle(ERROR_TITLE)]
