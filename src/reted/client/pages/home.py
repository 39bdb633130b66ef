"""Home page: newest talks."""

from dataclasses import dataclass, replace
from typing import Any

from reted.client.messages import ShowMore
from reted.client.router import Route, route_to_url
from reted.core.decoder import DecodeError, TalkSummary

PAGE_SIZE = 6


@dataclass(frozen=True)
class HomeModel:
    talks: tuple[TalkSummary, ...]
    visible: int = PAGE_SIZE


def decode(payload: object) -> HomeModel:
    """Build the model from a /api/home response.

    Raises:
        DecodeError: If the payload is malformed
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("talks"), list):
        raise DecodeError("home payload must contain a talks list")
    return HomeModel(talks=tuple(TalkSummary.from_dict(t) for t in payload["talks"]))


def update(msg: Any, model: HomeModel) -> tuple[HomeModel, list[Any]]:
    if isinstance(msg, ShowMore):
        visible = min(model.visible + PAGE_SIZE, len(model.talks))
        return replace(model, visible=max(visible, model.visible)), []
    return model, []


def title(model: HomeModel) -> str:
    return "ReTed"


def view(model: HomeModel) -> str:
    lines = ["Newest talks", ""]
    for talk in model.talks[: model.visible]:
        lines.append(f"  {talk.name}")
        lines.append(f"    {route_to_url(Route.talk(talk.slug))}")
    if not model.talks:
        lines.append("  No talks yet.")
    hidden = len(model.talks) - model.visible
    if hidden > 0:
        lines.append(f"  ... {hidden} more")
    return "\n".join(lines)
