"""Search results page."""

from dataclasses import dataclass, replace
from typing import Any

from reted.client.messages import ShowMore
from reted.client.router import Route, route_to_url
from reted.core.decoder import DecodeError, TalkSummary

PAGE_SIZE = 10


@dataclass(frozen=True)
class SearchModel:
    query: str
    results: tuple[TalkSummary, ...]
    visible: int = PAGE_SIZE


def decode(payload: object) -> SearchModel:
    """Build the model from a /api/search response.

    Raises:
        DecodeError: If the payload is malformed
    """
    if not isinstance(payload, dict):
        raise DecodeError("search payload must be an object")
    query = payload.get("query")
    results = payload.get("results")
    if not isinstance(query, str) or not isinstance(results, list):
        raise DecodeError("search payload must contain query and results")
    return SearchModel(
        query=query,
        results=tuple(TalkSummary.from_dict(item) for item in results),
    )


def update(msg: Any, model: SearchModel) -> tuple[SearchModel, list[Any]]:
    if isinstance(msg, ShowMore):
        visible = min(model.visible + PAGE_SIZE, len(model.results))
        return replace(model, visible=max(visible, model.visible)), []
    return model, []


def title(model: SearchModel) -> str:
    return f"Search: {model.query} | ReTed"


def view(model: SearchModel) -> str:
    count = len(model.results)
    noun = "result" if count == 1 else "results"
    lines = [f'{count} {noun} for "{model.query}"', ""]
    for talk in model.results[: model.visible]:
        lines.append(f"  {talk.name}")
        if talk.description:
            lines.append(f"    {talk.description}")
        lines.append(f"    {route_to_url(Route.talk(talk.slug))}")
    hidden = count - model.visible
    if hidden > 0:
        lines.append(f"  ... {hidden} more")
    return "\n".join(lines)
