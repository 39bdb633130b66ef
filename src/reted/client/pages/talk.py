"""Talk page: one talk with its subtitles."""

from dataclasses import dataclass, replace
from enum import Enum
from functools import partial
from typing import Any

from reted.client.messages import Fetch, FetchError
from reted.core.decoder import DecodeError, SubtitleCue, Talk

DEFAULT_LANGUAGE = "en"


class SubtitleStatus(Enum):
    NONE = "none"
    LOADING = "loading"
    LOADED = "loaded"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Subtitles:
    language: str
    lag: int
    cues: tuple[SubtitleCue, ...]


@dataclass(frozen=True)
class TalkModel:
    talk: Talk
    language: str | None = None
    subtitle_status: SubtitleStatus = SubtitleStatus.NONE
    subtitles: Subtitles | None = None


@dataclass(frozen=True)
class SelectLanguage:
    language: str


@dataclass(frozen=True)
class SubtitlesLoaded:
    slug: str
    language: str
    result: Any


def decode(payload: object) -> TalkModel:
    """Build the model from a /api/talks/<slug> response.

    Raises:
        DecodeError: If the payload is malformed
    """
    return TalkModel(talk=Talk.from_dict(payload))


def decode_subtitles(payload: object) -> Subtitles:
    """Decode a /api/talks/<slug>/subtitles response."""
    if not isinstance(payload, dict):
        raise DecodeError("subtitles payload must be an object")
    language = payload.get("language")
    lag = payload.get("lag")
    cues = payload.get("cues")
    if (
        not isinstance(language, str)
        or not isinstance(lag, int)
        or not isinstance(cues, list)
    ):
        raise DecodeError("subtitles payload must contain language, lag and cues")
    try:
        decoded = tuple(
            SubtitleCue(
                start=int(c["start"]),
                duration=int(c["duration"]),
                content=str(c["content"]),
            )
            for c in cues
        )
    except (KeyError, TypeError, ValueError) as e:
        raise DecodeError(f"invalid subtitle cue: {e}") from e
    return Subtitles(language=language, lag=lag, cues=decoded)


def after_load(model: TalkModel) -> tuple[TalkModel, list[Any]]:
    """Post-load initialization: request subtitles in the default language."""
    languages = model.talk.language_codes()
    if not languages:
        return model, []
    language = DEFAULT_LANGUAGE if DEFAULT_LANGUAGE in languages else languages[0]
    return _request_subtitles(model, language)


def update(msg: Any, model: TalkModel) -> tuple[TalkModel, list[Any]]:
    if isinstance(msg, SelectLanguage):
        unchanged = msg.language == model.language
        if unchanged and model.subtitle_status is not SubtitleStatus.UNAVAILABLE:
            return model, []
        return _request_subtitles(model, msg.language)

    if isinstance(msg, SubtitlesLoaded):
        # Late answer for a language or talk no longer shown
        if msg.slug != model.talk.slug or msg.language != model.language:
            return model, []
        if isinstance(msg.result, FetchError):
            status, subtitles = SubtitleStatus.UNAVAILABLE, None
        else:
            status, subtitles = SubtitleStatus.LOADED, msg.result
        return replace(model, subtitle_status=status, subtitles=subtitles), []

    return model, []


def _request_subtitles(
    model: TalkModel, language: str
) -> tuple[TalkModel, list[Any]]:
    slug = model.talk.slug
    command = Fetch(
        path=f"/api/talks/{slug}/subtitles",
        params={"lang": language},
        decode=decode_subtitles,
        to_msg=partial(SubtitlesLoaded, slug, language),
    )
    loading = replace(
        model,
        language=language,
        subtitle_status=SubtitleStatus.LOADING,
        subtitles=None,
    )
    return loading, [command]


def title(model: TalkModel) -> str:
    return f"{model.talk.name} | ReTed"


def view(model: TalkModel) -> str:
    talk = model.talk
    lines = [talk.name]
    if talk.speakers:
        lines.append("by " + ", ".join(s.name for s in talk.speakers))
    lines.append("")
    if talk.description:
        lines.append(talk.description)
        lines.append("")
    if talk.published_at:
        lines.append(f"Published: {talk.published_at}")
    lines.append(f"Views: {talk.viewed_count}")
    if talk.tags:
        lines.append("Tags: " + ", ".join(talk.tags))
    if talk.themes:
        lines.append("Themes: " + ", ".join(t.name for t in talk.themes))

    languages = talk.language_codes()
    if languages:
        lines.append("Languages: " + ", ".join(languages))

    if model.subtitle_status is SubtitleStatus.LOADING:
        lines.append(f"Loading {model.language} subtitles...")
    elif model.subtitle_status is SubtitleStatus.UNAVAILABLE:
        lines.append(f"No {model.language} subtitles available.")
    elif model.subtitles is not None:
        lines.append("")
        for cue in model.subtitles.cues:
            stamp = _timestamp(cue.start + model.subtitles.lag)
            lines.append(f"[{stamp}] {cue.content}")
    return "\n".join(lines)


def _timestamp(ms: int) -> str:
    seconds = ms // 1000
    return f"{seconds // 60:02d}:{seconds % 60:02d}"
