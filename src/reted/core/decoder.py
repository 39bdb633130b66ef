"""Talk decoder.

Parses talks API payloads into typed talk records. Also reads back the
service's own JSON representation on the client side.
"""

from dataclasses import dataclass, field
from typing import Any


class DecodeError(ValueError):
    """Payload does not have the expected shape."""


@dataclass(frozen=True)
class Image:
    """Talk thumbnail in one size."""

    size: str
    url: str


@dataclass(frozen=True)
class Theme:
    """Talk theme reference."""

    id: int
    name: str


@dataclass(frozen=True)
class Speaker:
    """Talk speaker reference."""

    id: int
    name: str


@dataclass(frozen=True)
class Talk:
    """Full talk record."""

    id: int
    name: str
    description: str
    slug: str
    recorded_at: str
    published_at: str
    updated_at: str
    viewed_count: int
    images: list[Image] = field(default_factory=list)
    languages: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    themes: list[Theme] = field(default_factory=list)
    speakers: list[Speaker] = field(default_factory=list)

    def language_codes(self) -> list[str]:
        """Subtitle language codes available for this talk."""
        return list(self.languages)

    def image_url(self, size: str | None = None) -> str | None:
        """Return the URL of the image with the given size, or the first one."""
        for image in self.images:
            if size is None or image.size == size:
                return image.url
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "slug": self.slug,
            "recorded_at": self.recorded_at,
            "published_at": self.published_at,
            "updated_at": self.updated_at,
            "viewed_count": self.viewed_count,
            "images": [{"size": i.size, "url": i.url} for i in self.images],
            "languages": self.languages,
            "tags": self.tags,
            "themes": [{"id": t.id, "name": t.name} for t in self.themes],
            "speakers": [{"id": s.id, "name": s.name} for s in self.speakers],
        }

    @classmethod
    def from_dict(cls, data: object) -> "Talk":
        """Build a Talk from the service JSON produced by to_dict().

        Raises:
            DecodeError: If data is not a valid talk dictionary
        """
        obj = _require_dict(data, "talk")
        return cls(
            id=_require(obj, "id", int),
            name=_require(obj, "name", str),
            description=_require(obj, "description", str),
            slug=_require(obj, "slug", str),
            recorded_at=_require(obj, "recorded_at", str),
            published_at=_require(obj, "published_at", str),
            updated_at=_require(obj, "updated_at", str),
            viewed_count=_require(obj, "viewed_count", int),
            images=[
                Image(size=_require(i, "size", str), url=_require(i, "url", str))
                for i in _require_dicts(obj, "images")
            ],
            languages=_require(obj, "languages", dict),
            tags=[_as(tag, str, "tags") for tag in _require(obj, "tags", list)],
            themes=[
                Theme(id=_require(t, "id", int), name=_require(t, "name", str))
                for t in _require_dicts(obj, "themes")
            ],
            speakers=[
                Speaker(id=_require(s, "id", int), name=_require(s, "name", str))
                for s in _require_dicts(obj, "speakers")
            ],
        )


@dataclass(frozen=True)
class TalkSummary:
    """Short talk record used in listings and search results."""

    id: int
    name: str
    slug: str
    description: str = ""
    image: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: object) -> "TalkSummary":
        """Build a TalkSummary from the service JSON produced by to_dict()."""
        obj = _require_dict(data, "talk summary")
        image = obj.get("image")
        if image is not None and not isinstance(image, str):
            raise DecodeError("image must be a string")
        return cls(
            id=_require(obj, "id", int),
            name=_require(obj, "name", str),
            slug=_require(obj, "slug", str),
            description=_optional(obj, "description", str, ""),
            image=image,
        )


@dataclass(frozen=True)
class SubtitleCue:
    """One subtitle caption. Times are in milliseconds."""

    start: int
    duration: int
    content: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"start": self.start, "duration": self.duration, "content": self.content}


def decode_talk(payload: object) -> Talk:
    """Decode a `{"talk": {...}}` upstream payload.

    Args:
        payload: Parsed JSON from the talks API

    Returns:
        Decoded Talk

    Raises:
        DecodeError: If a field is missing or has the wrong type
    """
    wrapper = _require_dict(payload, "payload")
    obj = _require(wrapper, "talk", dict)

    return Talk(
        id=_require(obj, "id", int),
        name=_require(obj, "name", str),
        description=_optional(obj, "description", str, ""),
        slug=_require(obj, "slug", str),
        recorded_at=_optional(obj, "recorded_at", str, ""),
        published_at=_optional(obj, "published_at", str, ""),
        updated_at=_optional(obj, "updated_at", str, ""),
        viewed_count=_optional(obj, "viewed_count", int, 0),
        images=[_decode_image(item) for item in _optional(obj, "images", list, [])],
        languages=_optional(obj, "languages", dict, {}),
        tags=[
            _require(_require_dict(item, "tag"), "tag", str)
            for item in _optional(obj, "tags", list, [])
        ],
        themes=[_decode_theme(item) for item in _optional(obj, "themes", list, [])],
        speakers=[
            _decode_speaker(item) for item in _optional(obj, "speakers", list, [])
        ],
    )


def decode_talk_list(payload: object) -> list[TalkSummary]:
    """Decode a `{"talks": [{"talk": {...}}, ...]}` listing."""
    wrapper = _require_dict(payload, "payload")
    return [_decode_summary(item) for item in _require(wrapper, "talks", list)]


def decode_search_results(payload: object) -> list[TalkSummary]:
    """Decode a `{"results": [{"talk": {...}}, ...]}` search response.

    Non-talk results (playlists, speakers) are skipped.
    """
    wrapper = _require_dict(payload, "payload")
    summaries: list[TalkSummary] = []
    for item in _require(wrapper, "results", list):
        if isinstance(item, dict) and "talk" in item:
            summaries.append(_decode_summary(item))
    return summaries


def decode_subtitles(payload: object) -> tuple[list[SubtitleCue], int]:
    """Decode an upstream subtitles payload.

    Returns:
        Tuple of (cues ordered by start time, preroll offset in milliseconds)
    """
    obj = _require_dict(payload, "payload")
    meta = obj.get("_meta", {})
    if not isinstance(meta, dict):
        raise DecodeError("_meta must be an object")
    lag = _optional(meta, "preroll_offset", int, 0)

    cues: list[SubtitleCue] = []
    for key, item in obj.items():
        if key == "_meta":
            continue
        caption = _require(_require_dict(item, "subtitle"), "caption", dict)
        cues.append(
            SubtitleCue(
                start=_require(caption, "startTime", int),
                duration=_require(caption, "duration", int),
                content=_require(caption, "content", str),
            )
        )
    cues.sort(key=lambda cue: cue.start)
    return cues, lag


def _decode_summary(item: object) -> TalkSummary:
    obj = _require(_require_dict(item, "talk entry"), "talk", dict)
    images = [_decode_image(i) for i in _optional(obj, "images", list, [])]
    return TalkSummary(
        id=_require(obj, "id", int),
        name=_require(obj, "name", str),
        slug=_require(obj, "slug", str),
        description=_optional(obj, "description", str, ""),
        image=images[0].url if images else None,
    )


def _decode_image(item: object) -> Image:
    img = _require(_require_dict(item, "image"), "image", dict)
    return Image(size=_require(img, "size", str), url=_require(img, "url", str))


def _decode_theme(item: object) -> Theme:
    tm = _require(_require_dict(item, "theme"), "theme", dict)
    return Theme(id=_require(tm, "id", int), name=_require(tm, "name", str))


def _decode_speaker(item: object) -> Speaker:
    sp = _require(_require_dict(item, "speaker"), "speaker", dict)
    return Speaker(id=_require(sp, "id", int), name=_require(sp, "name", str))


def _require_dict(value: object, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{what} must be an object")
    return value


def _require_dicts(obj: dict[str, Any], key: str) -> list[dict[str, Any]]:
    return [_require_dict(item, key) for item in _require(obj, key, list)]


def _as(value: object, kind: type, what: str) -> Any:
    # bool is an int subclass, reject it explicitly for numeric fields
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DecodeError(f"{what} must be of type {kind.__name__}")
    return value


def _require(obj: dict[str, Any], key: str, kind: type) -> Any:
    if key not in obj:
        raise DecodeError(f"missing field: {key}")
    return _as(obj[key], kind, key)


def _optional(obj: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = obj.get(key)
    if value is None:
        return default
    return _as(value, kind, key)
