"""File-based key-value cache with TTL invalidation.

Cache structure:
    .cache/
    ├── talks/
    │   └── <slug>.json            # Full talk records
    ├── lists/
    │   └── newest-<limit>.json    # Home page listings
    ├── search/
    │   └── <query_hash>.json      # Search results
    └── subtitles/
        └── <slug>.<lang>.json     # Subtitle cues
"""

import hashlib
import json
import re
import shutil
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, TypedDict

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class CachedEntry(TypedDict):
    """Stored cache file structure."""

    stored_at: float
    payload: dict[str, Any]


def compute_key_hash(text: str) -> str:
    """Compute a stable file-safe key for free-form text.

    Args:
        text: Arbitrary key text (e.g., a search query)

    Returns:
        SHA-256 hex digest of the normalized text
    """
    normalized = " ".join(text.split()).lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


class Cache(Protocol):
    """Key-value cache interface used by the talk service."""

    def get(self, namespace: str, key: str) -> dict[str, Any] | None: ...

    def set(self, namespace: str, key: str, payload: dict[str, Any]) -> None: ...

    def invalidate(self, namespace: str, key: str) -> None: ...

    def keys(self, namespace: str) -> list[str]: ...

    def clear(self) -> None: ...


class TalkCache:
    """File-based cache for upstream talk payloads.

    Entries are valid for ``ttl`` seconds after being stored. A ttl of 0
    keeps entries forever.
    """

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(
        self,
        cache_dir: Path,
        *,
        ttl: float = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
            ttl: Entry lifetime in seconds (0 disables expiry)
            clock: Time source, returns seconds since the epoch
        """
        self._cache_dir = cache_dir
        self._ttl = ttl
        self._clock = clock

    @property
    def cache_dir(self) -> Path:
        """Root cache directory."""
        return self._cache_dir

    @property
    def ttl(self) -> float:
        """Entry lifetime in seconds."""
        return self._ttl

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with .gitignore if it doesn't exist."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            gitignore_path = self._cache_dir / ".gitignore"
            gitignore_path.write_text(self._GITIGNORE_CONTENT, encoding="utf-8")

    def _entry_path(self, namespace: str, key: str) -> Path:
        if not _SAFE_KEY.match(namespace):
            raise ValueError(f"Invalid cache namespace: {namespace!r}")
        if not _SAFE_KEY.match(key) or key.startswith("."):
            key = compute_key_hash(key)
        return self._cache_dir / namespace / f"{key}.json"

    def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        """Retrieve cached payload if present and not expired.

        Args:
            namespace: Entry group (e.g., "talks")
            key: Entry key within the namespace (e.g., a talk slug)

        Returns:
            Cached payload, or None on miss, expiry or unreadable entry
        """
        entry_path = self._entry_path(namespace, key)
        if not entry_path.exists():
            return None

        entry = self._read_entry(entry_path)
        if entry is None:
            return None

        if self._ttl and self._clock() - entry["stored_at"] > self._ttl:
            return None

        return entry["payload"]

    def set(self, namespace: str, key: str, payload: dict[str, Any]) -> None:
        """Store payload in cache.

        Args:
            namespace: Entry group (e.g., "talks")
            key: Entry key within the namespace
            payload: JSON-serializable payload
        """
        self._ensure_cache_dir()

        entry_path = self._entry_path(namespace, key)
        entry_path.parent.mkdir(parents=True, exist_ok=True)

        entry: CachedEntry = {"stored_at": self._clock(), "payload": payload}
        entry_path.write_text(json.dumps(entry), encoding="utf-8")

    def invalidate(self, namespace: str, key: str) -> None:
        """Remove a single cache entry."""
        entry_path = self._entry_path(namespace, key)
        if entry_path.exists():
            entry_path.unlink()

    def keys(self, namespace: str) -> list[str]:
        """List stored keys in a namespace, sorted."""
        namespace_dir = self._cache_dir / namespace
        if not namespace_dir.is_dir():
            return []
        return sorted(path.stem for path in namespace_dir.glob("*.json"))

    def clear(self) -> None:
        """Remove every cached entry, keeping the cache directory."""
        if not self._cache_dir.exists():
            return
        for child in self._cache_dir.iterdir():
            if child.is_dir():
                shutil.rmtree(child)

    def _read_entry(self, entry_path: Path) -> CachedEntry | None:
        """Read and validate an entry file.

        Args:
            entry_path: Path to entry JSON file

        Returns:
            CachedEntry if valid, None otherwise
        """
        try:
            data = json.loads(entry_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        stored_at = data.get("stored_at")
        payload = data.get("payload")
        if not isinstance(stored_at, int | float) or not isinstance(payload, dict):
            return None

        return CachedEntry(stored_at=float(stored_at), payload=payload)


class NullCache:
    """Cache that stores nothing. Used when caching is disabled."""

    def get(self, namespace: str, key: str) -> dict[str, Any] | None:
        return None

    def set(self, namespace: str, key: str, payload: dict[str, Any]) -> None:
        pass

    def invalidate(self, namespace: str, key: str) -> None:
        pass

    def keys(self, namespace: str) -> list[str]:
        return []

    def clear(self) -> None:
        pass
