"""
Time-boxed aggregation cache.

The cache stores the full merged, sorted item list per scope ("all" or one
source id). Entries older than the TTL are treated as absent and recomputed
on the next read; nothing refreshes them in the background. Storage is
delegated to a KeyValueStore so the same cache logic runs over a
per-process dictionary or a directory shared between invocations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import hashlib
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
import tempfile
import time
from typing import Any, Callable

from .core.types import ALL_SOURCES, FeedItem

logger = logging.getLogger(__name__)

CACHE_KEY = "feed_items"
DEFAULT_TTL_SECONDS = 900


class KeyValueStore(ABC):
    """Minimal key-value interface with per-entry timestamps."""

    @abstractmethod
    def get(self, key: str) -> tuple[Any, float] | None:
        """Return (value, stored_at) or None when the key is absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int, stored_at: float) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self) -> None:
        self._data: dict[str, tuple[Any, float]] = {}

    def get(self, key: str) -> tuple[Any, float] | None:
        return self._data.get(key)

    def set(self, key: str, value: Any, ttl: int, stored_at: float) -> None:
        self._data[key] = (value, stored_at)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileStore(KeyValueStore):
    """Stores each key as a JSON file named by the SHA-256 of the key.

    Values must be JSON-serializable. A file that cannot be decoded is
    treated as a miss.
    """

    def __init__(self, cache_dir: Path):
        self.cache_dir = cache_dir

    def get(self, key: str) -> tuple[Any, float] | None:
        path = cache_path(self.cache_dir, key, "json")
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            return data["value"], float(data["stored_at"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable cache file %s: %s", path, exc)
            return None

    def set(self, key: str, value: Any, ttl: int, stored_at: float) -> None:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = cache_path(self.cache_dir, key, "json")
        payload = {"key": key, "stored_at": stored_at, "ttl": ttl, "value": value}
        # One temp file per writer; concurrent writers of a key each replace atomically.
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=self.cache_dir,
            prefix=f"{path.stem}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            json.dump(payload, handle, ensure_ascii=False)
            tmp_name = handle.name
        try:
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        path = cache_path(self.cache_dir, key, "json")
        path.unlink(missing_ok=True)


def cache_path(cache_dir: Path, key: str, suffix: str) -> Path:
    """Generate a cache file path for a key using SHA256 hashing.

    Example:
        >>> cache_path(Path("/cache"), "feed_items", "json").suffix
        '.json'
    """
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return cache_dir / f"{digest}.{suffix}"


class CacheIndex:
    """Tracks cache operations in a JSONL index file.

    Each operation (hit, miss, write, invalidate) is logged as a JSON line
    with a timestamp, the cache key and the number of items involved.

    Attributes:
        cache_dir: Directory where the index is stored
        enabled: Whether index writing is enabled
        path: Full path to the index file
    """

    def __init__(self, cache_dir: Path, enabled: bool = True, filename: str = "index.jsonl"):
        self.cache_dir = cache_dir
        self.enabled = enabled
        self.path = cache_dir / filename

    def append(self, payload: dict[str, Any]) -> None:
        if not self.enabled:
            return
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = dict(payload)
        payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=True))
            handle.write("\n")


class AggregationCache:
    """Scope-keyed, TTL-bounded cache of merged feed items.

    Attributes:
        store: Backing key-value store
        ttl: Entry lifetime in seconds; an entry is fresh while age < ttl
        clock: Time source returning epoch seconds
        index: Optional JSONL operation log
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        index: CacheIndex | None = None,
    ):
        self.store = store
        self.ttl = ttl
        self.clock = clock
        self.index = index

    @staticmethod
    def key_for(scope: str) -> str:
        if scope == ALL_SOURCES:
            return CACHE_KEY
        return f"{CACHE_KEY}_{scope}"

    def get(self, scope: str) -> list[FeedItem] | None:
        """Return the fresh entry for a scope, or None when absent or expired."""
        key = self.key_for(scope)
        entry = self.store.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        if self.clock() - stored_at >= self.ttl:
            return None
        return [FeedItem.from_dict(raw) for raw in value]

    def put(self, scope: str, items: list[FeedItem]) -> None:
        key = self.key_for(scope)
        self.store.set(key, [item.to_dict() for item in items], self.ttl, self.clock())
        self._log("write", key, len(items))

    def get_or_compute(
        self,
        scope: str,
        compute: Callable[[str], list[FeedItem] | None],
    ) -> list[FeedItem]:
        """Serve a scope from cache, recomputing on a miss.

        ``compute`` returns None when the scope resolved to no sources at
        all; that result is returned as an empty list and not stored.
        """
        cached = self.get(scope)
        key = self.key_for(scope)
        if cached is not None:
            logger.debug("Cache hit for %s (%d items)", key, len(cached))
            self._log("hit", key, len(cached))
            return cached

        logger.debug("Cache miss for %s", key)
        self._log("miss", key, 0)
        items = compute(scope)
        if items is None:
            return []
        self.put(scope, items)
        return items

    def invalidate_source(self, source_id: str) -> None:
        """Drop both the all-sources entry and the entry scoped to one source."""
        for key in (self.key_for(ALL_SOURCES), self.key_for(source_id)):
            self.store.delete(key)
            self._log("invalidate", key, 0)
        logger.info("Invalidated cached items for source %s", source_id)

    def _log(self, status: str, key: str, count: int) -> None:
        if self.index is None:
            return
        self.index.append({"status": status, "key": key, "items": count})
