"""
Feed source registry backed by a YAML file.

The file layout is a single ``sources`` list:

    sources:
      - id: "1"
        name: Example News
        url: https://example.com/feed

The aggregation pipeline only reads from the registry; edits come from the
CLI and must go through ``context.update_source_url`` when the URL changes
so cached aggregations are dropped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlparse

import yaml

from .core.errors import RegistryError
from .core.types import ALL_SOURCES, FeedSource

logger = logging.getLogger(__name__)


def validate_feed_url(url: str) -> str:
    """Return the stripped URL; http(s) with a host and no whitespace, else RegistryError."""
    cleaned = (url or "").strip()
    parsed = urlparse(cleaned)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise RegistryError(f"Invalid feed URL: {url!r}")
    if any(ch.isspace() for ch in cleaned):
        raise RegistryError(f"Invalid feed URL: {url!r}")
    return cleaned


class FeedRegistry:
    """Mapping from source id to FeedSource, persisted to YAML when a path is given."""

    def __init__(self, path: Path | None = None, sources: list[FeedSource] | None = None):
        self.path = path
        self._sources: dict[str, FeedSource] = {}
        if sources is not None:
            for source in sources:
                self._sources[source.id] = source
        elif path is not None:
            self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        for item in raw.get("sources") or []:
            source_id = str(item.get("id") or "").strip()
            url = str(item.get("url") or "").strip()
            if not source_id:
                logger.warning("Skipping feed source without id: %s", item)
                continue
            self._sources[source_id] = FeedSource(
                id=source_id,
                url=url,
                name=str(item.get("name") or url),
            )

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "sources": [
                {"id": s.id, "name": s.name, "url": s.url} for s in self._sources.values()
            ]
        }
        with self.path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)

    def all(self) -> list[FeedSource]:
        return list(self._sources.values())

    def get(self, source_id: str) -> FeedSource | None:
        return self._sources.get(str(source_id))

    def resolve(self, scope: str) -> list[FeedSource]:
        """Sources queried for a scope; an unknown id resolves to no sources."""
        if scope == ALL_SOURCES:
            return self.all()
        source = self.get(scope)
        return [source] if source is not None else []

    def add(self, url: str, name: str | None = None) -> FeedSource:
        url = validate_feed_url(url)
        source = FeedSource(id=self._next_id(), url=url, name=name or urlparse(url).netloc)
        self._sources[source.id] = source
        self._save()
        return source

    def update_url(self, source_id: str, url: str) -> FeedSource:
        source = self._require(source_id)
        source.url = validate_feed_url(url)
        self._save()
        return source

    def remove(self, source_id: str) -> FeedSource:
        source = self._require(source_id)
        del self._sources[source.id]
        self._save()
        return source

    def _require(self, source_id: str) -> FeedSource:
        source = self.get(source_id)
        if source is None:
            raise RegistryError(f"Unknown feed source: {source_id}")
        return source

    def _next_id(self) -> str:
        numeric = [int(key) for key in self._sources if key.isdigit()]
        return str(max(numeric, default=0) + 1)
