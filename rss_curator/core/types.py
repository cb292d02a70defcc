"""
Core data types for the RSS Curator.

This module defines the fundamental data structures shared by both pipelines:
- FeedSource: A registered feed (read-only to the core)
- FeedItem: One normalized entry produced by the fetcher
- Document: A draft created by the publish workflow
- DraftRecord: The binding between a document and the item link it came from
- DashboardRow: A feed item annotated with its draft state
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


ALL_SOURCES = "all"


@dataclass
class FeedSource:
    """A feed registered in the source registry.

    Attributes:
        id: Registry-assigned identifier, unique within the registry
        url: Feed URL (validated as http/https with a host on write)
        name: Display name chosen when the source was registered
    """
    id: str
    url: str
    name: str


@dataclass
class FeedItem:
    """A normalized feed entry.

    Items are transient: they live in the aggregation cache or in the
    result of a single aggregation call. Two items with the same link are
    the same underlying content; nothing at this level deduplicates them.

    Attributes:
        title: Entry title
        link: Canonical permalink, the join key with DraftRecord
        published: Publish time in epoch seconds (0 when the feed gives none)
        content: HTML-bearing body (full content, else description, else "")
        source: Display name of the feed the entry came from
    """
    title: str
    link: str
    published: int
    content: str
    source: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeedItem":
        return cls(
            title=str(data.get("title") or ""),
            link=str(data.get("link") or ""),
            published=int(data.get("published") or 0),
            content=str(data.get("content") or ""),
            source=str(data.get("source") or ""),
        )


@dataclass
class Document:
    id: int
    title: str
    body: str
    status: str
    author: str
    created_at: float


@dataclass
class DraftRecord:
    """Binds a created document to the source item link it was rewritten from.

    Records are append-only: rewriting the same link again adds a new record.
    """
    document_id: int
    link: str
    created_at: float


@dataclass
class DashboardRow:
    item: FeedItem
    draft_id: int | None = None
    edit_url: str | None = None

    @property
    def action(self) -> str:
        return "Rewrite Again" if self.draft_id is not None else "Rewrite"


@dataclass
class PublishResult:
    document_id: int
    edit_url: str
