"""Shared fixtures: RSS payload builder, fake rewrite provider, in-memory context."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from html import escape
from typing import Callable

import httpx
import pytest

from rss_curator.cache import AggregationCache, MemoryStore
from rss_curator.config import AppConfig
from rss_curator.context import CuratorContext
from rss_curator.core.types import FeedSource
from rss_curator.llm.providers.base import RewriteProvider
from rss_curator.registry import FeedRegistry
from rss_curator.store import SQLiteDocumentStore
from rss_curator.tracker import DuplicateTracker

BASE_TIME = 1_700_000_000


def rss_feed(title: str, entries: list[dict]) -> bytes:
    """Build an RSS 2.0 document.

    Each entry dict may hold title, link, published (epoch seconds),
    description and content (emitted as content:encoded).
    """
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">',
        "<channel>",
        f"<title>{escape(title)}</title>",
        "<link>https://example.com/</link>",
        "<description>test feed</description>",
    ]
    for entry in entries:
        parts.append("<item>")
        parts.append(f"<title>{escape(entry['title'])}</title>")
        parts.append(f"<link>{escape(entry['link'])}</link>")
        if "published" in entry:
            stamp = datetime.fromtimestamp(entry["published"], tz=timezone.utc)
            parts.append(f"<pubDate>{format_datetime(stamp)}</pubDate>")
        if "description" in entry:
            parts.append(f"<description>{escape(entry['description'])}</description>")
        if "content" in entry:
            parts.append(f"<content:encoded><![CDATA[{entry['content']}]]></content:encoded>")
        parts.append("</item>")
    parts.append("</channel></rss>")
    return "\n".join(parts).encode("utf-8")


def numbered_entries(prefix: str, count: int, start: int = BASE_TIME, step: int = 60) -> list[dict]:
    return [
        {
            "title": f"{prefix} {idx}",
            "link": f"https://{prefix.lower()}.example.com/{idx}",
            "published": start + idx * step,
            "description": f"<p>{prefix} body {idx}</p>",
        }
        for idx in range(count)
    ]


class FakeProvider(RewriteProvider):
    """Records calls instead of talking to a remote API."""

    def __init__(self, text: str = "<h2>Rewritten</h2><p>body</p>", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    def rewrite(self, content: str, system_prompt: str, credential: str) -> str:
        self.calls.append((content, system_prompt, credential))
        if self.error is not None:
            raise self.error
        return self.text


class FeedServer:
    """MockTransport handler serving canned payloads per URL and counting requests."""

    def __init__(self, payloads: dict[str, bytes | int]):
        self.payloads = payloads
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        payload = self.payloads.get(url, 404)
        if isinstance(payload, int):
            return httpx.Response(payload, text="error")
        return httpx.Response(200, content=payload, headers={"Content-Type": "application/rss+xml"})


@pytest.fixture
def make_context() -> Callable[..., CuratorContext]:
    created: list[tuple[SQLiteDocumentStore, httpx.Client]] = []

    def _make(
        sources: list[FeedSource] | None = None,
        server: FeedServer | None = None,
        provider: RewriteProvider | None = None,
        credential: str | None = "test-key",
        clock: Callable[[], float] | None = None,
    ) -> CuratorContext:
        cfg = AppConfig()
        cfg.provider.api_key = credential
        cfg.provider.api_key_env = "RSS_CURATOR_TEST_KEY_NOT_SET"
        cache_kwargs = {"clock": clock} if clock is not None else {}
        store = SQLiteDocumentStore(":memory:")
        ctx = CuratorContext(
            config=cfg,
            registry=FeedRegistry(sources=sources or []),
            cache=AggregationCache(MemoryStore(), ttl=cfg.cache.ttl_seconds, **cache_kwargs),
            store=store,
            tracker=DuplicateTracker(store),
            provider=provider or FakeProvider(),
            author="editor",
            http_client=httpx.Client(transport=httpx.MockTransport(server or FeedServer({}))),
        )
        created.append((store, ctx.http_client))
        return ctx

    yield _make

    for store, client in created:
        store.close()
        client.close()
