"""
Feed aggregation.

Fans the fetcher out over the sources in a scope, merges their items and
orders them newest first. The cache stores the full merged list; the
``limit`` only trims what is handed back to the caller, so a later request
with a larger limit is served from the same cache entry.
"""

from __future__ import annotations

import logging

from .context import CuratorContext
from .core.errors import FetchError
from .core.types import DashboardRow, FeedItem
from .fetch.fetcher import fetch_feed

logger = logging.getLogger(__name__)


def merge_sources(ctx: CuratorContext, scope: str) -> list[FeedItem] | None:
    """Fetch every source in ``scope`` and return the merged, sorted items.

    Returns None when the scope resolves to no sources, so the caller can
    skip the cache write. A source that fails to fetch contributes zero
    items; the others are still merged.
    """
    sources = ctx.registry.resolve(scope)
    if not sources:
        return None

    per_source = ctx.config.fetch.per_source_limit
    merged: list[FeedItem] = []
    for source in sources:
        try:
            items = fetch_feed(
                source.url,
                ctx.config.fetch,
                fallback_name=source.name,
                client=ctx.http_client,
            )
        except FetchError as exc:
            logger.warning("Skipping source %s (%s): %s", source.id, source.url, exc)
            continue
        merged.extend(most_recent(items, per_source))

    return sort_newest_first(merged)


def most_recent(items: list[FeedItem], cap: int) -> list[FeedItem]:
    """The ``cap`` newest items of one source."""
    return sort_newest_first(items)[:cap]


def sort_newest_first(items: list[FeedItem]) -> list[FeedItem]:
    # sorted() is stable, so equal timestamps keep their input order
    return sorted(items, key=lambda item: item.published, reverse=True)


def aggregate(ctx: CuratorContext, scope: str, limit: int | None = None) -> list[FeedItem]:
    """Uncached aggregation of a scope, truncated to ``limit``."""
    items = merge_sources(ctx, scope) or []
    return _truncate(items, limit)


def list_items(ctx: CuratorContext, scope: str, limit: int | None = 50) -> list[FeedItem]:
    """Cached read path used by listings and the rendered feed."""
    items = ctx.cache.get_or_compute(scope, lambda s: merge_sources(ctx, s))
    return _truncate(items, limit)


def dashboard_rows(ctx: CuratorContext, scope: str, limit: int | None = 50) -> list[DashboardRow]:
    """Items of a scope annotated with the latest draft created from each link."""
    items = list_items(ctx, scope, limit)
    drafts = ctx.tracker.lookup_many([item.link for item in items])
    rows = []
    for item in items:
        draft_id = drafts.get(item.link)
        edit_url = ctx.store.edit_reference(draft_id) if draft_id is not None else None
        rows.append(DashboardRow(item=item, draft_id=draft_id, edit_url=edit_url))
    return rows


def _truncate(items: list[FeedItem], limit: int | None) -> list[FeedItem]:
    if limit is None:
        return list(items)
    return items[: max(limit, 0)]
