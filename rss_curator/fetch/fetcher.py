"""
Feed fetching and normalization.

One feed URL becomes one HTTP GET (httpx) and one feedparser pass. There is
no retry: a failed source simply contributes nothing to the current
aggregation cycle, which is the aggregator's decision, not ours. Every
failure mode is reported as a FetchError.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
import logging
from typing import Any
from urllib.parse import urlparse

import feedparser
import httpx

from ..config import FetchConfig
from ..core.errors import FetchError
from ..core.types import FeedItem

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either body will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        body: The raw response bytes, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    body: bytes | None
    error: str | None


def fetch_url(url: str, cfg: FetchConfig, client: httpx.Client | None = None) -> FetchResult:
    """Fetch a URL once using httpx.

    Follows redirects and respects system proxy settings when trust_env is
    enabled. Non-2xx responses are reported as errors.

    Args:
        url: The URL to fetch
        cfg: Fetch settings (timeout, user agent, proxy handling)
        client: Optional pre-built client, used as-is and left open

    Returns:
        FetchResult with the body on success or an error message on failure
    """
    headers = {"User-Agent": cfg.user_agent}
    try:
        if client is not None:
            resp = client.get(url, headers=headers, timeout=cfg.timeout_seconds, follow_redirects=True)
        else:
            with httpx.Client(
                timeout=cfg.timeout_seconds,
                headers=headers,
                follow_redirects=True,
                trust_env=cfg.trust_env,
            ) as own_client:
                resp = own_client.get(url)
    except httpx.HTTPError as exc:
        return FetchResult(url=url, status_code=None, body=None, error=f"{type(exc).__name__}: {exc}")

    if resp.status_code < 200 or resp.status_code >= 300:
        return FetchResult(
            url=url,
            status_code=resp.status_code,
            body=None,
            error=f"HTTP {resp.status_code}",
        )
    return FetchResult(url=url, status_code=resp.status_code, body=resp.content, error=None)


def fetch_feed(
    url: str,
    cfg: FetchConfig,
    fallback_name: str | None = None,
    client: httpx.Client | None = None,
) -> list[FeedItem]:
    """Fetch and parse one feed into normalized items.

    Args:
        url: Feed URL, must be non-empty
        cfg: Fetch settings
        fallback_name: Display name used when the feed has no title of its own
        client: Optional httpx client (tests inject a MockTransport-backed one)

    Returns:
        All entries of the feed in document order

    Raises:
        FetchError: On empty URL, network failure, non-2xx status, or a
            payload feedparser cannot make sense of
    """
    if not url or not url.strip():
        raise FetchError("Feed URL is empty", url=url)

    result = fetch_url(url, cfg, client=client)
    if result.error is not None or result.body is None:
        raise FetchError(result.error or "Empty response", url=url, status_code=result.status_code)

    items = parse_feed(result.body, url, fallback_name)
    logger.debug("Fetched %d entries from %s", len(items), url)
    return items


def parse_feed(payload: bytes | str, url: str = "", fallback_name: str | None = None) -> list[FeedItem]:
    """Parse a raw RSS/Atom payload into FeedItems.

    A document feedparser flags as malformed is still accepted when it
    yielded entries; only a malformed document with nothing usable fails.
    """
    parsed = feedparser.parse(payload)
    if parsed.get("bozo") and not parsed.entries:
        exc = parsed.get("bozo_exception")
        raise FetchError(f"Unparsable feed: {exc}", url=url)

    source_name = (
        parsed.feed.get("title")
        or fallback_name
        or urlparse(url).netloc
        or url
    )
    return [_to_item(entry, source_name) for entry in parsed.entries]


def _to_item(entry: Any, source_name: str) -> FeedItem:
    return FeedItem(
        title=str(entry.get("title") or ""),
        link=str(entry.get("link") or ""),
        published=_published_epoch(entry),
        content=extract_content(entry),
        source=source_name,
    )


def extract_content(entry: Any) -> str:
    """Pick the body of an entry: full content, else description, else ""."""
    contents = entry.get("content") or []
    for block in contents:
        value = block.get("value") if hasattr(block, "get") else None
        if value:
            return str(value)
    description = entry.get("summary") or entry.get("description")
    if description:
        return str(description)
    return ""


def _published_epoch(entry: Any) -> int:
    # feedparser normalizes dates to UTC struct_time
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        value = entry.get(key)
        if value:
            return int(calendar.timegm(value))
    return 0
