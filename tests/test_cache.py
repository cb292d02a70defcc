"""Tests for the TTL aggregation cache and source-edit invalidation."""

from __future__ import annotations

import json
import threading
from pathlib import Path

from conftest import FeedServer, numbered_entries, rss_feed
from rss_curator.aggregate import list_items
from rss_curator.cache import AggregationCache, CacheIndex, FileStore, MemoryStore
from rss_curator.context import update_source_url
from rss_curator.core.types import ALL_SOURCES, FeedItem, FeedSource


class _Clock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _item(idx: int) -> FeedItem:
    return FeedItem(
        title=f"Item {idx}",
        link=f"https://example.com/{idx}",
        published=idx,
        content="<p>x</p>",
        source="Example",
    )


def test_key_for_scope():
    assert AggregationCache.key_for(ALL_SOURCES) == "feed_items"
    assert AggregationCache.key_for("7") == "feed_items_7"


def test_get_or_compute_serves_hits_until_ttl_expires():
    clock = _Clock()
    cache = AggregationCache(MemoryStore(), ttl=900, clock=clock)
    calls = []

    def compute(scope: str) -> list[FeedItem]:
        calls.append(scope)
        return [_item(len(calls))]

    first = cache.get_or_compute(ALL_SOURCES, compute)
    clock.now += 899
    second = cache.get_or_compute(ALL_SOURCES, compute)
    clock.now += 1
    third = cache.get_or_compute(ALL_SOURCES, compute)

    assert calls == [ALL_SOURCES, ALL_SOURCES]
    assert first == second
    assert third[0].title == "Item 2"


def test_cached_items_are_copies():
    cache = AggregationCache(MemoryStore())
    cache.put(ALL_SOURCES, [_item(1)])

    fetched = cache.get(ALL_SOURCES)
    fetched[0].title = "mutated"

    assert cache.get(ALL_SOURCES)[0].title == "Item 1"


def test_invalidate_source_drops_scope_and_all_entries():
    cache = AggregationCache(MemoryStore())
    cache.put(ALL_SOURCES, [_item(1)])
    cache.put("3", [_item(2)])
    cache.put("4", [_item(3)])

    cache.invalidate_source("3")

    assert cache.get(ALL_SOURCES) is None
    assert cache.get("3") is None
    assert cache.get("4") is not None


def test_file_store_roundtrip_and_index(tmp_path: Path):
    index = CacheIndex(tmp_path, enabled=True)
    cache = AggregationCache(FileStore(tmp_path), index=index)

    cache.get_or_compute(ALL_SOURCES, lambda scope: [_item(1), _item(2)])
    reloaded = AggregationCache(FileStore(tmp_path)).get(ALL_SOURCES)
    cache.invalidate_source("5")

    assert [item.link for item in reloaded] == ["https://example.com/1", "https://example.com/2"]
    events = [json.loads(line) for line in index.path.read_text(encoding="utf-8").splitlines()]
    assert [event["status"] for event in events] == ["miss", "write", "invalidate", "invalidate"]
    assert events[1]["items"] == 2
    assert all("timestamp" in event for event in events)


def test_file_store_treats_corrupt_file_as_miss(tmp_path: Path):
    store = FileStore(tmp_path)
    store.set("feed_items", [], ttl=900, stored_at=1.0)
    for path in tmp_path.glob("*.json"):
        path.write_text("{not json", encoding="utf-8")

    assert store.get("feed_items") is None


def test_disabled_index_writes_nothing(tmp_path: Path):
    index = CacheIndex(tmp_path, enabled=False)
    index.append({"status": "hit"})

    assert not index.path.exists()


def test_editing_source_url_forces_refetch(make_context):
    old_url = "https://old.example.com/feed"
    new_url = "https://new.example.com/feed"
    server = FeedServer(
        {
            old_url: rss_feed("Old", numbered_entries("Old", 2)),
            new_url: rss_feed("New", numbered_entries("New", 2)),
        }
    )
    ctx = make_context(sources=[FeedSource(id="1", url=old_url, name="Feed")], server=server)

    assert {item.source for item in list_items(ctx, ALL_SOURCES)} == {"Old"}
    assert {item.source for item in list_items(ctx, "1")} == {"Old"}

    update_source_url(ctx, "1", new_url)

    assert {item.source for item in list_items(ctx, ALL_SOURCES)} == {"New"}
    assert {item.source for item in list_items(ctx, "1")} == {"New"}
    assert server.requests == [old_url, old_url, new_url, new_url]


def test_file_store_concurrent_writers_of_one_key(tmp_path: Path):
    store = FileStore(tmp_path)
    errors: list[Exception] = []

    def writer(worker: int) -> None:
        for idx in range(50):
            try:
                store.set("feed_items", [worker, idx], ttl=900, stored_at=float(idx))
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

    threads = [threading.Thread(target=writer, args=(worker,)) for worker in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    value, _ = store.get("feed_items")
    assert value[0] in range(4)
    assert value[1] in range(50)
    assert list(tmp_path.glob("*.tmp")) == []
