"""
Explicitly constructed runtime context.

Every pipeline call receives a CuratorContext holding the configuration and
the collaborator handles (registry, cache, document store, tracker, rewrite
provider). There is no module-level singleton; tests build a context from
in-memory parts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import getpass
import logging
from pathlib import Path

import httpx

from .cache import AggregationCache, CacheIndex, FileStore, KeyValueStore, MemoryStore
from .config import AppConfig, get_api_key, get_system_prompt
from .core.types import FeedSource
from .llm.providers import RewriteProvider, create_provider
from .registry import FeedRegistry
from .store import DocumentStore, SQLiteDocumentStore
from .tracker import DuplicateTracker

logger = logging.getLogger(__name__)


@dataclass
class CuratorContext:
    """Configuration plus collaborator handles passed into each pipeline call.

    Attributes:
        config: Application configuration
        registry: Feed source registry
        cache: Aggregation cache
        store: Document store (also holds draft records)
        tracker: Duplicate tracker over the store's draft records
        provider: Rewrite provider
        author: Acting user recorded on created drafts
        http_client: Optional shared client for feed fetches
    """

    config: AppConfig
    registry: FeedRegistry
    cache: AggregationCache
    store: DocumentStore
    tracker: DuplicateTracker
    provider: RewriteProvider
    author: str = "curator"
    http_client: httpx.Client | None = field(default=None, repr=False)

    @property
    def credential(self) -> str | None:
        return get_api_key(self.config.provider)

    @property
    def system_prompt(self) -> str:
        return get_system_prompt(self.config.provider)


def build_cache(cfg: AppConfig) -> AggregationCache:
    cache_dir = Path(cfg.cache.dir)
    backend = cfg.cache.backend.lower().strip()
    store: KeyValueStore
    if backend == "memory":
        store = MemoryStore()
    elif backend == "file":
        store = FileStore(cache_dir)
    else:
        raise ValueError(f"Unsupported cache backend: {cfg.cache.backend}. Supported: file, memory")
    index = CacheIndex(cache_dir, enabled=cfg.cache.write_index, filename=cfg.cache.index_filename)
    return AggregationCache(store, ttl=cfg.cache.ttl_seconds, index=index)


def build_context(
    cfg: AppConfig,
    author: str | None = None,
    llm_logger: logging.Logger | None = None,
) -> CuratorContext:
    """Wire the default collaborators from configuration.

    ``llm_logger`` is passed to the rewrite provider; callers that never
    reach the provider leave it unset so no LLM log file is opened.
    """
    store = SQLiteDocumentStore(cfg.store.path, edit_url_template=cfg.store.edit_url_template)
    return CuratorContext(
        config=cfg,
        registry=FeedRegistry(Path(cfg.registry.path)),
        cache=build_cache(cfg),
        store=store,
        tracker=DuplicateTracker(store),
        provider=create_provider(cfg.provider, cfg.logging, llm_logger),
        author=author or _current_user(),
    )


def update_source_url(ctx: CuratorContext, source_id: str, url: str) -> FeedSource:
    """Change a source's feed URL and drop the cached aggregations it feeds into."""
    source = ctx.registry.update_url(source_id, url)
    ctx.cache.invalidate_source(source.id)
    return source


def remove_source(ctx: CuratorContext, source_id: str) -> FeedSource:
    source = ctx.registry.remove(source_id)
    ctx.cache.invalidate_source(source.id)
    return source


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "curator"
