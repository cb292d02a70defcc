"""
Core domain models and error types.

This package contains data types and errors that are
independent of any specific pipeline stage.
"""

from .errors import (
    ApiError,
    ConfigError,
    CuratorError,
    FetchError,
    ParseError,
    RegistryError,
    RewriteError,
    StorageError,
    TransportError,
)
from .types import (
    ALL_SOURCES,
    DashboardRow,
    Document,
    DraftRecord,
    FeedItem,
    FeedSource,
    PublishResult,
)

__all__ = [
    "ALL_SOURCES",
    "DashboardRow",
    "Document",
    "DraftRecord",
    "FeedItem",
    "FeedSource",
    "PublishResult",
    "CuratorError",
    "ConfigError",
    "RewriteError",
    "TransportError",
    "ApiError",
    "ParseError",
    "StorageError",
    "FetchError",
    "RegistryError",
]
