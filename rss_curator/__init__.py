"""
RSS Curator - feed aggregation with AI-assisted rewriting into drafts.

This package merges several RSS/Atom feeds into one newest-first, cached
listing and rewrites a chosen item through an OpenAI-compatible
generative-text API, saving the result as a draft and remembering which
item links already have drafts.

Main entry point is the CLI via the `rss-curator` command.

Example:
    $ rss-curator sources add https://example.com/feed --name Example
    $ rss-curator items --limit 20
"""

__all__ = [
    "__version__",
    "AppConfig",
    "CuratorContext",
    "build_context",
    "load_config",
    "aggregate",
    "list_items",
    "dashboard_rows",
    "publish",
    "verify_credential",
]
__version__ = "0.1.0"

from .aggregate import aggregate, dashboard_rows, list_items
from .config import AppConfig, load_config
from .context import CuratorContext, build_context
from .publish import publish, verify_credential
