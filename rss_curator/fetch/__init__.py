"""
Feed fetching and parsing.

This package turns a feed URL into a list of normalized FeedItems.
"""

from .fetcher import FetchResult, extract_content, fetch_feed, fetch_url, parse_feed

__all__ = ["FetchResult", "fetch_url", "fetch_feed", "parse_feed", "extract_content"]
