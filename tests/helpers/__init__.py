"""Test helper utilities for Job Feed Ingestor tests."""

from .feeds import ATOM_FEED, EMPTY_RSS_FEED, RSS_FEED, SPARSE_RSS_FEED, rss_feed
from .fixture_fetcher import FixtureFetcher

__all__ = [
    "ATOM_FEED",
    "EMPTY_RSS_FEED",
    "RSS_FEED",
    "SPARSE_RSS_FEED",
    "FixtureFetcher",
    "rss_feed",
]
