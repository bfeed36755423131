"""Feed retrieval and parsing.

    from jobfeed.feeds import FeedFetcher, FeedParser
    content = FeedFetcher(timeout=10).fetch(source.feed_url)
    items = FeedParser().parse(content)

Exception handling:
    from jobfeed.feeds import FeedError, FetchError, ParseError
"""

from .exceptions import (
    FeedConfigurationError,
    FeedError,
    FetchError,
    FetchErrorKind,
    FetchNetworkError,
    FetchStatusError,
    FetchTimeoutError,
    ParseError,
)
from .fetcher import FeedFetcher
from .parser import FeedParser

__all__ = [
    "FeedFetcher",
    "FeedParser",
    # Exceptions
    "FeedError",
    "FetchError",
    "FetchErrorKind",
    "FetchNetworkError",
    "FetchTimeoutError",
    "FetchStatusError",
    "ParseError",
    "FeedConfigurationError",
]
