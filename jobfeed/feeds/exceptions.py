"""Custom exceptions for feed fetching and parsing."""

from enum import Enum
from typing import Optional


class FetchErrorKind(str, Enum):
    """Why a feed fetch failed."""

    NETWORK = "network"
    TIMEOUT = "timeout"
    STATUS_CODE = "status_code"


class FeedError(Exception):
    """Base exception for all feed errors.

    Catching this exception catches any feed-level failure that should be
    handled per source (skip the source without aborting the run).
    """

    pass


class FetchError(FeedError):
    """Retrieving a feed failed.

    Attributes:
        url: URL that was requested
        kind: FetchErrorKind describing the failure
    """

    kind: FetchErrorKind = FetchErrorKind.NETWORK

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url


class FetchNetworkError(FetchError):
    """Connection, DNS, TLS or other transport failure."""

    kind = FetchErrorKind.NETWORK


class FetchTimeoutError(FetchError):
    """The feed did not arrive within the configured timeout."""

    kind = FetchErrorKind.TIMEOUT

    def __init__(self, message: str, url: str, timeout: Optional[float] = None) -> None:
        super().__init__(message, url)
        self.timeout = timeout


class FetchStatusError(FetchError):
    """The server answered with a non-2xx status code."""

    kind = FetchErrorKind.STATUS_CODE

    def __init__(self, message: str, url: str, status_code: int) -> None:
        super().__init__(message, url)
        self.status_code = status_code


class ParseError(FeedError):
    """Feed content could not be parsed as RSS or Atom."""

    pass


class FeedConfigurationError(FeedError):
    """Invalid fetcher or parser configuration."""

    pass
