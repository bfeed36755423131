"""HTTP retrieval of raw feed documents."""

import time
from typing import Optional

import requests
from urllib3.exceptions import ReadTimeoutError

from jobfeed.logging import get_logger

from .exceptions import FeedConfigurationError, FetchNetworkError, FetchStatusError, FetchTimeoutError

logger = get_logger(__name__, component="feeds")

DEFAULT_TIMEOUT = 10
DEFAULT_USER_AGENT = "JobFeedIngestor/1.0"
ACCEPT_HEADER = "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8"
CHUNK_SIZE = 16384


def is_timeout_error(error: requests.exceptions.RequestException) -> bool:
    """Whether a requests error means the server was too slow.

    A read timeout while streaming the body surfaces from ``iter_content``
    as a ConnectionError wrapping urllib3's ReadTimeoutError rather than as
    requests' Timeout.
    """
    if isinstance(error, requests.exceptions.Timeout):
        return True
    if isinstance(error, requests.exceptions.ConnectionError):
        cause = error.args[0] if error.args else None
        return isinstance(cause, ReadTimeoutError) or "Read timed out" in str(error)
    return False


class FeedFetcher:
    """Fetches raw feed content over HTTP(S).

    The timeout bounds the whole download, not just the gap between bytes:
    the body is streamed and the fetch is abandoned once the deadline passes.
    There are no retries at this layer; a failed source is picked up again by
    the next scheduled run.

    Attributes:
        timeout: Default timeout in seconds
        user_agent: User-Agent header for requests
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize fetcher.

        Args:
            timeout: Timeout in seconds (1-300)
            user_agent: User-Agent header for requests
            session: Optional pre-configured requests session

        Raises:
            FeedConfigurationError: If timeout is outside valid range or user_agent is empty
        """
        if not 1 <= timeout <= 300:
            raise FeedConfigurationError(
                f"Timeout must be between 1 and 300 seconds, got: {timeout}"
            )
        if not user_agent or not user_agent.strip():
            raise FeedConfigurationError("user_agent cannot be empty")

        self.timeout = timeout
        self.user_agent = user_agent.strip()

        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent, "Accept": ACCEPT_HEADER})

    def fetch(self, url: str, timeout: Optional[float] = None) -> bytes:
        """Fetch a feed document.

        Args:
            url: Feed URL
            timeout: Override of the default timeout in seconds

        Returns:
            Raw response body

        Raises:
            FetchStatusError: On a non-2xx response
            FetchTimeoutError: When the request or download exceeds the timeout
            FetchNetworkError: On connection and other transport errors
        """
        effective_timeout = timeout if timeout is not None else self.timeout
        deadline = time.monotonic() + effective_timeout

        logger.debug(
            f"GET {url}",
            extra={"event": "feed.fetch.request", "url": url, "timeout": effective_timeout},
        )

        try:
            response = self._session.get(url, timeout=effective_timeout, stream=True)
            try:
                if not 200 <= response.status_code < 300:
                    logger.warning(
                        f"HTTP {response.status_code} from {url}",
                        extra={
                            "event": "feed.fetch.error",
                            "error_type": "StatusCode",
                            "status_code": response.status_code,
                            "url": url,
                        },
                    )
                    raise FetchStatusError(
                        f"HTTP {response.status_code}: {response.reason}",
                        url=url,
                        status_code=response.status_code,
                    )

                content = self._read_body(response, url, deadline, effective_timeout)
            finally:
                response.close()

        except requests.exceptions.RequestException as e:
            if is_timeout_error(e):
                logger.warning(
                    f"Request to {url} timed out after {effective_timeout} seconds",
                    extra={
                        "event": "feed.fetch.error",
                        "error_type": "Timeout",
                        "url": url,
                        "timeout": effective_timeout,
                    },
                )
                raise FetchTimeoutError(
                    f"Request to {url} timed out after {effective_timeout} seconds",
                    url=url,
                    timeout=effective_timeout,
                ) from e

            logger.warning(
                f"Request to {url} failed: {e}",
                extra={
                    "event": "feed.fetch.error",
                    "error_type": type(e).__name__,
                    "url": url,
                },
            )
            raise FetchNetworkError(f"Request to {url} failed: {e}", url=url) from e

        logger.debug(
            "Feed fetched",
            extra={"event": "feed.fetch.succeeded", "url": url, "bytes": len(content)},
        )
        return content

    def _read_body(
        self, response: requests.Response, url: str, deadline: float, timeout: float
    ) -> bytes:
        """Read the streamed body, enforcing the overall deadline."""
        chunks = []
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                chunks.append(chunk)
            if time.monotonic() > deadline:
                logger.warning(
                    f"Download from {url} exceeded {timeout} seconds",
                    extra={
                        "event": "feed.fetch.error",
                        "error_type": "Timeout",
                        "url": url,
                        "timeout": timeout,
                    },
                )
                raise FetchTimeoutError(
                    f"Download from {url} exceeded {timeout} seconds", url=url, timeout=timeout
                )
        return b"".join(chunks)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "FeedFetcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
