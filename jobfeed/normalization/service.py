"""Job normalization service for converting RawItem to Job.

This module implements the normalization logic that:
1. Applies defaults for missing title, description, company and date
2. Validates links, upgrading scheme-less hosts and replacing the rest
3. Computes the deterministic job id
4. Derives the expiry from the source TTL
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from jobfeed.config.models import SourceConfig
from jobfeed.domain.models import Job, RawItem
from jobfeed.logging import get_logger
from jobfeed.utils.hashing import compute_job_id
from jobfeed.utils.text import collapse_whitespace, slugify, truncate_text
from jobfeed.utils.timestamps import ensure_utc, utc_now

logger = get_logger(__name__, component="normalization")

DEFAULT_DESCRIPTION = "Check the link for more details"
DEFAULT_DESCRIPTION_MAX_LENGTH = 300
TRUNCATION_MARKER = "..."

# "remoteok.io/jobs/1": a host with a dot before any path, no scheme
_SCHEMELESS_HOST = re.compile(r"^[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+(:\d+)?(/|$)")


def is_absolute_http_url(url: Optional[str]) -> bool:
    """Whether url is an absolute http(s) URL with a host."""
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def fallback_url(source_name: str) -> str:
    """Deterministic placeholder link for a source.

    Example:
        >>> fallback_url("We Work Remotely")
        'https://weworkremotely.com'
    """
    return f"https://{slugify(source_name) or 'jobs'}.com"


class JobNormalizer:
    """Normalizes RawItem instances into canonical Job records.

    Normalization is a pure function of its inputs: the same item, source
    and ``now`` always give the same Job, and the id never depends on
    ``now`` at all.
    """

    def __init__(
        self,
        description_max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize JobNormalizer.

        Args:
            description_max_length: Maximum stored description length, marker included
            logger_instance: Logger instance (defaults to module logger)
        """
        self.description_max_length = description_max_length
        self.logger = logger_instance or logger

    def normalize(
        self,
        raw_item: RawItem,
        source_name: str,
        ttl: timedelta,
        now: datetime,
        source_fallback_url: Optional[str] = None,
    ) -> Job:
        """Normalize a single RawItem into a Job.

        Args:
            raw_item: Parsed feed entry
            source_name: Name of the originating feed
            ttl: How long the job stays listed after publication
            now: Ingestion time, used when the item has no date
            source_fallback_url: Link used for items without a valid URL
                (default derived from source_name)

        Returns:
            Normalized Job

        Raises:
            ValueError: If ttl is not positive
        """
        if ttl <= timedelta(0):
            raise ValueError(f"ttl must be positive, got: {ttl}")

        title = collapse_whitespace(raw_item.title) or f"{source_name} Opportunity"

        description = collapse_whitespace(raw_item.description) or DEFAULT_DESCRIPTION
        description = truncate_text(
            description, max_length=self.description_max_length, suffix=TRUNCATION_MARKER
        )

        company = collapse_whitespace(raw_item.author) or source_name

        url = self._coerce_url(raw_item.link)
        if url is None:
            # Fallback links are shared by a whole source, so identity comes from the title
            job_id = compute_job_id(source_name, title)
            url = source_fallback_url or fallback_url(source_name)
            self.logger.debug(
                "Item has no usable link; using fallback URL",
                extra={
                    "event": "normalization.job.fallback_url",
                    "link": raw_item.link,
                    "url": url,
                },
            )
        else:
            job_id = compute_job_id(source_name, url)

        published_at = ensure_utc(raw_item.published_at) or ensure_utc(now)
        expires_at = published_at + ttl

        return Job(
            id=job_id,
            title=title,
            description=description,
            company=company,
            url=url,
            source=source_name,
            published_at=published_at,
            expires_at=expires_at,
        )

    def normalize_all(
        self,
        raw_items: Iterable[RawItem],
        source_config: SourceConfig,
        now: Optional[datetime] = None,
    ) -> List[Job]:
        """Normalize every item of one source.

        Uses a single ``now`` for the batch and honours the source's
        max_items limit. An item that fails to normalize is logged and
        skipped; the rest of the batch continues.

        Args:
            raw_items: Parsed feed entries in document order
            source_config: Configuration of the originating source
            now: Ingestion time (defaults to utc_now())

        Returns:
            List of normalized jobs
        """
        now = ensure_utc(now or utc_now())
        ttl = source_config.ttl_delta

        items = list(raw_items)
        if source_config.max_items and len(items) > source_config.max_items:
            self.logger.info(
                f"Limiting {source_config.name} to {source_config.max_items} items",
                extra={
                    "event": "normalization.source.truncated",
                    "total": len(items),
                    "max": source_config.max_items,
                },
            )
            items = items[: source_config.max_items]

        jobs = []
        for index, raw_item in enumerate(items):
            try:
                jobs.append(
                    self.normalize(
                        raw_item,
                        source_config.name,
                        ttl,
                        now,
                        source_fallback_url=source_config.fallback_url,
                    )
                )
            except ValueError as e:
                # pydantic.ValidationError is a ValueError
                self.logger.error(
                    f"Error normalizing item {index} from {source_config.name}: {e}",
                    extra={"event": "normalization.job.failed", "index": index},
                )

        self.logger.info(
            f"Normalized {len(jobs)} jobs from {source_config.name}",
            extra={
                "event": "normalization.source.completed",
                "count": len(jobs),
                "skipped": len(items) - len(jobs),
            },
        )
        return jobs

    @staticmethod
    def _coerce_url(link: Optional[str]) -> Optional[str]:
        """Return an absolute http(s) URL for link, or None if it has none.

        Scheme-less host links ("remoteok.io/jobs/1") are upgraded to https.
        Relative paths and other schemes are rejected.
        """
        if not link:
            return None
        link = link.strip()

        if is_absolute_http_url(link):
            return link

        if "://" not in link and _SCHEMELESS_HOST.match(link):
            candidate = f"https://{link}"
            if is_absolute_http_url(candidate):
                return candidate

        return None
