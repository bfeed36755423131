"""Removal of expired jobs from the collection."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from jobfeed.domain.models import StoredEntry
from jobfeed.logging import get_logger
from jobfeed.persistence.store import JobStore
from jobfeed.utils.timestamps import ensure_utc, utc_now

logger = get_logger(__name__, component="reaper")


def is_live(job: StoredEntry, now: datetime) -> bool:
    """Whether job is still listed at now.

    Jobs whose expiry cannot be parsed count as live.
    """
    expiry = job.expiry
    return expiry is None or expiry > now


def reap(jobs: Iterable[StoredEntry], now: datetime) -> List[StoredEntry]:
    """Return the jobs that have not expired at now, in their original order.

    Args:
        jobs: Job collection
        now: Reference time (UTC)

    Returns:
        Jobs with an expiry after now, plus those with an unparseable expiry
    """
    now = ensure_utc(now)
    return [job for job in jobs if is_live(job, now)]


@dataclass
class ReapResult:
    """Outcome of a reap run.

    Attributes:
        before: Jobs loaded from the store
        after: Jobs remaining
        removed_ids: Ids of the expired jobs, one per removed entry
        saved: Whether the store was rewritten
    """

    before: int = 0
    after: int = 0
    removed_ids: List[Optional[str]] = field(default_factory=list)
    saved: bool = False

    @property
    def removed(self) -> int:
        return self.before - self.after


class ExpiryReaper:
    """Purges expired jobs, either from a list or directly from a store."""

    def reap(
        self, jobs: Iterable[StoredEntry], now: Optional[datetime] = None
    ) -> List[StoredEntry]:
        """Return the live subsequence of jobs (see reap())."""
        return reap(jobs, ensure_utc(now or utc_now()))

    def reap_store(self, store: JobStore, now: Optional[datetime] = None) -> ReapResult:
        """Load the store, drop expired jobs, and save if anything changed.

        Args:
            store: Job store to purge
            now: Reference time (defaults to utc_now())

        Returns:
            ReapResult with counts

        Raises:
            StoreWriteError: If the purged collection cannot be saved
        """
        now = ensure_utc(now or utc_now())
        jobs = store.load()
        live: List[StoredEntry] = []
        expired: List[StoredEntry] = []
        for job in jobs:
            (live if is_live(job, now) else expired).append(job)

        result = ReapResult(
            before=len(jobs),
            after=len(live),
            removed_ids=[job.id for job in expired],
        )

        if result.removed:
            store.save(live)
            result.saved = True
            logger.info(
                f"Removed {result.removed} expired jobs",
                extra={
                    "event": "reaper.run.completed",
                    "removed": result.removed,
                    "remaining": result.after,
                },
            )
        else:
            logger.info(
                "No expired jobs found",
                extra={"event": "reaper.run.completed", "removed": 0, "remaining": result.after},
            )

        self._log_days_left(live, now)
        return result

    @staticmethod
    def _log_days_left(jobs: List[StoredEntry], now: datetime) -> None:
        """Log the remaining listing time of each surviving job at debug level."""
        for job in jobs:
            expiry = job.expiry
            if expiry is None:
                logger.debug(
                    f"{job.title}: unparseable expiry, kept",
                    extra={"event": "reaper.job.unparseable_expiry", "job_id": job.id},
                )
                continue
            days_left = math.ceil((expiry - now).total_seconds() / 86400)
            logger.debug(
                f"{job.title}: {days_left} days left",
                extra={"event": "reaper.job.remaining", "job_id": job.id, "days_left": days_left},
            )
