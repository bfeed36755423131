"""Pipeline orchestration for feed ingestion and expiry reaping."""

import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextvars import copy_context
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union
from uuid import uuid4

from jobfeed.collection.dedup import Deduplicator
from jobfeed.collection.expiry import ExpiryReaper, ReapResult
from jobfeed.config.models import AppConfig, SourceConfig
from jobfeed.domain.models import Job
from jobfeed.feeds.exceptions import FetchError, FetchTimeoutError, ParseError
from jobfeed.feeds.fetcher import FeedFetcher
from jobfeed.feeds.parser import FeedParser
from jobfeed.logging import get_logger
from jobfeed.logging.context import log_context
from jobfeed.normalization.service import JobNormalizer
from jobfeed.persistence.exceptions import StoreWriteError
from jobfeed.persistence.store import JobStore
from jobfeed.utils.timestamps import ensure_utc, utc_now

from .models import PipelineRunResult, SourceRunStats

logger = get_logger(__name__, component="pipeline")

# Extra time granted to a worker beyond the fetch timeout before it is abandoned
FETCH_WAIT_GRACE_SECONDS = 5

FetchOutcome = Union[bytes, FetchError]


class IngestPipeline:
    """
    Runs one ingestion pass over all enabled sources.

    Each source goes fetch → parse → normalize. A source that fails to fetch
    or parse contributes no jobs and the run carries on. Once every source is
    done, the combined jobs are merged into the stored collection and the
    store is written exactly once.
    """

    def __init__(
        self,
        app_config: AppConfig,
        store: JobStore,
        fetcher: Optional[FeedFetcher] = None,
        parser: Optional[FeedParser] = None,
        normalizer: Optional[JobNormalizer] = None,
        deduplicator: Optional[Deduplicator] = None,
    ):
        """
        Initialize the ingestion pipeline.

        Args:
            app_config: Application configuration
            store: Job store to merge into
            fetcher: Feed fetcher (default built from advanced settings)
            parser: Feed parser
            normalizer: Job normalizer (default built from advanced settings)
            deduplicator: Merge strategy
        """
        advanced = app_config.advanced
        self.app_config = app_config
        self.store = store
        self.fetcher = fetcher or FeedFetcher(
            timeout=advanced.http_request_timeout, user_agent=advanced.user_agent
        )
        self.parser = parser or FeedParser()
        self.normalizer = normalizer or JobNormalizer(
            description_max_length=advanced.description_max_length
        )
        self.deduplicator = deduplicator or Deduplicator()
        self._lock = threading.Lock()

    def run_once(self, now: Optional[datetime] = None) -> PipelineRunResult:
        """
        Execute a complete ingestion run.

        Args:
            now: Ingestion time used for undated items (defaults to utc_now())

        Returns:
            PipelineRunResult with aggregate metrics and per-source stats

        Raises:
            StoreWriteError: If the merged collection cannot be persisted.
                Source-level failures never raise; they are captured in the result.
        """
        run_started_at = utc_now()
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Ingestion run skipped: previous run still in progress",
                    extra={"event": "pipeline.run.skipped", "reason": "lock_held"},
                )
            return PipelineRunResult(
                run_started_at=run_started_at,
                run_finished_at=utc_now(),
                skipped=True,
            )

        try:
            with log_context(run_id=run_id, run_type="ingest"):
                return self._run(ensure_utc(now or run_started_at), run_started_at)
        finally:
            self._lock.release()

    def _run(self, now: datetime, run_started_at: datetime) -> PipelineRunResult:
        sources = self.app_config.get_enabled_sources()
        workers = min(self.app_config.advanced.max_workers, len(sources))

        logger.info(
            "Ingestion run started",
            extra={
                "event": "pipeline.run.started",
                "enabled_source_count": len(sources),
                "disabled_source_count": len(self.app_config.sources) - len(sources),
                "max_workers": workers,
            },
        )

        if workers > 1:
            fetched = self._fetch_concurrently(sources, workers)
        else:
            fetched = {}

        source_stats: List[SourceRunStats] = []
        incoming: List[Job] = []
        for source in sources:
            with log_context(source_name=source.name):
                prefetched = fetched.get(source.name) if workers > 1 else None
                stats, jobs = self._process_source(source, now, prefetched)
            source_stats.append(stats)
            incoming.extend(jobs)

        existing = self.store.load()
        merge_result = self.deduplicator.merge(existing, incoming)

        try:
            self.store.save(merge_result.jobs)
        except StoreWriteError:
            logger.error(
                "Ingestion run failed: job store could not be written",
                extra={"event": "pipeline.run.failed", "path": str(self.store.path)},
            )
            raise

        result = PipelineRunResult(
            run_started_at=run_started_at,
            run_finished_at=utc_now(),
            existing_count=merge_result.existing_count,
            added_count=merge_result.added,
            duplicate_count=merge_result.duplicates,
            stored_count=len(merge_result.jobs),
            source_stats=source_stats,
        )

        logger.info(
            "Ingestion run completed",
            extra={
                "event": "pipeline.run.completed",
                "duration_ms": int(result.total_duration_seconds * 1000),
                "total_parsed": result.total_parsed,
                "total_normalized": result.total_normalized,
                "added": result.added_count,
                "duplicates": result.duplicate_count,
                "stored": result.stored_count,
                "failed_sources": result.failed_sources,
                "had_errors": result.had_errors,
            },
        )
        return result

    def _process_source(
        self,
        source: SourceConfig,
        now: datetime,
        prefetched: Optional[FetchOutcome] = None,
    ) -> Tuple[SourceRunStats, List[Job]]:
        """
        Fetch (unless prefetched), parse and normalize one source.

        Args:
            source: Source to process
            now: Ingestion time
            prefetched: Content or error from concurrent fetching

        Returns:
            Tuple of (SourceRunStats, normalized jobs); jobs is empty on failure
        """
        source_start = time.time()
        stats = SourceRunStats(source_name=source.name)

        logger.info(
            f"Processing source: {source.name}",
            extra={"event": "source.run.started", "feed_url": source.feed_url},
        )

        try:
            outcome = prefetched if prefetched is not None else self._fetch(source)
            if isinstance(outcome, FetchError):
                stats.record_error(outcome.kind.value, str(outcome))
                logger.error(
                    f"Skipping {source.name}: {outcome}",
                    extra={
                        "event": "source.run.failed",
                        "error_type": outcome.kind.value,
                        "error": str(outcome),
                    },
                )
                return stats, []

            stats.fetched_bytes = len(outcome)

            try:
                items = self.parser.parse_feed(outcome)
            except ParseError as e:
                stats.record_error("parse", str(e))
                logger.error(
                    f"Skipping {source.name}: {e}",
                    extra={"event": "source.run.failed", "error_type": "parse", "error": str(e)},
                )
                return stats, []

            stats.parsed_count = len(items)
            jobs = self.normalizer.normalize_all(items, source, now)
            stats.normalized_count = len(jobs)

            logger.info(
                f"Source {source.name}: {stats.parsed_count} items, {stats.normalized_count} jobs",
                extra={
                    "event": "source.run.completed",
                    "parsed": stats.parsed_count,
                    "normalized": stats.normalized_count,
                },
            )
            return stats, jobs

        finally:
            stats.duration_seconds = time.time() - source_start

    def _fetch(self, source: SourceConfig) -> FetchOutcome:
        """Fetch one feed, returning the error instead of raising it."""
        try:
            return self.fetcher.fetch(source.feed_url)
        except FetchError as e:
            return e

    def _fetch_concurrently(
        self, sources: List[SourceConfig], workers: int
    ) -> Dict[str, FetchOutcome]:
        """
        Fetch all sources on a bounded thread pool.

        Every fetch is independent. Results are awaited with a deadline sized
        for the number of fetch rounds the pool needs; a fetch still running
        at the deadline is abandoned and recorded as a timeout for that
        source alone.

        Returns:
            Mapping of source name to content or FetchError
        """
        timeout = self.fetcher.timeout
        rounds = math.ceil(len(sources) / workers)
        deadline = time.monotonic() + rounds * (timeout + FETCH_WAIT_GRACE_SECONDS)

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="feed-fetch")
        futures: Dict[str, Future] = {}
        try:
            for source in sources:
                # Each worker runs in a copy of the caller's log context
                ctx = copy_context()
                futures[source.name] = executor.submit(ctx.run, self._fetch_in_context, source)

            outcomes: Dict[str, FetchOutcome] = {}
            for source in sources:
                future = futures[source.name]
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    outcomes[source.name] = future.result(timeout=remaining)
                except FutureTimeoutError:
                    future.cancel()
                    logger.warning(
                        f"Abandoning fetch of {source.name} after waiting for the deadline",
                        extra={"event": "feed.fetch.abandoned", "source_name": source.name},
                    )
                    outcomes[source.name] = FetchTimeoutError(
                        f"Fetch of {source.feed_url} did not finish in time",
                        url=source.feed_url,
                        timeout=timeout,
                    )
            return outcomes
        finally:
            # Don't wait for abandoned workers; their own timeouts end them
            executor.shutdown(wait=False, cancel_futures=True)

    def _fetch_in_context(self, source: SourceConfig) -> FetchOutcome:
        with log_context(source_name=source.name):
            return self._fetch(source)


class ReapRunner:
    """
    Runs the expiry reaper against the store as a standalone operation.

    Reaping is scheduled independently of ingestion (typically daily).
    """

    def __init__(self, store: JobStore, reaper: Optional[ExpiryReaper] = None):
        self.store = store
        self.reaper = reaper or ExpiryReaper()
        self._lock = threading.Lock()

    def run_once(self, now: Optional[datetime] = None) -> ReapResult:
        """
        Load the store, remove expired jobs, and save the remainder.

        Args:
            now: Reference time (defaults to utc_now())

        Returns:
            ReapResult with counts; an empty result if a run is in progress

        Raises:
            StoreWriteError: If the purged collection cannot be persisted
        """
        run_id = uuid4().hex

        if not self._lock.acquire(blocking=False):
            with log_context(run_id=run_id):
                logger.warning(
                    "Reap run skipped: previous run still in progress",
                    extra={"event": "reaper.run.skipped", "reason": "lock_held"},
                )
            return ReapResult()

        try:
            with log_context(run_id=run_id, run_type="reap"):
                logger.info(
                    "Reap run started",
                    extra={"event": "reaper.run.started", "path": str(self.store.path)},
                )
                return self.reaper.reap_store(self.store, now)
        finally:
            self._lock.release()
