"""Scheduler service for periodic ingestion and reaping."""

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from jobfeed.logging import get_logger

logger = get_logger(__name__, component="scheduler")

INGEST_JOB_ID = "feed-ingest"
REAP_JOB_ID = "expiry-reap"


class SchedulerService:
    """
    Wraps APScheduler to trigger ingestion and reaping at their own intervals.

    Uses BackgroundScheduler to run jobs in a separate thread while
    allowing the main thread to handle signals and coordinate shutdown.
    Both jobs run once immediately on startup.
    """

    def __init__(
        self,
        ingest_callable: Callable[[], object],
        ingest_interval_seconds: int,
        reap_callable: Callable[[], object],
        reap_interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the scheduler service.

        Args:
            ingest_callable: Called on each ingestion tick (e.g. pipeline.run_once)
            ingest_interval_seconds: Seconds between ingestion runs
            reap_callable: Called on each reap tick (e.g. reap_runner.run_once)
            reap_interval_seconds: Seconds between reap runs
            shutdown_event: Optional event to set on shutdown for coordination
        """
        self.ingest_callable = ingest_callable
        self.ingest_interval_seconds = ingest_interval_seconds
        self.reap_callable = reap_callable
        self.reap_interval_seconds = reap_interval_seconds
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,  # Prevent overlapping runs of the same job
                "coalesce": True,  # Collapse missed runs into one
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """
        Register both jobs and start the scheduler.

        The first run of each job executes immediately after startup;
        subsequent runs follow the configured intervals.
        """
        next_run = datetime.now(timezone.utc)
        jobs = [
            (INGEST_JOB_ID, "Feed ingestion", self._run_ingest, self.ingest_interval_seconds),
            (REAP_JOB_ID, "Expiry reaping", self._run_reap, self.reap_interval_seconds),
        ]

        for job_id, name, func, interval in jobs:
            self.scheduler.add_job(
                func=func,
                trigger=IntervalTrigger(seconds=interval, timezone=timezone.utc),
                id=job_id,
                name=name,
                replace_existing=True,
                next_run_time=next_run,
                misfire_grace_time=interval,
            )

        self.scheduler.start()

        logger.info(
            f"Scheduler started: ingest every {self.ingest_interval_seconds}s, "
            f"reap every {self.reap_interval_seconds}s",
            extra={
                "event": "scheduler.started",
                "ingest_interval_seconds": self.ingest_interval_seconds,
                "reap_interval_seconds": self.reap_interval_seconds,
                "next_run_time": next_run.isoformat(),
            },
        )

    def _run_ingest(self) -> None:
        self._run_job(INGEST_JOB_ID, self.ingest_callable)

    def _run_reap(self) -> None:
        self._run_job(REAP_JOB_ID, self.reap_callable)

    @staticmethod
    def _run_job(job_id: str, func: Callable[[], object]) -> None:
        """Run a scheduled job, logging failures so the next tick still happens."""
        try:
            func()
        except Exception as e:
            logger.error(
                f"Scheduled job {job_id} failed: {e}",
                extra={
                    "event": "scheduler.job.failed",
                    "job_id": job_id,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
                exc_info=True,
            )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shutdown the scheduler gracefully.

        Args:
            wait: If True, wait for running jobs to complete before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self, job: str = "ingest") -> None:
        """
        Run a job synchronously in the current thread.

        Args:
            job: "ingest" or "reap"

        Raises:
            ValueError: If job is not a known job name
        """
        callables: Dict[str, Callable[[], object]] = {
            "ingest": self.ingest_callable,
            "reap": self.reap_callable,
        }
        if job not in callables:
            raise ValueError(f"Unknown job: {job}. Must be 'ingest' or 'reap'")

        logger.info(
            f"Triggering immediate {job} run",
            extra={"event": "scheduler.trigger_now", "job": job},
        )
        callables[job]()

    def is_running(self) -> bool:
        """Check if the scheduler is currently running."""
        return self.scheduler.running

    def get_next_run_time(self, job_id: str = INGEST_JOB_ID) -> Optional[datetime]:
        """
        Get the next scheduled run time of a job.

        Returns:
            Next run time as a datetime, or None if not scheduled
        """
        job = self.scheduler.get_job(job_id)
        return job.next_run_time if job else None
