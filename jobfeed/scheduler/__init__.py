"""Scheduling of periodic ingestion and reaping runs."""

from .service import INGEST_JOB_ID, REAP_JOB_ID, SchedulerService

__all__ = [
    "INGEST_JOB_ID",
    "REAP_JOB_ID",
    "SchedulerService",
]
