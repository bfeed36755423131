"""Data models for pipeline execution tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class SourceRunStats:
    """
    Statistics for a single source within an ingestion run.

    Attributes:
        source_name: Name of the source
        fetched_bytes: Size of the downloaded feed document
        parsed_count: Items found in the feed
        normalized_count: Jobs produced from those items
        duration_seconds: Time spent parsing and normalizing (fetch time included
            when fetching sequentially)
        had_errors: Whether the source failed
        error_type: Failure category (network, timeout, status_code, parse)
        error_message: Error message if the source failed
    """

    source_name: str
    fetched_bytes: int = 0
    parsed_count: int = 0
    normalized_count: int = 0
    duration_seconds: float = 0.0
    had_errors: bool = False
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def record_error(self, error_type: str, message: str) -> None:
        """Mark the source as failed."""
        self.had_errors = True
        self.error_type = error_type
        self.error_message = message


@dataclass
class PipelineRunResult:
    """
    Aggregate results from an ingestion run.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        total_duration_seconds: Total time for the entire run
        total_parsed: Items parsed across all sources
        total_normalized: Jobs normalized across all sources
        existing_count: Unique jobs in the store before the merge
        added_count: New jobs added to the store
        duplicate_count: Normalized jobs already present in the store
        stored_count: Jobs in the store after the run
        failed_sources: Number of sources that failed
        source_stats: Per-source execution statistics
        had_errors: Whether any source failed
        skipped: Whether the run was skipped (previous run still in progress)
    """

    run_started_at: datetime
    run_finished_at: datetime
    total_duration_seconds: float = 0.0
    total_parsed: int = 0
    total_normalized: int = 0
    existing_count: int = 0
    added_count: int = 0
    duplicate_count: int = 0
    stored_count: int = 0
    failed_sources: int = 0
    source_stats: List[SourceRunStats] = field(default_factory=list)
    had_errors: bool = False
    skipped: bool = False

    def __post_init__(self):
        """Aggregate per-source statistics and compute the duration."""
        if self.source_stats:
            self.total_parsed = sum(s.parsed_count for s in self.source_stats)
            self.total_normalized = sum(s.normalized_count for s in self.source_stats)
            self.failed_sources = sum(1 for s in self.source_stats if s.had_errors)
            self.had_errors = self.failed_sources > 0

        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()
