"""Merging freshly normalized jobs into the stored collection."""

from dataclasses import dataclass, field
from itertools import chain
from typing import Iterable, List

from jobfeed.domain.models import Job, PassthroughRecord, StoredEntry
from jobfeed.logging import get_logger

logger = get_logger(__name__, component="dedup")


def merge(existing: Iterable[StoredEntry], incoming: Iterable[Job]) -> List[StoredEntry]:
    """Merge incoming jobs into existing ones, keeping each id once.

    The first occurrence of an id across ``existing + incoming`` wins, so
    stored jobs are never replaced by re-fetched copies and duplicates within
    incoming collapse to their first appearance. Order is preserved: the
    stored jobs come first, followed by the new ones in first-seen order.

    Stored entries that are not valid jobs are always kept; an id they carry
    still blocks later jobs with the same id.

    Args:
        existing: Jobs already in the store
        incoming: Jobs produced by this run

    Returns:
        Merged list in which every valid job id appears once
    """
    seen = set()
    merged = []
    for job in chain(existing, incoming):
        if isinstance(job, PassthroughRecord):
            if job.id is not None:
                seen.add(job.id)
            merged.append(job)
            continue
        if job.id in seen:
            continue
        seen.add(job.id)
        merged.append(job)
    return merged


@dataclass
class MergeResult:
    """Outcome of a merge.

    Attributes:
        jobs: Merged collection
        existing_count: Unique jobs carried over from the store
        added: Incoming jobs that were new
        duplicates: Incoming jobs dropped because their id was already present
    """

    jobs: List[StoredEntry] = field(default_factory=list)
    existing_count: int = 0
    added: int = 0
    duplicates: int = 0


class Deduplicator:
    """Merges incoming jobs into the stored collection and reports counts."""

    def merge(self, existing: Iterable[StoredEntry], incoming: Iterable[Job]) -> MergeResult:
        """Merge and count.

        Args:
            existing: Jobs already in the store
            incoming: Jobs produced by this run

        Returns:
            MergeResult with the merged list and tallies
        """
        existing = list(existing)
        incoming = list(incoming)

        carried = merge(existing, [])
        merged = merge(carried, incoming)

        result = MergeResult(
            jobs=merged,
            existing_count=len(carried),
            added=len(merged) - len(carried),
            duplicates=len(incoming) - (len(merged) - len(carried)),
        )

        if len(carried) < len(existing):
            logger.warning(
                "Stored collection contained duplicate ids; keeping first occurrences",
                extra={"event": "dedup.existing_duplicates", "dropped": len(existing) - len(carried)},
            )

        logger.info(
            f"Merged {result.added} new jobs ({result.duplicates} already known)",
            extra={
                "event": "dedup.merge.completed",
                "existing": result.existing_count,
                "added": result.added,
                "duplicates": result.duplicates,
                "total": len(merged),
            },
        )
        return result
