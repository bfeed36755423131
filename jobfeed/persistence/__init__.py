"""Persistence layer: the JSON jobs file.

Public API:
    - JobStore: load() / save(jobs) with atomic replace
    - StoreError, StoreReadError, StoreWriteError

Example usage:
    >>> from jobfeed.persistence import JobStore
    >>> store = JobStore("data/jobs.json")
    >>> jobs = store.load()
    >>> store.save(jobs)
"""

from .exceptions import StoreError, StoreReadError, StoreWriteError
from .store import JobStore

__all__ = [
    "JobStore",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
]
