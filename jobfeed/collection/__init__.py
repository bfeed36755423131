"""Operations on the whole job collection: merging and expiry."""

from .dedup import Deduplicator, MergeResult, merge
from .expiry import ExpiryReaper, ReapResult, is_live, reap

__all__ = [
    "merge",
    "Deduplicator",
    "MergeResult",
    "reap",
    "is_live",
    "ExpiryReaper",
    "ReapResult",
]
