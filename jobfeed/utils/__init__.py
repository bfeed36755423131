"""Utility functions for hashing, time handling, and text cleanup."""

from .hashing import compute_job_id, hash_string
from .text import clean_html, collapse_whitespace, slugify, truncate_text
from .timestamps import (
    ensure_utc,
    format_timestamp,
    parse_iso_datetime,
    parse_timestamp,
    utc_now,
)

__all__ = [
    # Hashing
    "compute_job_id",
    "hash_string",
    # Timestamps
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "parse_timestamp",
    "format_timestamp",
    # Text
    "clean_html",
    "collapse_whitespace",
    "slugify",
    "truncate_text",
]
