"""Normalization of parsed feed items into canonical Job records."""

from .service import DEFAULT_DESCRIPTION, JobNormalizer, fallback_url, is_absolute_http_url

__all__ = [
    "JobNormalizer",
    "DEFAULT_DESCRIPTION",
    "fallback_url",
    "is_absolute_http_url",
]
