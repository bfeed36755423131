"""Hashing utilities for generating deterministic job identifiers.

Job ids must be a pure function of stable item attributes so that re-running
ingestion against an unchanged feed recomputes the same ids.
"""

import hashlib


def compute_job_id(source_name: str, stable_key: str) -> str:
    """Compute a deterministic job id from the source name and a stable key.

    The id is a SHA256 hash of ``source_name:stable_key`` where the stable key
    is the item's URL when it has a usable one, otherwise its title.

    Args:
        source_name: Name of the originating feed
        stable_key: Item URL or title

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)

    Example:
        >>> compute_job_id("RemoteOK", "https://remoteok.io/jobs/1") == compute_job_id(
        ...     "RemoteOK", "https://remoteok.io/jobs/1"
        ... )
        True
    """
    # Source names compare case-insensitively; the stable key does not
    source_name = source_name.strip().lower()
    stable_key = stable_key.strip()

    composite_key = f"{source_name}:{stable_key}"
    return hash_string(composite_key)


def hash_string(value: str) -> str:
    """Compute SHA256 hash of a string value.

    Args:
        value: String to hash

    Returns:
        Hexadecimal string representation of SHA256 hash (64 characters)
    """
    hash_obj = hashlib.sha256(value.encode("utf-8"))
    return hash_obj.hexdigest()
