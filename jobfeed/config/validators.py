"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration

# TTLs under a day mean most jobs vanish before the next daily reap
SHORT_TTL_SECONDS = 86400


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    sources = config_dict.get("sources", [])
    if isinstance(sources, list):
        for source in sources:
            if not isinstance(source, dict):
                continue
            name = source.get("name", "Unknown")

            if not source.get("enabled", True):
                warning_messages.append(f"Source '{name}' is disabled and will be skipped")

            ttl = source.get("ttl")
            if isinstance(ttl, str):
                try:
                    if parse_duration(ttl) < SHORT_TTL_SECONDS:
                        warning_messages.append(
                            f"Source '{name}' has a short ttl ({ttl}); its jobs expire within a day"
                        )
                except DurationParseError:
                    # Reported by schema validation
                    pass

    advanced = config_dict.get("advanced", {})
    if isinstance(advanced, dict):
        max_workers = advanced.get("max_workers", 1)
        if isinstance(max_workers, int) and max_workers > 8:
            warning_messages.append(
                f"Large max_workers ({max_workers}) opens many connections at once"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
