"""
Input validation utilities.
"""

import re
from typing import Any, Optional


def validate_index_pattern(pattern: str) -> None:
    """
    Validate an Elasticsearch index name or pattern.

    Comma-separated lists of patterns are accepted.

    Args:
        pattern: Index pattern to validate

    Raises:
        ValueError: If pattern is invalid
    """
    if not pattern or not isinstance(pattern, str):
        raise ValueError("Index pattern cannot be empty")

    for part in pattern.split(","):
        part = part.strip()
        if not part:
            raise ValueError(f"Empty index in pattern: {pattern!r}")
        if part.startswith("_"):
            raise ValueError("Index pattern cannot start with underscore")

        invalid_chars = re.findall(r'[^a-zA-Z0-9\-_.*]', part)
        if invalid_chars:
            raise ValueError(f"Invalid characters in index pattern: {invalid_chars}")


def validate_timeout(timeout: Optional[Any]) -> Optional[float]:
    """
    Validate a request timeout in seconds.

    Args:
        timeout: Timeout in seconds, or None for the configured default

    Returns:
        Timeout as float, or None

    Raises:
        ValueError: If timeout is not a positive number
    """
    if timeout is None:
        return None
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"Timeout must be a positive number of seconds, got {timeout!r}")
    return float(timeout)
