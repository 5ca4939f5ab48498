"""
Environment configuration management.
"""

import os
from typing import Any, Dict, List, Optional


DEFAULT_URL = "http://localhost:9200"
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_MAX_PAGE_SIZE = 10000


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    # ELASTIC_* wins over the longer ELASTICSEARCH_* spelling
    return os.getenv(f"ELASTIC_{name}", os.getenv(f"ELASTICSEARCH_{name}", default))


def _parse_hosts(value: Optional[str]) -> List[str]:
    hosts = [host.strip() for host in (value or "").split(",") if host.strip()]
    return hosts or [DEFAULT_URL]


def _parse_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"ELASTIC_{name} must be an integer, got {raw!r}") from e


def get_elasticsearch_config(environment: Optional[str] = None) -> Dict[str, Any]:
    """
    Get Elasticsearch configuration from environment variables.

    Variables are read on every call so tests and long-running processes
    pick up changes.

    Args:
        environment: Ignored (single environment)

    Returns:
        Elasticsearch configuration dictionary
    """
    return {
        "hosts": _parse_hosts(_getenv("URL")),
        "username": _getenv("USERNAME"),
        "password": _getenv("PASSWORD"),
        "api_key": _getenv("API_KEY"),
        "ca_certs": _getenv("CA_CERTS"),
        "verify_certs": (_getenv("VERIFY_CERTS", "true") or "true").lower() != "false",
        "timeout_ms": _parse_int("TIMEOUT", DEFAULT_TIMEOUT_MS),
        "max_page_size": _parse_int("MAX_PAGE_SIZE", DEFAULT_MAX_PAGE_SIZE),
        "index": _getenv("INDEX"),
    }


def get_default_timeout(config: Optional[Dict[str, Any]] = None) -> float:
    """Default request timeout in seconds."""
    config = config or get_elasticsearch_config()
    return config["timeout_ms"] / 1000.0


def get_max_page_size(config: Optional[Dict[str, Any]] = None) -> int:
    """Largest page the backend will serve."""
    config = config or get_elasticsearch_config()
    return config["max_page_size"]
