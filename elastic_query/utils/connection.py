"""
Elasticsearch client construction.

The client is built from configuration and handed to the executor
explicitly; nothing here caches a process-wide instance.
"""

import logging
from typing import Any, Dict, Optional

from elasticsearch import (
    ApiError,
    ConnectionError as ESConnectionError,
    ConnectionTimeout,
    Elasticsearch,
    SerializationError,
    TransportError,
)

from elastic_query.config.environments import get_elasticsearch_config
from elastic_query.errors import (
    BackendRejected,
    BackendTimeout,
    BackendUnreachable,
    MalformedResponse,
    QueryError,
)


logger = logging.getLogger(__name__)

# Exceptions the client raises for transport and HTTP failures
BACKEND_ERRORS = (ApiError, ESConnectionError, ConnectionTimeout, TransportError)


def get_elasticsearch_client(config: Optional[Dict[str, Any]] = None) -> Elasticsearch:
    """
    Create an Elasticsearch client.

    Args:
        config: Configuration dict (read from the environment if not given)

    Returns:
        Configured Elasticsearch client
    """
    if config is None:
        config = get_elasticsearch_config()

    params = {
        "hosts": list(config["hosts"]),
        "request_timeout": config["timeout_ms"] / 1000.0,
        "verify_certs": config.get("verify_certs", True),
    }

    if config.get("ca_certs"):
        params["ca_certs"] = config["ca_certs"]

    if config.get("api_key"):
        params["api_key"] = config["api_key"]
    elif config.get("username") and config.get("password"):
        params["basic_auth"] = (config["username"], config["password"])

    logger.debug("Creating Elasticsearch client for %s", params["hosts"])
    return Elasticsearch(**params)


def check_connection(client: Elasticsearch, index: str = "*") -> bool:
    """
    Test connectivity using a low-privilege operation.

    ping() requires cluster:monitor privileges, so a zero-size search is
    used instead.

    Args:
        client: Elasticsearch client
        index: Index pattern to probe

    Returns:
        True if the backend answered the probe
    """
    try:
        response = client.search(
            index=index,
            size=0,
            query={"match_all": {}},
            timeout="5s",
        )
        return "hits" in response
    except Exception as e:
        logger.warning("Elasticsearch connection check failed: %s", e)
        return False


def backend_error(error: Exception, action: str) -> QueryError:
    """
    Map a client exception to the query error taxonomy.

    Args:
        error: Exception raised by the Elasticsearch client
        action: Operation name for the message (e.g., "Search")

    Returns:
        BackendTimeout, BackendUnreachable, BackendRejected or
        MalformedResponse
    """
    if isinstance(error, ConnectionTimeout):
        return BackendTimeout(f"{action} timed out: {error}")
    if isinstance(error, SerializationError):
        return MalformedResponse(f"{action} response could not be decoded: {error}")
    if isinstance(error, (ESConnectionError, TransportError)):
        return BackendUnreachable(f"{action} failed, backend unreachable: {error}")
    if isinstance(error, ApiError):
        return BackendRejected(f"{action} rejected by backend: {error}", status=error.status_code)
    return BackendUnreachable(f"{action} failed: {error}")
