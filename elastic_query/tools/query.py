"""
Raw query operations for Elasticsearch.
"""

import logging
from typing import Any, Dict, Optional

from elasticsearch import Elasticsearch

from elastic_query.utils.connection import BACKEND_ERRORS, backend_error
from elastic_query.utils.response_parser import unwrap_response
from elastic_query.utils.validation import validate_index_pattern, validate_timeout


logger = logging.getLogger(__name__)


def query_raw(
    client: Elasticsearch,
    body: Dict[str, Any],
    index: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Execute a raw search body with full control.

    This is the most primitive operation: the body goes to the backend as
    given and the response comes back unparsed.

    Args:
        client: Elasticsearch client
        body: Complete search body
        index: Optional index pattern
        timeout: Request timeout in seconds

    Returns:
        Raw response body

    Raises:
        ValueError: If index or timeout is invalid
        BackendUnreachable: If the backend cannot be reached
        BackendRejected: If the backend rejects the query
    """
    if not isinstance(body, dict):
        raise ValueError("Query body must be a dict")

    kwargs: Dict[str, Any] = {"body": body}
    if index:
        validate_index_pattern(index)
        kwargs["index"] = index

    timeout = validate_timeout(timeout)
    if timeout is not None:
        client = client.options(request_timeout=timeout)

    try:
        response = client.search(**kwargs)
    except BACKEND_ERRORS as e:
        logger.warning("Raw query failed: %s", e)
        raise backend_error(e, "Raw query") from e

    return dict(unwrap_response(response))
