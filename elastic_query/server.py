"""
FastMCP server exposing elastic_query operations.

Tools:
- health: Check Elasticsearch connectivity and configuration
- search_documents: Validated search built from Query DSL parts
- query_elastic_raw: Raw Elasticsearch search
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP

from elastic_query.config import get_elasticsearch_config
from elastic_query.tools import QueryExecutor, query_raw
from elastic_query.utils import check_connection, get_elasticsearch_client, spec_from_dsl


logger = logging.getLogger(__name__)

mcp = FastMCP("elastic-query")


# ========== HEALTH TOOL ==========

@mcp.tool()
def health() -> Dict[str, Any]:
    """
    Check Elasticsearch connectivity and configuration.

    Returns:
        Connection status, configured hosts and limits
    """
    config = get_elasticsearch_config()
    connected = check_connection(get_elasticsearch_client(config))

    return {
        "overall_status": "healthy" if connected else "degraded",
        "elasticsearch": {
            "connected": connected,
            "hosts": config["hosts"],
            "default_index": config["index"],
            "timeout_ms": config["timeout_ms"],
            "max_page_size": config["max_page_size"],
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ========== SEARCH TOOLS ==========

@mcp.tool()
def search_documents(
    index: Optional[str] = None,
    query: Optional[Dict[str, Any]] = None,
    sort: Optional[List[Any]] = None,
    from_offset: int = 0,
    size: int = 10,
    fields: Optional[List[str]] = None,
    aggregations: Optional[Dict[str, str]] = None,
    timeout_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Search documents with a validated query.

    The query is checked before anything is sent: only term, terms, match,
    range and bool queries are accepted.

    Args:
        index: Index pattern (defaults to ELASTIC_INDEX)
        query: Query DSL query, e.g. {"bool": {"must": [{"term": {"action": "updated"}}]}}
        sort: Sort criteria, e.g. [{"timestamp": "desc"}]
        from_offset: Pagination offset
        size: Number of results (up to the configured max page size)
        fields: Specific fields to return
        aggregations: Terms aggregations as {name: field}
        timeout_seconds: Request timeout

    Returns:
        Total hit count, documents and aggregation buckets
    """
    executor = QueryExecutor.from_config(index)
    spec = spec_from_dsl(
        query=query,
        sort=sort,
        from_=from_offset,
        size=size,
        fields=fields,
        aggregations=aggregations,
        max_page_size=executor.max_page_size,
    )
    return executor.execute(spec, timeout=timeout_seconds).to_dict()


@mcp.tool()
def query_elastic_raw(
    body: Dict[str, Any],
    index: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Low-level Elasticsearch search.

    Sends the body as given, for queries the validated search cannot
    express.

    Args:
        body: Complete search body
        index: Index pattern (defaults to ELASTIC_INDEX)

    Returns:
        Raw Elasticsearch response
    """
    config = get_elasticsearch_config()
    return query_raw(get_elasticsearch_client(config), body, index=index or config["index"])


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting elastic-query MCP server")
    mcp.run()


if __name__ == "__main__":
    main()
