"""
Search execution against Elasticsearch.

QueryExecutor turns a QuerySpec into exactly one search round trip and a
typed SearchResult. It holds no mutable state beyond the injected client,
so a single instance can be shared between threads. It never retries.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from elasticsearch import Elasticsearch

from elastic_query.config.environments import (
    get_default_timeout,
    get_elasticsearch_config,
    get_max_page_size,
)
from elastic_query.errors import BackendRejected, MalformedResponse
from elastic_query.query_types.clauses import Node
from elastic_query.query_types.results import SearchResult
from elastic_query.query_types.spec import QuerySpec, validate_spec
from elastic_query.utils.connection import BACKEND_ERRORS, backend_error, get_elasticsearch_client
from elastic_query.utils.query_builder import build_search_body, to_query_dsl
from elastic_query.utils.response_parser import parse_search_response, unwrap_response
from elastic_query.utils.validation import validate_index_pattern, validate_timeout


logger = logging.getLogger(__name__)


class QueryExecutor:
    """Executes query specs against one index (or index pattern)."""

    def __init__(
        self,
        client: Elasticsearch,
        index: str,
        default_timeout: Optional[float] = None,
        max_page_size: Optional[int] = None,
    ):
        validate_index_pattern(index)
        self.client = client
        self.index = index
        self.default_timeout = (
            validate_timeout(default_timeout) if default_timeout is not None else get_default_timeout()
        )
        self.max_page_size = max_page_size if max_page_size is not None else get_max_page_size()

    @classmethod
    def from_config(cls, index: Optional[str] = None, config: Optional[Dict[str, Any]] = None) -> "QueryExecutor":
        """
        Build an executor and its client from configuration.

        Args:
            index: Index to search (defaults to ELASTIC_INDEX)
            config: Configuration dict (read from the environment if not given)

        Returns:
            QueryExecutor
        """
        if config is None:
            config = get_elasticsearch_config()
        return cls(
            client=get_elasticsearch_client(config),
            index=index or config.get("index") or "",
            default_timeout=get_default_timeout(config),
            max_page_size=get_max_page_size(config),
        )

    def new_spec(self) -> QuerySpec:
        """Empty spec validated against this executor's page ceiling."""
        return QuerySpec(max_page_size=self.max_page_size)

    def build_request(self, spec: QuerySpec) -> Dict[str, Any]:
        """
        Validate a spec and build its search body.

        Raises:
            InvalidSpec: If the spec violates an invariant, including a page
                limit above this executor's max page size
        """
        validate_spec(spec, max_page_size=self.max_page_size)
        return build_search_body(spec)

    def _client(self, timeout: Optional[float]) -> Elasticsearch:
        timeout = validate_timeout(timeout) or self.default_timeout
        return self.client.options(request_timeout=timeout)

    def execute(self, spec: QuerySpec, timeout: Optional[float] = None) -> SearchResult:
        """
        Run one search.

        Args:
            spec: Query spec
            timeout: Request timeout in seconds (defaults to the configured one)

        Returns:
            SearchResult

        Raises:
            InvalidSpec: If the spec is invalid (no request is sent)
            BackendTimeout: If the backend does not answer in time
            BackendUnreachable: If the backend cannot be reached
            BackendRejected: If the backend answers with an error status
            MalformedResponse: If the response cannot be parsed
        """
        body = self.build_request(spec)
        logger.debug("Searching %s with body %s", self.index, body)

        try:
            response = self._client(timeout).search(index=self.index, body=body)
        except BACKEND_ERRORS as e:
            logger.warning("Search on %s failed: %s", self.index, e)
            raise backend_error(e, "Search") from e

        result = parse_search_response(response, spec)
        logger.info(
            "Search on %s returned %d of %d document(s)",
            self.index, len(result.documents), result.total_matched,
        )
        return result

    def execute_many(self, specs: Sequence[QuerySpec], timeout: Optional[float] = None) -> List[SearchResult]:
        """
        Run several searches in one multi-search round trip.

        Results are returned in the order of specs. A failed sub-search raises
        BackendRejected for the whole call.
        """
        body: List[Dict[str, Any]] = []
        for spec in specs:
            body.append({"index": self.index})
            body.append(self.build_request(spec))
        if not body:
            return []

        try:
            response = self._client(timeout).msearch(body=body)
        except BACKEND_ERRORS as e:
            logger.warning("Multi-search on %s failed: %s", self.index, e)
            raise backend_error(e, "Multi-search") from e

        responses = unwrap_response(response).get("responses")
        if not isinstance(responses, list) or len(responses) != len(specs):
            raise MalformedResponse("Expected one response per search", path="$.responses")

        results = []
        for position, (spec, item) in enumerate(zip(specs, responses)):
            if isinstance(item, dict) and "error" in item:
                raise BackendRejected(
                    f"Search {position} rejected by backend: {item['error']}",
                    status=item.get("status"),
                )
            results.append(parse_search_response(item, spec))
        return results

    def count(self, node: Optional[Node] = None, timeout: Optional[float] = None) -> int:
        """
        Count the documents matching a clause tree.

        Args:
            node: Clause, group, or None for all documents
            timeout: Request timeout in seconds

        Returns:
            Number of matching documents
        """
        body = {"query": to_query_dsl(node)}
        try:
            response = self._client(timeout).count(index=self.index, body=body)
        except BACKEND_ERRORS as e:
            logger.warning("Count on %s failed: %s", self.index, e)
            raise backend_error(e, "Count") from e

        count = unwrap_response(response).get("count")
        if not isinstance(count, int) or isinstance(count, bool):
            raise MalformedResponse(f"Invalid count {count!r}", path="$.count")
        return count


def search_documents(
    index: str,
    spec: QuerySpec,
    timeout: Optional[float] = None,
    client: Optional[Elasticsearch] = None,
) -> SearchResult:
    """
    Run one search, building a client from configuration if none is given.

    Args:
        index: Index pattern to search
        spec: Query spec
        timeout: Request timeout in seconds
        client: Elasticsearch client

    Returns:
        SearchResult
    """
    if client is None:
        return QueryExecutor.from_config(index).execute(spec, timeout=timeout)
    return QueryExecutor(client, index).execute(spec, timeout=timeout)
