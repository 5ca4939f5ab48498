"""
Response parsing utilities for Elasticsearch.

Every accessor checks the shape it reads and raises MalformedResponse with
the offending path instead of defaulting missing sections to empty values.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from elastic_query.errors import BackendTimeout, MalformedResponse
from elastic_query.query_types.results import Bucket, Document, SearchResult
from elastic_query.query_types.spec import QuerySpec


logger = logging.getLogger(__name__)


def unwrap_response(response: Any) -> Mapping[str, Any]:
    """
    Get the plain body of a client response.

    The client returns ObjectApiResponse wrappers; fakes in tests return
    plain dicts.
    """
    body = response.body if hasattr(response, "body") and not isinstance(response, Mapping) else response
    if not isinstance(body, Mapping):
        raise MalformedResponse(f"Expected a JSON object, got {type(body).__name__}")
    return body


def _require(container: Mapping[str, Any], key: str, kind: type, path: str) -> Any:
    if key not in container:
        raise MalformedResponse(f"Missing '{key}'", path=path)
    value = container[key]
    if not isinstance(value, kind):
        raise MalformedResponse(f"'{key}' has unexpected type {type(value).__name__}", path=path)
    return value


def parse_hits(response: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    Extract raw hits from a search response.

    Args:
        response: Elasticsearch response body

    Returns:
        List of hit dicts
    """
    hits = _require(response, "hits", Mapping, "$")
    return list(_require(hits, "hits", list, "$.hits"))


def parse_total(response: Mapping[str, Any]) -> Tuple[int, str]:
    """
    Extract the total hit count and its relation.

    Handles both the object form ({"value": n, "relation": "eq"}) and the
    legacy integer form.

    Returns:
        (total, relation) tuple
    """
    hits = _require(response, "hits", Mapping, "$")
    if "total" not in hits:
        raise MalformedResponse("Missing 'total'", path="$.hits")
    total = hits["total"]

    if isinstance(total, Mapping):
        value = total.get("value")
        relation = total.get("relation", "eq")
    else:
        value, relation = total, "eq"

    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise MalformedResponse(f"Invalid total {total!r}", path="$.hits.total")
    return value, relation


def parse_document(hit: Any, position: int) -> Document:
    """Convert one raw hit into a Document."""
    path = f"$.hits.hits[{position}]"
    if not isinstance(hit, Mapping):
        raise MalformedResponse("Hit is not an object", path=path)

    source = hit.get("_source", {})
    if not isinstance(source, Mapping):
        raise MalformedResponse("'_source' is not an object", path=path)

    score = hit.get("_score")
    if score is not None and not isinstance(score, (int, float)):
        raise MalformedResponse(f"Invalid _score {score!r}", path=path)

    sort = hit.get("sort", [])
    if not isinstance(sort, list):
        raise MalformedResponse(f"Invalid sort values {sort!r}", path=path)

    return Document(
        id=hit.get("_id"),
        index=hit.get("_index"),
        source=dict(source),
        score=score,
        sort=tuple(sort),
    )


def parse_aggregations(response: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Extract aggregations from response.

    Args:
        response: Elasticsearch response body

    Returns:
        Aggregations dict (empty when none were returned)
    """
    aggregations = response.get("aggregations", {})
    if not isinstance(aggregations, Mapping):
        raise MalformedResponse("'aggregations' is not an object", path="$")
    return dict(aggregations)


def parse_buckets(aggregation: Any, name: str) -> Tuple[Bucket, ...]:
    """
    Convert one terms aggregation into buckets, keeping the backend's order.

    Args:
        aggregation: Aggregation result
        name: Aggregation name (for error paths)

    Returns:
        Tuple of buckets
    """
    path = f"$.aggregations.{name}"
    if not isinstance(aggregation, Mapping):
        raise MalformedResponse("Aggregation is not an object", path=path)

    buckets = []
    for position, raw in enumerate(_require(aggregation, "buckets", list, path)):
        bucket_path = f"{path}.buckets[{position}]"
        if not isinstance(raw, Mapping) or "key" not in raw:
            raise MalformedResponse("Bucket has no key", path=bucket_path)
        count = raw.get("doc_count")
        if not isinstance(count, int) or isinstance(count, bool):
            raise MalformedResponse(f"Invalid doc_count {count!r}", path=bucket_path)
        buckets.append(Bucket(key=raw["key"], count=count))
    return tuple(buckets)


def parse_search_response(response: Any, spec: Optional[QuerySpec] = None) -> SearchResult:
    """
    Convert a search response into a SearchResult.

    Args:
        response: Client response or plain body
        spec: Spec the request was built from; its aggregations must all be
            present in the response

    Returns:
        SearchResult

    Raises:
        BackendTimeout: If the backend reports timed_out (partial results)
        MalformedResponse: If the response does not have the expected shape
    """
    body = unwrap_response(response)

    if body.get("timed_out") is True:
        raise BackendTimeout("Search timed out on the backend; partial results discarded")

    shards = body.get("_shards")
    if isinstance(shards, Mapping) and shards.get("failed"):
        logger.warning("Search reported %s failed shard(s)", shards.get("failed"))

    documents = tuple(parse_document(hit, position) for position, hit in enumerate(parse_hits(body)))
    total, relation = parse_total(body)

    buckets: Dict[str, Tuple[Bucket, ...]] = {}
    if spec is not None and spec.aggregations:
        aggregations = parse_aggregations(body)
        for aggregation in spec.aggregations:
            if aggregation.name not in aggregations:
                raise MalformedResponse(f"Missing aggregation '{aggregation.name}'", path="$.aggregations")
            buckets[aggregation.name] = parse_buckets(aggregations[aggregation.name], aggregation.name)

    took = body.get("took", 0)
    return SearchResult(
        documents=documents,
        total_matched=total,
        buckets=buckets,
        total_relation=relation,
        took=took if isinstance(took, int) else 0,
    )
