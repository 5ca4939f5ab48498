"""
Query building utilities for Elasticsearch.

Translates clause trees and query specs into Query DSL request bodies, and
reads Query DSL back into clause trees.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from elastic_query.errors import InvalidSpec
from elastic_query.query_types.clauses import (
    Clause,
    ClauseGroup,
    ClauseKind,
    Node,
    RangeBounds,
    term,
    terms,
    match,
    range_,
)
from elastic_query.query_types.spec import (
    AggregationKind,
    AggregationSpec,
    BucketOrder,
    QuerySpec,
    SortDirective,
)


MATCH_ALL = {"match_all": {}}

_BUCKET_ORDERS = {
    BucketOrder.COUNT_ASC: {"_count": "asc"},
    BucketOrder.KEY_ASC: {"_key": "asc"},
    BucketOrder.KEY_DESC: {"_key": "desc"},
}


def serialize_value(value: Any) -> Any:
    """Convert a clause operand to its JSON representation."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def build_term_query(field: str, value: Any) -> Dict[str, Any]:
    """
    Build a term query for exact matching.

    Args:
        field: Field name
        value: Value to match

    Returns:
        Term query dict
    """
    return {"term": {field: serialize_value(value)}}


def build_terms_query(field: str, values: List[Any]) -> Dict[str, Any]:
    """Build a terms query matching any of the values."""
    return {"terms": {field: [serialize_value(value) for value in values]}}


def build_match_query(
    field: str,
    value: str,
    operator: str = "or",
    fuzziness: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a match query for text search.

    Args:
        field: Field name
        value: Text to search
        operator: "or" or "and"
        fuzziness: Fuzzy matching (e.g., "AUTO", "1", "2")

    Returns:
        Match query dict
    """
    query = {"query": value, "operator": operator}
    if fuzziness:
        query["fuzziness"] = fuzziness

    return {"match": {field: query}}


def build_range_query(field: str, bounds: RangeBounds) -> Dict[str, Any]:
    """Build a range query from bounds."""
    return {"range": {field: {name: serialize_value(value) for name, value in bounds.items()}}}


def build_bool_query(
    must: Optional[List[Dict[str, Any]]] = None,
    must_not: Optional[List[Dict[str, Any]]] = None,
    should: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    """
    Build a bool query combining multiple conditions.

    When should clauses are present, minimum_should_match is pinned to 1 so
    that they keep OR semantics next to must clauses.

    Args:
        must: Queries that must match
        must_not: Queries that must not match
        should: Queries of which at least one must match

    Returns:
        Bool query dict
    """
    bool_query = {}

    if must:
        bool_query["must"] = must
    if must_not:
        bool_query["must_not"] = must_not
    if should:
        bool_query["should"] = should
        bool_query["minimum_should_match"] = 1

    return {"bool": bool_query}


def clause_to_dsl(clause: Clause) -> Dict[str, Any]:
    """Serialize one clause."""
    if clause.kind is ClauseKind.TERM:
        return build_term_query(clause.field, clause.value)
    if clause.kind is ClauseKind.TERMS:
        return build_terms_query(clause.field, list(clause.value))
    if clause.kind is ClauseKind.MATCH:
        return build_match_query(
            clause.field,
            clause.value,
            operator=clause.operator or "or",
            fuzziness=clause.fuzziness,
        )
    if clause.kind is ClauseKind.RANGE:
        return build_range_query(clause.field, clause.value)
    raise InvalidSpec(f"Unsupported clause kind {clause.kind!r}", field=clause.field)


def to_query_dsl(node: Optional[Node]) -> Dict[str, Any]:
    """
    Serialize a clause tree into a Query DSL query.

    Args:
        node: Clause, group, or None for all documents

    Returns:
        Query dict
    """
    if node is None:
        return dict(MATCH_ALL)
    if isinstance(node, Clause):
        return clause_to_dsl(node)
    if isinstance(node, ClauseGroup):
        return build_bool_query(
            must=[to_query_dsl(item) for item in node.must],
            must_not=[to_query_dsl(item) for item in node.must_not],
            should=[to_query_dsl(item) for item in node.should],
        )
    raise InvalidSpec(f"Cannot serialize filter {node!r}")


def build_sort(sort: List[SortDirective]) -> List[Dict[str, Any]]:
    """Serialize sort directives, keeping their precedence order."""
    return [{directive.field: {"order": directive.order.value}} for directive in sort]


def build_aggregations(aggregations: List[AggregationSpec]) -> Dict[str, Any]:
    """Serialize aggregation requests keyed by name."""
    aggs = {}
    for aggregation in aggregations:
        if aggregation.kind is not AggregationKind.TERMS_BUCKET:
            raise InvalidSpec(f"Unsupported aggregation kind {aggregation.kind!r}", field=aggregation.name)
        body = {"field": aggregation.field, "size": aggregation.size}
        if aggregation.order in _BUCKET_ORDERS:
            body["order"] = dict(_BUCKET_ORDERS[aggregation.order])
        aggs[aggregation.name] = {"terms": body}
    return aggs


def build_search_body(spec: QuerySpec) -> Dict[str, Any]:
    """
    Build the full search request body for a spec.

    Args:
        spec: Validated query spec

    Returns:
        Search body with query, from, size, sort, _source and aggs sections
    """
    body: Dict[str, Any] = {
        "query": to_query_dsl(spec.filter),
        "from": spec.page.offset,
        "size": spec.page.limit,
        "track_total_hits": True,
    }

    if spec.sort:
        body["sort"] = build_sort(list(spec.sort))
    if spec.projection:
        body["_source"] = sorted(spec.projection)
    if spec.aggregations:
        body["aggs"] = build_aggregations(list(spec.aggregations))

    return body


# Reading Query DSL back into clause trees


def _single_field(kind: str, payload: Any) -> tuple:
    if not isinstance(payload, Mapping) or len(payload) != 1:
        raise InvalidSpec(f"{kind} query must name exactly one field")
    return next(iter(payload.items()))


def _as_list(kind: str, value: Any) -> List[Any]:
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, list):
        return value
    raise InvalidSpec(f"bool.{kind} must be a query or a list of queries")


def _parse_bool(payload: Any) -> ClauseGroup:
    if not isinstance(payload, Mapping):
        raise InvalidSpec("bool query must be an object")

    unknown = set(payload) - {"must", "should", "must_not", "filter", "minimum_should_match"}
    if unknown:
        raise InvalidSpec(f"Unsupported bool options: {sorted(unknown)}")

    must = [_parse_node(item) for item in _as_list("must", payload.get("must", []))]
    must += [_parse_node(item) for item in _as_list("filter", payload.get("filter", []))]
    should = [_parse_node(item) for item in _as_list("should", payload.get("should", []))]
    must_not = [_parse_node(item) for item in _as_list("must_not", payload.get("must_not", []))]

    minimum = payload.get("minimum_should_match")
    if minimum is not None and str(minimum) != "1":
        raise InvalidSpec(f"Unsupported minimum_should_match {minimum!r}")
    if should and must and minimum is None:
        raise InvalidSpec("should clauses next to must/filter require minimum_should_match 1")

    return ClauseGroup(must=tuple(must), should=tuple(should), must_not=tuple(must_not))


def _parse_node(dsl: Any) -> Node:
    if not isinstance(dsl, Mapping) or len(dsl) != 1:
        raise InvalidSpec(f"Query must be an object with a single query type, got {dsl!r}")

    kind, payload = next(iter(dsl.items()))

    if kind == "bool":
        return _parse_bool(payload)

    if kind == "term":
        field, value = _single_field(kind, payload)
        if isinstance(value, Mapping):
            if "value" not in value:
                raise InvalidSpec("term query object requires 'value'", field=field)
            value = value["value"]
        return term(field, value)

    if kind == "terms":
        field, values = _single_field(kind, payload)
        if not isinstance(values, list):
            raise InvalidSpec("terms query requires a list of values", field=field)
        return terms(field, values)

    if kind == "match":
        field, value = _single_field(kind, payload)
        if isinstance(value, Mapping):
            operator = str(value.get("operator", "or")).lower()
            return match(field, value.get("query"), operator=operator, fuzziness=value.get("fuzziness"))
        return match(field, value)

    if kind == "range":
        field, bounds = _single_field(kind, payload)
        if not isinstance(bounds, Mapping):
            raise InvalidSpec("range query requires an object of bounds", field=field)
        unknown = set(bounds) - {"gte", "gt", "lte", "lt"}
        if unknown:
            raise InvalidSpec(f"Unsupported range options: {sorted(unknown)}", field=field)
        return range_(field, RangeBounds(**bounds))

    raise InvalidSpec(f"Unsupported query type {kind!r}")


def parse_query(dsl: Optional[Mapping[str, Any]]) -> Optional[Node]:
    """
    Read a Query DSL query into a clause tree.

    Supports term, terms, match, range and bool (filter is read as must).
    A top-level match_all (or no query) yields None.

    Args:
        dsl: Query dict

    Returns:
        Clause, ClauseGroup, or None for all documents

    Raises:
        InvalidSpec: If the query uses unsupported constructs
        InvalidClause: If a clause's operands are invalid
    """
    if dsl is None or dsl == MATCH_ALL:
        return None
    return _parse_node(dsl)


def _parse_sort(sort: Any) -> List[tuple]:
    if sort is None:
        return []
    if isinstance(sort, (str, Mapping)):
        sort = [sort]
    if not isinstance(sort, list):
        raise InvalidSpec("sort must be a list")

    directives = []
    for item in sort:
        if isinstance(item, str):
            directives.append((item, False))
            continue
        field, order = _single_field("sort", item)
        if isinstance(order, Mapping):
            order = order.get("order", "asc")
        if order not in ("asc", "desc"):
            raise InvalidSpec(f"Unknown sort order {order!r}", field=field)
        directives.append((field, order == "desc"))
    return directives


def spec_from_dsl(
    query: Optional[Mapping[str, Any]] = None,
    sort: Any = None,
    from_: int = 0,
    size: int = 10,
    fields: Optional[List[str]] = None,
    aggregations: Optional[Mapping[str, str]] = None,
    max_page_size: Optional[int] = None,
) -> QuerySpec:
    """
    Build a validated QuerySpec from Query DSL style request parts.

    Args:
        query: Query DSL query (see parse_query)
        sort: Sort criteria: "field", {"field": "desc"} or
            {"field": {"order": "desc"}}, or a list of those
        from_: Pagination offset
        size: Page size
        fields: Source fields to return (all if empty)
        aggregations: Terms aggregations as {name: field}
        max_page_size: Page ceiling (defaults to the QuerySpec default)

    Returns:
        QuerySpec

    Raises:
        InvalidSpec / InvalidClause: If any part is invalid
    """
    spec = QuerySpec() if max_page_size is None else QuerySpec(max_page_size=max_page_size)
    spec = spec.with_filter(parse_query(query)).with_page(from_, size)

    for field, descending in _parse_sort(sort):
        spec = spec.with_sort(field, descending)
    if fields:
        spec = spec.with_projection(*fields)
    for name, field in (aggregations or {}).items():
        spec = spec.with_aggregation(name, field)

    return spec
