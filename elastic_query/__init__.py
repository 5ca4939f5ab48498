"""
Query building and execution for Elasticsearch.

Build clauses bottom-up, compose them into a QuerySpec and run it with a
QueryExecutor:

    spec = (
        QuerySpec()
        .with_filter(term("user_id", 42) & range_("timestamp", gte="2024-01-01"))
        .with_sort("timestamp", descending=True)
        .with_page(0, 50)
    )
    result = QueryExecutor(client, "user-actions").execute(spec)
"""

from .errors import (
    QueryError,
    InvalidClause,
    InvalidSpec,
    BackendUnreachable,
    BackendTimeout,
    BackendRejected,
    MalformedResponse,
)
from .query_types import (
    Clause,
    ClauseGroup,
    ClauseKind,
    RangeBounds,
    term,
    terms,
    match,
    range_,
    and_,
    or_,
    not_,
    AggregationKind,
    AggregationSpec,
    BucketOrder,
    Pagination,
    QuerySpec,
    SortDirective,
    SortOrder,
    Bucket,
    Document,
    SearchResult,
)
from .tools import QueryExecutor, search_documents, query_raw, index_document, bulk_index

__version__ = "1.0.0"

__all__ = [
    # Errors
    "QueryError",
    "InvalidClause",
    "InvalidSpec",
    "BackendUnreachable",
    "BackendTimeout",
    "BackendRejected",
    "MalformedResponse",
    # Clauses
    "Clause",
    "ClauseGroup",
    "ClauseKind",
    "RangeBounds",
    "term",
    "terms",
    "match",
    "range_",
    "and_",
    "or_",
    "not_",
    # Spec
    "AggregationKind",
    "AggregationSpec",
    "BucketOrder",
    "Pagination",
    "QuerySpec",
    "SortDirective",
    "SortOrder",
    # Results
    "Bucket",
    "Document",
    "SearchResult",
    # Operations
    "QueryExecutor",
    "search_documents",
    "query_raw",
    "index_document",
    "bulk_index",
]
