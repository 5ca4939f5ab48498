"""
Type definitions for query building and search results.
"""

from .clauses import (
    Clause,
    ClauseGroup,
    ClauseKind,
    RangeBounds,
    Node,
    term,
    terms,
    match,
    range_,
    and_,
    or_,
    not_,
)

from .spec import (
    AggregationKind,
    AggregationSpec,
    BucketOrder,
    Pagination,
    QuerySpec,
    SortDirective,
    SortOrder,
    validate_spec,
)

from .results import (
    Bucket,
    Document,
    SearchResult,
)

__all__ = [
    # Clauses
    "Clause",
    "ClauseGroup",
    "ClauseKind",
    "RangeBounds",
    "Node",
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
    "validate_spec",
    # Results
    "Bucket",
    "Document",
    "SearchResult",
]
