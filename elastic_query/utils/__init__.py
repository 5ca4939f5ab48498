"""
Utility functions for elastic_query.
"""

from .connection import get_elasticsearch_client, check_connection, backend_error
from .validation import (
    validate_index_pattern,
    validate_timeout,
)
from .query_builder import (
    build_term_query,
    build_terms_query,
    build_match_query,
    build_range_query,
    build_bool_query,
    build_search_body,
    to_query_dsl,
    parse_query,
    spec_from_dsl,
)
from .response_parser import (
    parse_hits,
    parse_total,
    parse_aggregations,
    parse_search_response,
)

__all__ = [
    # Connection
    "get_elasticsearch_client",
    "check_connection",
    "backend_error",
    # Validation
    "validate_index_pattern",
    "validate_timeout",
    # Query building
    "build_term_query",
    "build_terms_query",
    "build_match_query",
    "build_range_query",
    "build_bool_query",
    "build_search_body",
    "to_query_dsl",
    "parse_query",
    "spec_from_dsl",
    # Response parsing
    "parse_hits",
    "parse_total",
    "parse_aggregations",
    "parse_search_response",
]
