"""
Operations against Elasticsearch: search, raw queries and indexing.
"""

from .search import QueryExecutor, search_documents
from .query import query_raw
from .indexing import index_document, bulk_index

__all__ = [
    # Search operations
    "QueryExecutor",
    "search_documents",
    # Raw query operations
    "query_raw",
    # Indexing operations
    "index_document",
    "bulk_index",
]
