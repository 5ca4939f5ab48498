"""
Pytest configuration and fixtures for elastic_query tests.
"""

import os
import sys
from unittest.mock import Mock

import pytest

# Add the project root to the Python path
project_root = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, project_root)

from elastic_query.query_types import QuerySpec
from elastic_query.tools.search import QueryExecutor


def make_search_response(hits=None, total=None, aggregations=None, took=5, timed_out=False):
    """Build a search response body shaped like the backend's."""
    hits = hits if hits is not None else []
    response = {
        "took": took,
        "timed_out": timed_out,
        "_shards": {"total": 1, "successful": 1, "skipped": 0, "failed": 0},
        "hits": {
            "total": {"value": len(hits) if total is None else total, "relation": "eq"},
            "max_score": 1.0 if hits else None,
            "hits": hits,
        },
    }
    if aggregations is not None:
        response["aggregations"] = aggregations
    return response


def make_hit(doc_id, source, index="user-actions", score=1.0):
    return {"_index": index, "_id": doc_id, "_score": score, "_source": source}


@pytest.fixture
def sample_hits():
    """Five user action documents: three created, two updated."""
    return [
        make_hit("1", {"user_id": 42, "action": "created", "timestamp": "2024-01-02T10:00:00"}),
        make_hit("2", {"user_id": 42, "action": "updated", "timestamp": "2024-01-03T10:00:00"}),
        make_hit("3", {"user_id": 7, "action": "created", "timestamp": "2024-01-04T10:00:00"}),
        make_hit("4", {"user_id": 7, "action": "updated", "timestamp": "2024-01-05T10:00:00"}),
        make_hit("5", {"user_id": 9, "action": "created", "timestamp": "2024-01-06T10:00:00"}),
    ]


@pytest.fixture
def actions_aggregation():
    """Aggregation section for 3 created and 2 updated documents."""
    return {
        "actions_count": {
            "doc_count_error_upper_bound": 0,
            "sum_other_doc_count": 0,
            "buckets": [
                {"key": "created", "doc_count": 3},
                {"key": "updated", "doc_count": 2},
            ],
        }
    }


@pytest.fixture
def mock_elasticsearch(sample_hits):
    """Mock Elasticsearch client for testing."""
    mock_es = Mock()

    # options(request_timeout=...) returns a client with the same API
    mock_es.options.return_value = mock_es

    mock_es.search.return_value = make_search_response(hits=sample_hits, total=5)
    mock_es.count.return_value = {"count": 5, "_shards": {"total": 1, "failed": 0}}
    mock_es.index.return_value = {"_index": "user-actions", "_id": "generated-id", "result": "created"}

    return mock_es


@pytest.fixture
def executor(mock_elasticsearch):
    """Executor over the mock client with explicit limits."""
    return QueryExecutor(
        mock_elasticsearch,
        "user-actions",
        default_timeout=30.0,
        max_page_size=10000,
    )


@pytest.fixture
def base_spec():
    return QuerySpec()


@pytest.fixture
def test_environment(monkeypatch):
    """Point configuration at a test environment."""
    for name in ("URL", "USERNAME", "PASSWORD", "API_KEY", "CA_CERTS", "TIMEOUT", "MAX_PAGE_SIZE", "INDEX"):
        monkeypatch.delenv(f"ELASTIC_{name}", raising=False)
        monkeypatch.delenv(f"ELASTICSEARCH_{name}", raising=False)
    monkeypatch.setenv("ELASTIC_URL", "http://es-test:9200")
    monkeypatch.setenv("ELASTIC_TIMEOUT", "5000")
    monkeypatch.setenv("ELASTIC_MAX_PAGE_SIZE", "500")
    monkeypatch.setenv("ELASTIC_INDEX", "user-actions")


@pytest.fixture
def make_response():
    """Factory for search response bodies."""
    return make_search_response
