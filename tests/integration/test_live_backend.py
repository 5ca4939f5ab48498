"""
Manual tests against a real Elasticsearch cluster.

To run these tests:
1. Start an Elasticsearch instance
2. Set environment variables:
   - ELASTIC_URL
   - ELASTIC_USERNAME/ELASTIC_PASSWORD or ELASTIC_API_KEY
3. Run with: pytest -m manual
"""

import os
import uuid

import pytest

from elastic_query import QueryExecutor, QuerySpec, and_, bulk_index, range_, term, terms
from elastic_query.utils import check_connection, get_elasticsearch_client


@pytest.fixture
def live_client():
    if not os.getenv("ELASTIC_URL"):
        pytest.skip("ELASTIC_URL not set - skipping real ES test")
    return get_elasticsearch_client()


@pytest.fixture
def live_index(live_client, user_actions):
    index = f"elastic-query-test-{uuid.uuid4().hex[:8]}"
    live_client.indices.create(
        index=index,
        mappings={
            "properties": {
                "user_id": {"type": "long"},
                "action": {"type": "keyword"},
                "timestamp": {"type": "date"},
                "note": {"type": "text"},
            }
        },
    )
    result = bulk_index(live_client, index, user_actions, refresh=True)
    assert result["errors"] == []
    yield index
    live_client.indices.delete(index=index, ignore_unavailable=True)


@pytest.mark.manual
class TestLiveBackend:
    """Scenarios against a real cluster."""

    def test_connection(self, live_client):
        assert check_connection(live_client), "Could not connect to Elasticsearch"

    def test_terms_and_buckets(self, live_client, live_index):
        executor = QueryExecutor(live_client, live_index)
        spec = (
            QuerySpec()
            .with_filter(terms("action", ["created", "updated"]))
            .with_page(0, 50)
            .with_aggregation("actions_count", "action")
        )

        result = executor.execute(spec)

        assert result.total_matched == 9
        assert result.bucket_counts("actions_count") == {"created": 5, "updated": 4}

    def test_range_filter(self, live_client, live_index):
        executor = QueryExecutor(live_client, live_index)
        node = and_(term("user_id", 42), term("action", "updated"), range_("timestamp", gte="2024-01-01"))

        result = executor.execute(QuerySpec().with_filter(node).with_sort("timestamp"))

        assert [doc.source["timestamp"] for doc in result.documents] == [
            "2024-01-02T10:00:00",
            "2024-01-05T11:00:00",
        ]
