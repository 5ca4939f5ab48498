"""
Unit tests for document indexing.
"""

from unittest.mock import patch

import pytest
from elasticsearch import ConnectionTimeout

from elastic_query.errors import BackendTimeout
from elastic_query.tools.indexing import bulk_index, index_document


class TestIndexDocument:
    """Test cases for index_document."""

    def test_generated_id(self, mock_elasticsearch):
        doc_id = index_document(mock_elasticsearch, "user-actions", {"user_id": 42, "action": "created"})

        assert doc_id == "generated-id"
        mock_elasticsearch.index.assert_called_once_with(
            index="user-actions", document={"user_id": 42, "action": "created"}
        )

    def test_explicit_id_and_refresh(self, mock_elasticsearch):
        mock_elasticsearch.index.return_value = {"_index": "user-actions", "_id": "a-1", "result": "created"}

        doc_id = index_document(mock_elasticsearch, "user-actions", {"user_id": 7}, doc_id="a-1", refresh=True)

        assert doc_id == "a-1"
        kwargs = mock_elasticsearch.index.call_args[1]
        assert kwargs["id"] == "a-1"
        assert kwargs["refresh"] == "wait_for"

    def test_invalid_index(self, mock_elasticsearch):
        with pytest.raises(ValueError):
            index_document(mock_elasticsearch, "_internal", {"user_id": 7})
        mock_elasticsearch.index.assert_not_called()

    def test_timeout(self, mock_elasticsearch):
        mock_elasticsearch.index.side_effect = ConnectionTimeout("Connection timed out")
        with pytest.raises(BackendTimeout, match="Index timed out"):
            index_document(mock_elasticsearch, "user-actions", {"user_id": 7})


class TestBulkIndex:
    """Test cases for bulk_index."""

    @patch("elastic_query.tools.indexing.helpers.bulk")
    def test_actions(self, mock_bulk, mock_elasticsearch):
        captured = []

        def consume(client, actions, **kwargs):
            captured.extend(actions)
            return len(captured), []

        mock_bulk.side_effect = consume
        documents = [
            {"action_id": 1, "user_id": 42, "action": "created"},
            {"action_id": 2, "user_id": 42, "action": "updated"},
            {"user_id": 7, "action": "created"},
        ]

        result = bulk_index(mock_elasticsearch, "user-actions", documents, id_field="action_id")

        assert result == {"success": 3, "errors": []}
        assert [a.get("_id") for a in captured] == ["1", "2", None]
        assert all(a["_index"] == "user-actions" for a in captured)
        assert captured[0]["_source"] == documents[0]
        mock_elasticsearch.indices.refresh.assert_not_called()

    @patch("elastic_query.tools.indexing.helpers.bulk")
    def test_refresh(self, mock_bulk, mock_elasticsearch):
        mock_bulk.return_value = (1, [])

        bulk_index(mock_elasticsearch, "user-actions", [{"user_id": 1}], refresh=True)

        mock_elasticsearch.indices.refresh.assert_called_once_with(index="user-actions")

    @patch("elastic_query.tools.indexing.helpers.bulk")
    def test_partial_failure(self, mock_bulk, mock_elasticsearch):
        failure = {"index": {"_id": "2", "status": 400, "error": {"type": "mapper_parsing_exception"}}}
        mock_bulk.return_value = (1, [failure])

        result = bulk_index(mock_elasticsearch, "user-actions", [{"user_id": 1}, {"user_id": "x"}])

        assert result["success"] == 1
        assert result["errors"] == [failure]
