"""
Document indexing operations.

Indexed documents become searchable after the index refreshes; pass
refresh=True when a following search must see them.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from elasticsearch import Elasticsearch, helpers

from elastic_query.utils.connection import BACKEND_ERRORS, backend_error
from elastic_query.utils.response_parser import unwrap_response
from elastic_query.utils.validation import validate_index_pattern


logger = logging.getLogger(__name__)


def index_document(
    client: Elasticsearch,
    index: str,
    document: Mapping[str, Any],
    doc_id: Optional[str] = None,
    refresh: bool = False,
) -> str:
    """
    Index a single document.

    Args:
        client: Elasticsearch client
        index: Target index name
        document: Document source
        doc_id: Document ID (generated by the backend if not given)
        refresh: Wait for the document to become searchable

    Returns:
        ID of the indexed document
    """
    validate_index_pattern(index)
    kwargs: Dict[str, Any] = {"index": index, "document": dict(document)}
    if doc_id is not None:
        kwargs["id"] = doc_id
    if refresh:
        kwargs["refresh"] = "wait_for"

    try:
        response = client.index(**kwargs)
    except BACKEND_ERRORS as e:
        raise backend_error(e, "Index") from e

    return unwrap_response(response).get("_id", doc_id)


def bulk_index(
    client: Elasticsearch,
    index: str,
    documents: Iterable[Mapping[str, Any]],
    id_field: Optional[str] = None,
    refresh: bool = False,
) -> Dict[str, Any]:
    """
    Index many documents with the bulk helper.

    Per-document failures are collected rather than raised.

    Args:
        client: Elasticsearch client
        index: Target index name
        documents: Document sources
        id_field: Source field to use as document ID
        refresh: Refresh the index after indexing

    Returns:
        {"success": <count>, "errors": [<failed item>, ...]}
    """
    validate_index_pattern(index)

    def gen_actions():
        for document in documents:
            action = {"_op_type": "index", "_index": index, "_source": dict(document)}
            if id_field and document.get(id_field) is not None:
                action["_id"] = str(document[id_field])
            yield action

    try:
        success, errors = helpers.bulk(client, gen_actions(), stats_only=False, raise_on_error=False)
        if refresh:
            client.indices.refresh(index=index)
    except BACKEND_ERRORS as e:
        raise backend_error(e, "Bulk index") from e

    if errors:
        logger.warning("Bulk index into %s: %d document(s) failed", index, len(errors))
    logger.info("Bulk indexed %d document(s) into %s", success, index)
    return {"success": success, "errors": list(errors)}
