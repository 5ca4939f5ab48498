"""
In-memory stand-in for the Elasticsearch client.

FakeElasticsearch evaluates the subset of the query DSL the builder emits
(term, terms, match, range, bool, match_all) plus terms aggregations over
a list of documents, so request building and response parsing can be
exercised end to end without a cluster.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

import pytest


def _values(source: Dict[str, Any], field: str) -> List[Any]:
    value: Any = source
    for part in field.split("."):
        if not isinstance(value, dict) or part not in value:
            return []
        value = value[part]
    return value if isinstance(value, list) else [value]


def _matches(query: Dict[str, Any], source: Dict[str, Any]) -> bool:
    kind, payload = next(iter(query.items()))
    if kind == "match_all":
        return True
    if kind == "bool":
        must = payload.get("must", [])
        should = payload.get("should", [])
        if not all(_matches(q, source) for q in must):
            return False
        if any(_matches(q, source) for q in payload.get("must_not", [])):
            return False
        if should:
            minimum = int(payload.get("minimum_should_match", 0 if must else 1))
            return sum(_matches(q, source) for q in should) >= minimum
        return True

    field, expected = next(iter(payload.items()))
    values = _values(source, field)
    if kind == "term":
        return expected in values
    if kind == "terms":
        return any(value in expected for value in values)
    if kind == "match":
        words = str(expected["query"]).lower().split()
        tokens = set(" ".join(str(v) for v in values).lower().split())
        hits = [word in tokens for word in words]
        return all(hits) if expected.get("operator") == "and" else any(hits)
    if kind == "range":
        checks = {
            "gte": lambda v, b: v >= b,
            "gt": lambda v, b: v > b,
            "lte": lambda v, b: v <= b,
            "lt": lambda v, b: v < b,
        }
        return any(all(checks[op](v, bound) for op, bound in expected.items()) for v in values)
    raise ValueError(f"Unsupported query {kind}")


class FakeElasticsearch:
    """Client double holding documents for one index."""

    def __init__(self, index: str, documents: List[Dict[str, Any]]):
        self.index_name = index
        self.documents = [(str(i + 1), doc) for i, doc in enumerate(documents)]
        self.requests: List[Dict[str, Any]] = []
        self.timeouts: List[Optional[float]] = []
        self.fail_with: Optional[Exception] = None

    def options(self, request_timeout=None, **kwargs):
        self.timeouts.append(request_timeout)
        return self

    def search(self, index=None, body=None, **kwargs):
        self.requests.append(body)
        if self.fail_with is not None:
            raise self.fail_with

        query = body.get("query", {"match_all": {}})
        matched = [(doc_id, doc) for doc_id, doc in self.documents if _matches(query, doc)]

        for directive in reversed(body.get("sort", [])):
            field, order = next(iter(directive.items()))
            matched.sort(
                key=lambda item: (_values(item[1], field) or [None])[0],
                reverse=order["order"] == "desc",
            )

        start = body.get("from", 0)
        page = matched[start:start + body.get("size", 10)]
        projection = body.get("_source")

        hits = []
        for doc_id, doc in page:
            source = {k: v for k, v in doc.items() if k in projection} if projection else dict(doc)
            hits.append({"_index": self.index_name, "_id": doc_id, "_score": 1.0, "_source": source})

        response = {
            "took": len(self.requests),
            "timed_out": False,
            "_shards": {"total": 1, "successful": 1, "skipped": 0, "failed": 0},
            "hits": {"total": {"value": len(matched), "relation": "eq"}, "max_score": 1.0, "hits": hits},
        }

        aggregations = {}
        for name, aggregation in body.get("aggs", {}).items():
            terms_agg = aggregation["terms"]
            counts = Counter(v for _, doc in matched for v in _values(doc, terms_agg["field"]))
            ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
            aggregations[name] = {
                "doc_count_error_upper_bound": 0,
                "sum_other_doc_count": sum(c for _, c in ordered[terms_agg["size"]:]),
                "buckets": [{"key": k, "doc_count": c} for k, c in ordered[:terms_agg["size"]]],
            }
        if aggregations:
            response["aggregations"] = aggregations
        return response

    def count(self, index=None, body=None, **kwargs):
        query = body.get("query", {"match_all": {}})
        return {"count": sum(1 for _, doc in self.documents if _matches(query, doc))}


@pytest.fixture
def user_actions():
    """Twelve user actions across three users."""
    actions = [
        (42, "created", "2023-12-30T09:00:00"),
        (42, "updated", "2024-01-02T10:00:00"),
        (42, "updated", "2024-01-05T11:00:00"),
        (42, "deleted", "2024-01-06T12:00:00"),
        (7, "created", "2024-01-01T08:00:00"),
        (7, "updated", "2023-11-20T08:30:00"),
        (7, "viewed", "2024-01-03T14:00:00"),
        (9, "created", "2024-01-04T15:00:00"),
        (9, "created", "2024-01-07T16:00:00"),
        (9, "viewed", "2024-01-08T17:00:00"),
        (9, "updated", "2024-01-09T18:00:00"),
        (42, "created", "2024-01-10T19:00:00"),
    ]
    return [
        {"user_id": user_id, "action": action, "timestamp": timestamp, "note": f"user {user_id} {action}"}
        for user_id, action, timestamp in actions
    ]


@pytest.fixture
def fake_backend(user_actions):
    return FakeElasticsearch("user-actions", user_actions)
