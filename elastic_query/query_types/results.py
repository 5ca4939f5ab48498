"""
Result model returned by the query executor.

Bucket counts are computed by the backend over the whole match set (and may
be approximate on multi-shard indices), so they are not guaranteed to sum to
total_matched or to relate to the returned page in any way.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Document:
    """One returned hit."""
    id: Optional[str]
    index: Optional[str]
    source: Dict[str, Any]
    score: Optional[float] = None
    sort: Tuple[Any, ...] = ()

    def get(self, key: str, default: Any = None) -> Any:
        """Read a source field, following dotted paths into nested objects."""
        current: Any = self.source
        for part in key.split("."):
            if not isinstance(current, Mapping) or part not in current:
                return default
            current = current[part]
        return current


@dataclass(frozen=True)
class Bucket:
    """Aggregation bucket."""
    key: Any
    count: int


@dataclass(frozen=True)
class SearchResult:
    """Documents, total hit count and aggregation buckets of one search."""
    documents: Tuple[Document, ...]
    total_matched: int
    buckets: Dict[str, Tuple[Bucket, ...]] = field(default_factory=dict)
    total_relation: str = "eq"
    # Varies between identical searches; not compared
    took: int = field(default=0, compare=False)

    def __len__(self) -> int:
        return len(self.documents)

    def bucket_counts(self, name: str) -> Dict[Any, int]:
        """
        Get an aggregation's buckets as a key -> count mapping.

        Args:
            name: Aggregation name

        Returns:
            Ordered dict of bucket key to document count

        Raises:
            KeyError: If no aggregation with this name was requested
        """
        return {bucket.key: bucket.count for bucket in self.buckets[name]}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return {
            "total": self.total_matched,
            "total_relation": self.total_relation,
            "took": self.took,
            "documents": [
                {
                    "id": document.id,
                    "index": document.index,
                    "score": document.score,
                    "source": document.source,
                }
                for document in self.documents
            ],
            "buckets": {
                name: [{"key": bucket.key, "count": bucket.count} for bucket in buckets]
                for name, buckets in self.buckets.items()
            },
        }
