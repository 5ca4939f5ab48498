"""
Query spec: filter, sort, pagination, projection and aggregations.
"""

from dataclasses import dataclass, field as dc_field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from elastic_query.errors import InvalidSpec
from elastic_query.query_types.clauses import Clause, ClauseGroup, Node


DEFAULT_MAX_PAGE_SIZE = 10000
DEFAULT_PAGE_LIMIT = 10
DEFAULT_BUCKET_SIZE = 10


class SortOrder(str, Enum):
    """Sort order for queries."""
    ASC = "asc"
    DESC = "desc"


class AggregationKind(str, Enum):
    """Supported aggregation kinds."""
    TERMS_BUCKET = "terms"


class BucketOrder(str, Enum):
    """Bucket ordering for terms aggregations. COUNT_DESC is the backend default."""
    COUNT_DESC = "count_desc"
    COUNT_ASC = "count_asc"
    KEY_ASC = "key_asc"
    KEY_DESC = "key_desc"


def _is_uint(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class SortDirective:
    """Sort on one field."""
    field: str
    descending: bool = False

    def __post_init__(self):
        if not isinstance(self.field, str) or not self.field.strip():
            raise InvalidSpec(f"Sort field must be a non-empty string, got {self.field!r}")

    @property
    def order(self) -> SortOrder:
        return SortOrder.DESC if self.descending else SortOrder.ASC


@dataclass(frozen=True)
class Pagination:
    """Result window: skip offset documents, return at most limit."""
    offset: int = 0
    limit: int = DEFAULT_PAGE_LIMIT

    def __post_init__(self):
        if not _is_uint(self.offset):
            raise InvalidSpec(f"Pagination offset must be a non-negative integer, got {self.offset!r}")
        if not _is_uint(self.limit):
            raise InvalidSpec(f"Pagination limit must be a non-negative integer, got {self.limit!r}")


@dataclass(frozen=True)
class AggregationSpec:
    """Named terms-bucket aggregation on a field."""
    name: str
    field: str
    kind: AggregationKind = AggregationKind.TERMS_BUCKET
    size: int = DEFAULT_BUCKET_SIZE
    order: BucketOrder = BucketOrder.COUNT_DESC

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidSpec(f"Aggregation name must be a non-empty string, got {self.name!r}")
        if not isinstance(self.field, str) or not self.field.strip():
            raise InvalidSpec("Aggregation field must be a non-empty string", field=self.name)
        try:
            object.__setattr__(self, "kind", AggregationKind(self.kind))
            object.__setattr__(self, "order", BucketOrder(self.order))
        except ValueError as e:
            raise InvalidSpec(str(e), field=self.field) from e
        if not _is_uint(self.size) or self.size == 0:
            raise InvalidSpec(f"Aggregation size must be a positive integer, got {self.size!r}", field=self.field)


@dataclass(frozen=True)
class QuerySpec:
    """
    Immutable description of one search request.

    Every with_* method validates its input and returns a new spec, so a
    base spec can be shared and extended without aliasing. An empty
    projection means all fields.
    """
    filter: Optional[Node] = None
    sort: Tuple[SortDirective, ...] = ()
    page: Pagination = dc_field(default_factory=Pagination)
    projection: FrozenSet[str] = frozenset()
    aggregations: Tuple[AggregationSpec, ...] = ()
    max_page_size: int = DEFAULT_MAX_PAGE_SIZE

    def __post_init__(self):
        object.__setattr__(self, "sort", tuple(self.sort))
        object.__setattr__(self, "projection", frozenset(self.projection))
        object.__setattr__(self, "aggregations", tuple(self.aggregations))
        validate_spec(self)

    def with_filter(self, node: Optional[Node]) -> "QuerySpec":
        """Replace the filter. None means match all documents."""
        return replace(self, filter=node)

    def with_sort(self, field: str, descending: bool = False) -> "QuerySpec":
        """Append a sort directive. Earlier directives take precedence."""
        directive = SortDirective(field, descending)
        if any(existing.field == field for existing in self.sort):
            raise InvalidSpec("Duplicate sort field", field=field)
        return replace(self, sort=self.sort + (directive,))

    def with_page(self, offset: int = 0, limit: int = DEFAULT_PAGE_LIMIT) -> "QuerySpec":
        """Replace the pagination window."""
        return replace(self, page=Pagination(offset, limit))

    def with_projection(self, *fields: str) -> "QuerySpec":
        """Replace the returned field set. No fields means all fields."""
        for name in fields:
            if not isinstance(name, str) or not name.strip():
                raise InvalidSpec(f"Projection field must be a non-empty string, got {name!r}")
        return replace(self, projection=frozenset(fields))

    def with_aggregation(
        self,
        name: str,
        field: str,
        kind: AggregationKind = AggregationKind.TERMS_BUCKET,
        size: int = DEFAULT_BUCKET_SIZE,
        order: BucketOrder = BucketOrder.COUNT_DESC,
    ) -> "QuerySpec":
        """Append a named aggregation. Names are unique within a spec."""
        aggregation = AggregationSpec(name=name, field=field, kind=kind, size=size, order=order)
        if any(existing.name == name for existing in self.aggregations):
            raise InvalidSpec("Duplicate aggregation name", field=name)
        return replace(self, aggregations=self.aggregations + (aggregation,))


def validate_spec(spec: QuerySpec, max_page_size: Optional[int] = None) -> None:
    """
    Check every QuerySpec invariant.

    Args:
        spec: Spec to validate
        max_page_size: Page ceiling to enforce (defaults to the spec's own)

    Raises:
        InvalidSpec: On the first violated invariant, naming the field
    """
    ceiling = spec.max_page_size if max_page_size is None else max_page_size
    if not _is_uint(ceiling):
        raise InvalidSpec(f"max_page_size must be a non-negative integer, got {ceiling!r}")

    if spec.filter is not None and not isinstance(spec.filter, (Clause, ClauseGroup)):
        raise InvalidSpec(f"Filter must be a Clause or ClauseGroup, got {spec.filter!r}")

    if not isinstance(spec.page, Pagination):
        raise InvalidSpec(f"page must be a Pagination, got {spec.page!r}")
    if spec.page.limit > ceiling:
        raise InvalidSpec(
            f"Page limit {spec.page.limit} exceeds max page size {ceiling}", field="limit"
        )

    seen = set()
    for directive in spec.sort:
        if not isinstance(directive, SortDirective):
            raise InvalidSpec(f"sort accepts SortDirective only, got {directive!r}")
        if directive.field in seen:
            raise InvalidSpec("Duplicate sort field", field=directive.field)
        seen.add(directive.field)

    names = set()
    for aggregation in spec.aggregations:
        if not isinstance(aggregation, AggregationSpec):
            raise InvalidSpec(f"aggregations accepts AggregationSpec only, got {aggregation!r}")
        if aggregation.name in names:
            raise InvalidSpec("Duplicate aggregation name", field=aggregation.name)
        names.add(aggregation.name)
