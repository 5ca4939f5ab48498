"""
Clause and clause group value types.

A Clause is a single filter condition on one field. A ClauseGroup is a
boolean composition of clauses and nested groups, mirroring the backend's
bool query (AND = must, OR = should, NOT = must_not). Nothing here talks to
the backend; serialization lives in utils.query_builder.
"""

from dataclasses import dataclass, field as dc_field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional, Tuple, Union

from elastic_query.errors import InvalidClause, InvalidSpec


Scalar = Union[str, int, float, bool, date, datetime]
SCALAR_TYPES = (str, int, float, bool, date, datetime)

MATCH_OPERATORS = ("or", "and")


class ClauseKind(str, Enum):
    """Supported clause kinds, named after their query DSL keys."""
    TERM = "term"
    TERMS = "terms"
    MATCH = "match"
    RANGE = "range"


@dataclass(frozen=True)
class RangeBounds:
    """Bounds of a range clause. At most one bound per side."""
    gte: Optional[Scalar] = None
    gt: Optional[Scalar] = None
    lte: Optional[Scalar] = None
    lt: Optional[Scalar] = None

    def items(self) -> Tuple[Tuple[str, Scalar], ...]:
        """Return the (operator, value) pairs that are set, in DSL key order."""
        pairs = (("gte", self.gte), ("gt", self.gt), ("lte", self.lte), ("lt", self.lt))
        return tuple((name, value) for name, value in pairs if value is not None)

    def is_empty(self) -> bool:
        return not self.items()


def _check_field(field: Any) -> None:
    if not isinstance(field, str) or not field.strip():
        raise InvalidClause(f"Field name must be a non-empty string, got {field!r}")


def _check_scalar(field: str, value: Any) -> None:
    if value is None or not isinstance(value, SCALAR_TYPES):
        raise InvalidClause(f"Unsupported operand {value!r}", field=field)


def _check_bounds(field: str, bounds: Any) -> None:
    if not isinstance(bounds, RangeBounds):
        raise InvalidClause("Range clause requires RangeBounds", field=field)
    if bounds.is_empty():
        raise InvalidClause("Range clause requires at least one bound", field=field)
    if bounds.gte is not None and bounds.gt is not None:
        raise InvalidClause("Range lower bound cannot use both gte and gt", field=field)
    if bounds.lte is not None and bounds.lt is not None:
        raise InvalidClause("Range upper bound cannot use both lte and lt", field=field)
    for _, value in bounds.items():
        _check_scalar(field, value)


@dataclass(frozen=True)
class Clause:
    """
    One filter condition.

    value holds a scalar for TERM, a tuple of scalars for TERMS, the query
    text for MATCH and a RangeBounds for RANGE. operator and fuzziness only
    apply to MATCH.
    """
    kind: ClauseKind
    field: str
    value: Any
    operator: Optional[str] = None
    fuzziness: Optional[str] = None

    def __post_init__(self):
        _check_field(self.field)
        if not isinstance(self.kind, ClauseKind):
            try:
                object.__setattr__(self, "kind", ClauseKind(self.kind))
            except ValueError:
                raise InvalidClause(f"Unknown clause kind {self.kind!r}", field=self.field)

        if self.kind is ClauseKind.TERMS:
            if isinstance(self.value, (str, bytes)) or not isinstance(self.value, Iterable):
                raise InvalidClause("Terms clause requires a sequence of values", field=self.field)
            values = []
            seen = set()
            for value in self.value:
                _check_scalar(self.field, value)
                # 1, 1.0 and True compare equal but are distinct terms
                key = (type(value), value)
                if key not in seen:
                    seen.add(key)
                    values.append(value)
            if not values:
                raise InvalidClause("Terms clause requires at least one value", field=self.field)
            object.__setattr__(self, "value", tuple(values))
        elif self.kind is ClauseKind.RANGE:
            _check_bounds(self.field, self.value)
        elif self.kind is ClauseKind.MATCH:
            if not isinstance(self.value, str) or not self.value.strip():
                raise InvalidClause("Match clause requires non-empty text", field=self.field)
            if self.operator not in (None,) + MATCH_OPERATORS:
                raise InvalidClause(f"Unknown match operator {self.operator!r}", field=self.field)
        else:
            _check_scalar(self.field, self.value)

        if self.kind is not ClauseKind.MATCH and (self.operator or self.fuzziness):
            raise InvalidClause("operator and fuzziness only apply to match clauses", field=self.field)

    def __and__(self, other: "Node") -> "ClauseGroup":
        return and_(self, other)

    def __or__(self, other: "Node") -> "ClauseGroup":
        return or_(self, other)

    def __invert__(self) -> "ClauseGroup":
        return not_(self)


@dataclass(frozen=True)
class ClauseGroup:
    """Boolean composition of clauses and nested groups."""
    must: Tuple["Node", ...] = dc_field(default_factory=tuple)
    should: Tuple["Node", ...] = dc_field(default_factory=tuple)
    must_not: Tuple["Node", ...] = dc_field(default_factory=tuple)

    def __post_init__(self):
        for name in ("must", "should", "must_not"):
            items = tuple(getattr(self, name) or ())
            for item in items:
                if not isinstance(item, (Clause, ClauseGroup)):
                    raise InvalidSpec(f"ClauseGroup.{name} accepts clauses and groups only, got {item!r}")
            object.__setattr__(self, name, items)

        if not (self.must or self.should or self.must_not):
            raise InvalidSpec("ClauseGroup requires at least one of must, should or must_not")

    @property
    def is_pure_must(self) -> bool:
        return bool(self.must) and not self.should and not self.must_not

    @property
    def is_pure_should(self) -> bool:
        return bool(self.should) and not self.must and not self.must_not

    def __and__(self, other: "Node") -> "ClauseGroup":
        return and_(self, other)

    def __or__(self, other: "Node") -> "ClauseGroup":
        return or_(self, other)

    def __invert__(self) -> "ClauseGroup":
        return not_(self)


Node = Union[Clause, ClauseGroup]


def term(field: str, value: Scalar) -> Clause:
    """Exact match on a single value."""
    return Clause(ClauseKind.TERM, field, value)


def terms(field: str, values: Iterable[Scalar]) -> Clause:
    """Exact match on any of the given values."""
    return Clause(ClauseKind.TERMS, field, values)


def match(
    field: str,
    text: str,
    operator: str = "or",
    fuzziness: Optional[str] = None,
) -> Clause:
    """
    Analyzed full-text match.

    Args:
        field: Field name
        text: Text to search
        operator: "or" or "and" between analyzed tokens
        fuzziness: Fuzzy matching (e.g., "AUTO", "1", "2")

    Returns:
        Match clause
    """
    return Clause(ClauseKind.MATCH, field, text, operator=operator, fuzziness=fuzziness)


def range_(
    field: str,
    bounds: Optional[RangeBounds] = None,
    *,
    gte: Optional[Scalar] = None,
    gt: Optional[Scalar] = None,
    lte: Optional[Scalar] = None,
    lt: Optional[Scalar] = None,
) -> Clause:
    """
    Range condition on a field.

    Bounds are given either as a RangeBounds or as keyword arguments, not both.
    One-sided ranges are accepted: range_("timestamp", gte="2024-01-01")
    has no upper bound. Each side takes at most one of its two operators.

    Raises:
        InvalidClause: If no bound is given or a side has two bounds
    """
    keyword_bounds = RangeBounds(gte=gte, gt=gt, lte=lte, lt=lt)
    if bounds is not None and not keyword_bounds.is_empty():
        raise InvalidClause("Pass bounds either as RangeBounds or as keywords", field=field)
    return Clause(ClauseKind.RANGE, field, bounds if bounds is not None else keyword_bounds)


def _flatten(items: Tuple[Any, ...], pure: str) -> Tuple[Node, ...]:
    flat = []
    for item in items:
        if isinstance(item, ClauseGroup) and getattr(item, f"is_pure_{pure}"):
            flat.extend(getattr(item, pure))
        else:
            flat.append(item)
    return tuple(flat)


def and_(*items: Node) -> ClauseGroup:
    """All items must match."""
    return ClauseGroup(must=_flatten(items, "must"))


def or_(*items: Node) -> ClauseGroup:
    """At least one item must match."""
    return ClauseGroup(should=_flatten(items, "should"))


def not_(*items: Node) -> ClauseGroup:
    """None of the items may match."""
    return ClauseGroup(must_not=tuple(items))
