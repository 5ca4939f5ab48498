"""
Error taxonomy for query building and execution.

Local errors (InvalidClause, InvalidSpec) are raised before any network call.
Backend errors (BackendUnreachable, BackendRejected, MalformedResponse) are
raised by the executor. Nothing here retries.
"""

from typing import Optional


class QueryError(Exception):
    """Base class for all elastic_query errors."""


class InvalidClause(QueryError, ValueError):
    """A single clause could not be built from the given operands."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{message} (field: {field})"
        super().__init__(message)


class InvalidSpec(QueryError, ValueError):
    """A clause group or query spec violates one of its invariants."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{message} (field: {field})"
        super().__init__(message)


class BackendUnreachable(QueryError):
    """Connection to the search backend failed."""


class BackendTimeout(BackendUnreachable):
    """The backend did not answer, or answered with partial results, in time."""


class BackendRejected(QueryError):
    """The backend answered with an HTTP error status."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class MalformedResponse(QueryError):
    """The backend response does not have the expected structure."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message} (at: {path})"
        super().__init__(message)
