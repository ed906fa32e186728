"""Error types raised by the sales query pipeline.

Callers map these to responses: `StoreUnavailableError` to "service
unavailable", `QueryTimeoutError` to a gateway timeout, and any other
`SalesQueryError` to an internal error. `AggregationError` never reaches a
caller of `SalesQueryExecutor.execute`; it is degraded to zeroed statistics.
"""
from __future__ import annotations

from typing import Optional


class SalesQueryError(Exception):
    """Base class for sales query failures."""


class InvalidFilterValueError(SalesQueryError, ValueError):
    """A request parameter could not be parsed under the strict coercion policy."""

    def __init__(self, parameter: str, value: object) -> None:
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid value for '{parameter}': {value!r}")


class StoreUnavailableError(SalesQueryError):
    """The backing store failed its availability check before a query was attempted."""


class QueryExecutionError(SalesQueryError):
    """A store operation failed while answering a query."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"Sales query '{operation}' failed ({detail})")


class AggregationError(QueryExecutionError):
    """The statistics aggregate failed; recoverable."""

    def __init__(self, cause: Optional[BaseException] = None) -> None:
        super().__init__("aggregate", cause)


class QueryTimeoutError(SalesQueryError):
    """The query did not finish within the caller-supplied timeout."""

    def __init__(self, timeout: float, operation: str = "query") -> None:
        self.timeout = timeout
        self.operation = operation
        super().__init__(f"Sales {operation} exceeded timeout of {timeout:g}s")
