# sales_dashboard/data/interface.py
from __future__ import annotations

from typing import ContextManager, List, Optional, Protocol

from .models import (
    FilterOptions,
    SalesFilters,
    SalesRecord,
    SalesTotals,
    SortSpec,
)


# ---- Reader over one filtered set ----

class SalesReader(Protocol):
    """
    Count, page and aggregate over the records selected by one filter set.

    A reader is bound to the filters and search term it was opened with. All
    three operations answer for that same logical set; whether they also see
    the same data version is declared by the owning store's `snapshot_reads`.
    """

    def count(self) -> int:
        """Number of matching records."""
        ...

    def find(self, sort: SortSpec, skip: int, limit: int) -> List[SalesRecord]:
        """Matching records in sort order, `limit` of them starting at `skip`."""
        ...

    def aggregate(self) -> SalesTotals:
        """Units, amount and discount totals over every matching record."""
        ...


# ---- Store protocol ----

class SalesStore(Protocol):
    """
    Backend-agnostic contract for the query executor and the dashboard.

    Implementations MUST select exactly the records accepted by
    `sales_dashboard.data.predicates.matches`, and MUST NOT cache query
    results between readers.
    """

    source: str
    snapshot_reads: bool  # True when one reader's operations share a data snapshot

    def is_available(self) -> bool:
        """Capability check performed before every query."""
        ...

    def reader(self, filters: SalesFilters, search: Optional[str] = "") -> ContextManager[SalesReader]:
        """Open a reader over the records matching `filters` and `search`."""
        ...

    def count_all(self) -> int:
        """Total records held, ignoring filters."""
        ...

    def get_filter_options(self) -> FilterOptions:
        """Distinct values and bounds used to populate filter controls."""
        ...
