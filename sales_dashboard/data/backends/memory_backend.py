from __future__ import annotations

from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..aggregation import aggregate
from ..interface import SalesStore
from ..models import (
    DateBounds,
    FilterOptions,
    IntBounds,
    SalesFilters,
    SalesRecord,
    SalesTotals,
    SortSpec,
)
from ..predicates import filter_records
from ..sorting import sort_records


class InMemorySalesReader:
    """Filters its pinned record tuple once, then serves every operation from that list."""

    def __init__(self, records: Tuple[SalesRecord, ...], filters: SalesFilters, search: Optional[str]) -> None:
        self._records = records
        self._filters = filters
        self._search = search
        self._matched: Optional[List[SalesRecord]] = None

    @property
    def matched(self) -> List[SalesRecord]:
        if self._matched is None:
            self._matched = filter_records(self._records, self._filters, self._search)
        return self._matched

    def count(self) -> int:
        return len(self.matched)

    def find(self, sort: SortSpec, skip: int, limit: int) -> List[SalesRecord]:
        return sort_records(self.matched, sort)[skip:skip + limit]

    def aggregate(self) -> SalesTotals:
        return aggregate(self.matched)


class InMemorySalesStore(SalesStore):
    """
    In-memory implementation.
    - Holds an immutable tuple of records; `replace_records` swaps it atomically.
    - Each reader pins the tuple current when it was opened, so count, page and
      statistics always come from one snapshot.
    """

    source = "memory"
    snapshot_reads = True

    def __init__(self, records: Iterable[SalesRecord] = ()) -> None:
        self._records: Tuple[SalesRecord, ...] = tuple(records)

    @property
    def records(self) -> Tuple[SalesRecord, ...]:
        return self._records

    def replace_records(self, records: Iterable[SalesRecord]) -> None:
        self._records = tuple(records)

    # ---------- interface implementation ----------

    def is_available(self) -> bool:
        return self._records is not None

    @contextmanager
    def reader(self, filters: SalesFilters, search: Optional[str] = "") -> Iterator[InMemorySalesReader]:
        yield InMemorySalesReader(self._records, filters, search)

    def count_all(self) -> int:
        return len(self._records)

    def get_filter_options(self) -> FilterOptions:
        return build_filter_options(self._records)


def _distinct(values: Iterable[str]) -> List[str]:
    return sorted({value for value in values if value})


def build_filter_options(records: Sequence[SalesRecord]) -> FilterOptions:
    """Sorted distinct values and bounds over `records`."""
    ages = [record.age for record in records]
    dates = [record.date for record in records if record.date is not None]
    return FilterOptions(
        regions=_distinct(record.region for record in records),
        genders=_distinct(record.gender for record in records),
        categories=_distinct(record.product_category for record in records),
        tags=_distinct(tag for record in records for tag in record.tags),
        payment_methods=_distinct(record.payment_method for record in records),
        age_range=IntBounds(min=min(ages), max=max(ages)) if ages else IntBounds(min=0, max=100),
        date_range=DateBounds(min=min(dates).date(), max=max(dates).date()) if dates else None,
    )
