from __future__ import annotations

from datetime import datetime
from functools import cmp_to_key
from typing import Iterable, List

from .models import SalesRecord, SortKey, SortOrder, SortSpec

# Missing dates sort as the earliest possible instant
EARLIEST = datetime.min


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def _sort_value(record: SalesRecord, sort_by: SortKey):
    if sort_by == "quantity":
        return record.quantity or 0
    if sort_by == "customerName":
        return (record.customer_name or "").lower()
    return record.date or EARLIEST


def compare(a: SalesRecord, b: SalesRecord, sort: SortSpec) -> int:
    """Three-way compare of two records; descending flips the sign."""
    result = _cmp(_sort_value(a, sort.sort_by), _sort_value(b, sort.sort_by))
    return -result if sort.sort_order == "desc" else result


def sort_records(records: Iterable[SalesRecord], sort: SortSpec) -> List[SalesRecord]:
    """Stable sort: equal keys keep their input order in either direction."""
    return sorted(records, key=cmp_to_key(lambda a, b: compare(a, b, sort)))


def default_sort_order(sort_by: SortKey) -> SortOrder:
    """Direction used the first time a key is selected: newest first for dates."""
    return "desc" if sort_by == "date" else "asc"


def next_sort_state(current: SortSpec, selected: SortKey) -> SortSpec:
    """Reselecting the active key toggles direction; a new key starts at its default."""
    if selected == current.sort_by:
        flipped: SortOrder = "asc" if current.sort_order == "desc" else "desc"
        return SortSpec(sort_by=selected, sort_order=flipped)
    return SortSpec(sort_by=selected, sort_order=default_sort_order(selected))
