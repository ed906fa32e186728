"""Reference filter semantics for sales records.

`matches` is the single definition of which records a `SalesFilters` plus a
search term selects. Every constraint is ANDed with the others; search and
tags are independent constraints. Any store that pushes filters down to a
query language must select exactly the records `matches` accepts.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import SalesFilters, SalesRecord


def normalize_search(search: Optional[str]) -> str:
    """Lower-cased, trimmed search term; empty means no search constraint."""
    return (search or "").strip().lower()


def matches_search(record: SalesRecord, needle: str) -> bool:
    if not needle:
        return True
    return needle in record.customer_name.lower() or needle in record.phone_number.lower()


def matches_membership(record: SalesRecord, filters: SalesFilters) -> bool:
    if filters.regions is not None and record.region not in filters.regions:
        return False
    if filters.genders is not None and record.gender not in filters.genders:
        return False
    if filters.categories is not None and record.product_category not in filters.categories:
        return False
    if filters.payment_methods is not None and record.payment_method not in filters.payment_methods:
        return False
    return True


def matches_age(record: SalesRecord, filters: SalesFilters) -> bool:
    age_range = filters.age_range
    if age_range is None:
        return True
    if age_range.min is not None and record.age < age_range.min:
        return False
    if age_range.max is not None and record.age > age_range.max:
        return False
    return True


def matches_tags(record: SalesRecord, filters: SalesFilters) -> bool:
    if filters.tags is None:
        return True
    record_tags = [tag.lower() for tag in record.tags]
    return any(
        wanted.lower() in tag
        for wanted in filters.tags
        for tag in record_tags
    )


def matches_date(record: SalesRecord, filters: SalesFilters) -> bool:
    date_range = filters.date_range
    if date_range is None:
        return True
    if record.date is None:
        return False
    start, end = date_range.start_instant, date_range.end_instant
    if start is not None and record.date < start:
        return False
    if end is not None and record.date > end:
        return False
    return True


def matches(record: SalesRecord, filters: SalesFilters, search: Optional[str] = "") -> bool:
    """Whether `record` satisfies every active constraint."""
    return (
        matches_search(record, normalize_search(search))
        and matches_membership(record, filters)
        and matches_age(record, filters)
        and matches_tags(record, filters)
        and matches_date(record, filters)
    )


def filter_records(
    records: Iterable[SalesRecord], filters: SalesFilters, search: Optional[str] = ""
) -> List[SalesRecord]:
    """Matching records, in input order."""
    return [record for record in records if matches(record, filters, search)]
