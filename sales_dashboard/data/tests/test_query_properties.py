from datetime import date, datetime

import pytest

from sales_dashboard.data.aggregation import aggregate
from sales_dashboard.data.backends.memory_backend import InMemorySalesStore
from sales_dashboard.data.executor import SalesQueryExecutor
from sales_dashboard.data.models import (
    AgeRange,
    DateRange,
    PageRequest,
    SalesFilters,
    SalesQuery,
    SortSpec,
)
from sales_dashboard.data.predicates import filter_records
from sales_dashboard.data.sorting import sort_records

FILTERS = [
    SalesFilters(),
    SalesFilters(regions=["North", "West"]),
    SalesFilters(tags=["wire", "gift"]),
    SalesFilters(age_range=AgeRange(min=20)),
    SalesFilters(date_range=DateRange(start=date(2023, 1, 20))),
]

SORTS = [SortSpec(sort_by=key, sort_order=order) for key in ("date", "quantity", "customerName") for order in ("asc", "desc")]


@pytest.mark.parametrize("filters", FILTERS)
def test_adding_a_constraint_never_grows_the_set(sample_records, filters):
    base = filter_records(sample_records, filters)
    narrower = filters.model_copy(update={"genders": ["Female"]})
    narrowed = filter_records(sample_records, narrower)
    assert len(narrowed) <= len(base)
    assert all(record in base for record in narrowed)


@pytest.mark.parametrize("filters", FILTERS)
def test_filtering_is_idempotent(sample_records, filters):
    once = filter_records(sample_records, filters)
    assert filter_records(once, filters) == once


@pytest.mark.parametrize("sort", SORTS)
def test_pages_concatenate_to_full_sorted_set(memory_store, sample_records, sort):
    executor = SalesQueryExecutor(memory_store)
    pages = []
    page = 1
    while True:
        result = executor.execute(SalesQuery(sort=sort, page=PageRequest(page=page, page_size=2)))
        pages.extend(result.data)
        if not result.pagination.has_next_page:
            break
        page += 1
    assert pages == sort_records(sample_records, sort)
    assert page == result.pagination.total_pages


@pytest.mark.parametrize("sort", SORTS)
def test_statistics_ignore_sort_and_paging(memory_store, sort):
    executor = SalesQueryExecutor(memory_store)
    baseline = executor.execute(SalesQuery()).statistics
    for page in (1, 2, 7):
        query = SalesQuery(sort=sort, page=PageRequest(page=page, page_size=2))
        assert executor.execute(query).statistics == baseline


def test_newest_first_with_units_total(record_factory):
    store = InMemorySalesStore([
        record_factory(quantity=5, date=datetime(2023, 1, 1)),
        record_factory(quantity=3, date=datetime(2023, 2, 1)),
    ])
    result = SalesQueryExecutor(store).execute(SalesQuery())
    assert [record.date for record in result.data] == [datetime(2023, 2, 1), datetime(2023, 1, 1)]
    assert result.statistics.total_units == 8


def test_inverted_age_range_is_empty_not_an_error(memory_store, sql_store):
    query = SalesQuery(filters=SalesFilters(age_range=AgeRange(min=30, max=20)))
    for store in (memory_store, sql_store):
        result = SalesQueryExecutor(store).execute(query)
        assert result.data == []
        assert result.pagination.total_items == 0


def test_inverted_date_range_is_empty(memory_store):
    query = SalesQuery(filters=SalesFilters(date_range=DateRange(start=date(2023, 3, 1), end=date(2023, 1, 1))))
    assert SalesQueryExecutor(memory_store).execute(query).data == []


def test_tag_substring_example(record_factory):
    clearance = record_factory(customer_name="A", tags="Clearance Sale, Popular")
    premium = record_factory(customer_name="B", tags="Premium")
    matched = filter_records([clearance, premium], SalesFilters(tags=["sale"]))
    assert matched == [clearance]


def test_twenty_five_items_make_three_pages(record_factory):
    store = InMemorySalesStore(record_factory(customer_name=f"c{i:02d}") for i in range(25))
    query = SalesQuery(page=PageRequest(page=3, page_size=10))
    result = SalesQueryExecutor(store).execute(query)
    assert result.pagination.total_pages == 3
    assert len(result.data) == 5
    assert not result.pagination.has_next_page
    assert result.pagination.has_previous_page


def test_aggregate_matches_executor_statistics(memory_store, sample_records):
    filters = SalesFilters(categories=["Electronics"])
    totals = aggregate(filter_records(sample_records, filters))
    statistics = SalesQueryExecutor(memory_store).execute(SalesQuery(filters=filters)).statistics
    assert statistics.total_units == totals.total_units
    assert statistics.total_amount == totals.total_amount
    assert statistics.total_discount == totals.total_discount
