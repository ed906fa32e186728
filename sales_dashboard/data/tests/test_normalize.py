from datetime import date

import pytest

from sales_dashboard.data.errors import InvalidFilterValueError
from sales_dashboard.data.models import AgeRange, DateRange
from sales_dashboard.data.normalize import (
    CoercionPolicy,
    build_sales_query,
    get_all,
    normalize_filters,
    normalize_page,
    normalize_sort,
)


class MultiDict:
    """Minimal stand-in for a framework multidict exposing getlist()."""
    def __init__(self, pairs):
        self.pairs = pairs

    def getlist(self, name):
        return [value for key, value in self.pairs if key == name]

    def get(self, name, default=None):
        values = self.getlist(name)
        return values[0] if values else default


def test_empty_params_give_defaults():
    query = build_sales_query({})
    assert query.filters.is_empty()
    assert query.search == ""
    assert query.sort.sort_by == "date"
    assert query.sort.sort_order == "desc"
    assert query.page.page == 1
    assert query.page.page_size == 10


def test_list_params_accept_str_list_and_multidict():
    assert get_all({"regions": "North"}, "regions") == ["North"]
    assert get_all({"regions": ["North", "South"]}, "regions") == ["North", "South"]
    assert get_all(MultiDict([("regions", "North"), ("regions", "East")]), "regions") == ["North", "East"]
    assert get_all({}, "regions") == []


def test_empty_list_values_are_absent():
    filters = normalize_filters({"regions": ["North", ""], "genders": [""], "paymentMethods": "Cash"})
    assert filters.regions == ["North"]
    assert filters.genders is None
    assert filters.payment_methods == ["Cash"]


def test_age_bounds_parsed():
    filters = normalize_filters({"ageMin": "20", "ageMax": "30"})
    assert filters.age_range == AgeRange(min=20, max=30)

    only_max = normalize_filters({"ageMax": "45"})
    assert only_max.age_range == AgeRange(min=None, max=45)


def test_malformed_age_dropped_when_lenient():
    filters = normalize_filters({"ageMin": "30abc", "ageMax": "x"})
    assert filters.age_range is None


def test_malformed_age_rejected_when_strict():
    with pytest.raises(InvalidFilterValueError) as excinfo:
        normalize_filters({"ageMin": "30abc"}, CoercionPolicy.STRICT)
    assert excinfo.value.parameter == "ageMin"
    assert isinstance(excinfo.value, ValueError)


def test_date_bounds_parsed_and_malformed_dropped():
    filters = normalize_filters({"dateStart": "2023-01-05", "dateEnd": "2023-13-01"})
    assert filters.date_range == DateRange(start=date(2023, 1, 5), end=None)

    assert normalize_filters({"dateStart": "yesterday"}).date_range is None
    with pytest.raises(InvalidFilterValueError):
        normalize_filters({"dateStart": "yesterday"}, "strict")


def test_unknown_sort_falls_back():
    sort = normalize_sort({"sortBy": "price", "sortOrder": "sideways"})
    assert sort.sort_by == "date"
    assert sort.sort_order == "desc"

    sort = normalize_sort({"sortBy": "customerName", "sortOrder": "asc"})
    assert sort.sort_by == "customerName"
    assert sort.sort_order == "asc"


def test_unknown_sort_rejected_when_strict():
    with pytest.raises(InvalidFilterValueError):
        normalize_sort({"sortBy": "price"}, CoercionPolicy.STRICT)


@pytest.mark.parametrize("raw", ["0", "-3", "abc", ""])
def test_bad_page_becomes_first_page(raw):
    assert normalize_page({"page": raw}).page == 1


def test_page_size_defaults_and_clamps():
    assert normalize_page({"pageSize": "0"}).page_size == 10
    assert normalize_page({"pageSize": "0"}, default_page_size=25).page_size == 25
    assert normalize_page({"pageSize": "500"}, max_page_size=100).page_size == 100
    assert normalize_page({"pageSize": "20", "page": "3"}).page_size == 20


def test_bad_page_rejected_when_strict():
    with pytest.raises(InvalidFilterValueError):
        normalize_page({"page": "0"}, CoercionPolicy.STRICT)


def test_full_request():
    params = MultiDict([
        ("search", "bob"),
        ("regions", "North"),
        ("regions", "South"),
        ("tags", "wire"),
        ("ageMin", "18"),
        ("sortBy", "quantity"),
        ("sortOrder", "asc"),
        ("page", "2"),
        ("pageSize", "5"),
    ])
    query = build_sales_query(params, policy="lenient")
    assert query.search == "bob"
    assert query.filters.regions == ["North", "South"]
    assert query.filters.tags == ["wire"]
    assert query.filters.age_range.min == 18
    assert query.sort.sort_by == "quantity"
    assert query.page.page == 2
    assert query.page.page_size == 5


def test_unknown_policy_rejected():
    with pytest.raises(ValueError):
        build_sales_query({}, policy="sloppy")
