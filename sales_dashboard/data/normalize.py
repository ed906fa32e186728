"""Turn raw request parameters into a canonical `SalesQuery`.

Parameters arrive as a multi-valued string map: a plain dict whose values are
strings or lists of strings (as from `urllib.parse.parse_qs`), or any mapping
with a `getlist` method (Starlette/Werkzeug multidicts).

Malformed scalars are handled by a named coercion policy. Under
`CoercionPolicy.LENIENT` an unparsable value is treated as unset; under
`CoercionPolicy.STRICT` it raises `InvalidFilterValueError`.
"""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, List, Mapping, Optional

from .errors import InvalidFilterValueError
from .models import (
    SORT_KEYS,
    SORT_ORDERS,
    AgeRange,
    DateRange,
    PageRequest,
    SalesFilters,
    SalesQuery,
    SortSpec,
)

DATE_FORMAT = "%Y-%m-%d"

# request parameter -> SalesFilters field
LIST_PARAMS = {
    "regions": "regions",
    "genders": "genders",
    "categories": "categories",
    "paymentMethods": "payment_methods",
    "tags": "tags",
}


class CoercionPolicy(str, Enum):
    LENIENT = "lenient"
    STRICT = "strict"


def get_all(params: Mapping[str, Any], name: str) -> List[str]:
    """All values supplied for `name`, in order."""
    if hasattr(params, "getlist"):
        return list(params.getlist(name))
    value = params.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def get_one(params: Mapping[str, Any], name: str) -> Optional[str]:
    """First non-empty value supplied for `name`, stripped."""
    for value in get_all(params, name):
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def parse_int(
    name: str, raw: Optional[str], policy: CoercionPolicy = CoercionPolicy.LENIENT
) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        if policy == CoercionPolicy.STRICT:
            raise InvalidFilterValueError(name, raw) from None
        return None


def parse_date(
    name: str, raw: Optional[str], policy: CoercionPolicy = CoercionPolicy.LENIENT
) -> Optional[date]:
    if raw is None:
        return None
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        if policy == CoercionPolicy.STRICT:
            raise InvalidFilterValueError(name, raw) from None
        return None


def normalize_filters(
    params: Mapping[str, Any], policy: CoercionPolicy = CoercionPolicy.LENIENT
) -> SalesFilters:
    """Build the filter set from raw parameters, dropping anything unusable."""
    fields = {}
    for param, field in LIST_PARAMS.items():
        values = [v for v in get_all(params, param) if v is not None and str(v).strip()]
        if values:
            fields[field] = values

    age_min = parse_int("ageMin", get_one(params, "ageMin"), policy)
    age_max = parse_int("ageMax", get_one(params, "ageMax"), policy)
    if age_min is not None or age_max is not None:
        fields["age_range"] = AgeRange(min=age_min, max=age_max)

    start = parse_date("dateStart", get_one(params, "dateStart"), policy)
    end = parse_date("dateEnd", get_one(params, "dateEnd"), policy)
    if start is not None or end is not None:
        fields["date_range"] = DateRange(start=start, end=end)

    return SalesFilters(**fields)


def normalize_sort(
    params: Mapping[str, Any], policy: CoercionPolicy = CoercionPolicy.LENIENT
) -> SortSpec:
    sort_by = get_one(params, "sortBy") or "date"
    sort_order = get_one(params, "sortOrder") or "desc"
    if sort_by not in SORT_KEYS:
        if policy == CoercionPolicy.STRICT:
            raise InvalidFilterValueError("sortBy", sort_by)
        sort_by = "date"
    if sort_order not in SORT_ORDERS:
        if policy == CoercionPolicy.STRICT:
            raise InvalidFilterValueError("sortOrder", sort_order)
        sort_order = "desc"
    return SortSpec(sort_by=sort_by, sort_order=sort_order)


def normalize_page(
    params: Mapping[str, Any],
    policy: CoercionPolicy = CoercionPolicy.LENIENT,
    default_page_size: int = 10,
    max_page_size: Optional[int] = None,
) -> PageRequest:
    page = parse_int("page", get_one(params, "page"), policy)
    page_size = parse_int("pageSize", get_one(params, "pageSize"), policy)

    if page is not None and page < 1:
        if policy == CoercionPolicy.STRICT:
            raise InvalidFilterValueError("page", page)
        page = None
    if page_size is not None and page_size < 1:
        if policy == CoercionPolicy.STRICT:
            raise InvalidFilterValueError("pageSize", page_size)
        page_size = None

    page_size = page_size or default_page_size
    if max_page_size is not None:
        page_size = min(page_size, max_page_size)
    return PageRequest(page=page or 1, page_size=page_size)


def build_sales_query(
    params: Mapping[str, Any],
    policy: CoercionPolicy = CoercionPolicy.LENIENT,
    default_page_size: int = 10,
    max_page_size: Optional[int] = None,
) -> SalesQuery:
    """Normalize a full dashboard request: filters, search, sort and page."""
    policy = CoercionPolicy(policy)
    search_values = get_all(params, "search")
    return SalesQuery(
        filters=normalize_filters(params, policy),
        search=search_values[0] if search_values else "",
        sort=normalize_sort(params, policy),
        page=normalize_page(params, policy, default_page_size, max_page_size),
    )
