from .sales import SalesRecord, split_tags

from .data_filters import (
    AgeRange,
    DateRange,
    SalesFilters,
)

from .query import (
    PageRequest,
    SalesQuery,
    SortSpec,
    SortKey,
    SortOrder,
    SORT_KEYS,
    SORT_ORDERS,
)
from .results import (
    PaginationInfo,
    SalesTotals,
    SalesStatistics,
    SalesQueryResult,
)
from .list_response import (
    IntBounds,
    DateBounds,
    FilterOptions,
    HealthStatus,
)

__all__ = [
    # Records
    "SalesRecord",
    "split_tags",
    # Filter classes
    "AgeRange",
    "DateRange",
    "SalesFilters",
    # Query classes
    "PageRequest",
    "SalesQuery",
    "SortSpec",
    "SortKey",
    "SortOrder",
    "SORT_KEYS",
    "SORT_ORDERS",
    # Response models
    "PaginationInfo",
    "SalesTotals",
    "SalesStatistics",
    "SalesQueryResult",
    # List response models
    "IntBounds",
    "DateBounds",
    "FilterOptions",
    "HealthStatus",
]
