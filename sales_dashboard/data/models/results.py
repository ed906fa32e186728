from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .sales import Money, SalesRecord


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class PaginationInfo(_WireModel):
    """Pagination metadata for the full filtered set."""
    current_page: int = Field(description="Requested page number")
    page_size: int = Field(description="Records per page")
    total_items: int = Field(description="Records matching the filters")
    total_pages: int = Field(description="Number of pages for total_items")
    has_next_page: bool = Field(description="Whether a later page holds records")
    has_previous_page: bool = Field(description="Whether this is not the first page")


class SalesTotals(_WireModel):
    """Aggregate totals over a filtered set."""
    total_units: int = Field(default=0, description="SUM(quantity)")
    total_amount: Money = Field(default=Decimal("0"), description="SUM(final_amount)")
    total_discount: Money = Field(default=Decimal("0"), description="SUM(total_amount) - SUM(final_amount), floored at 0")


class SalesStatistics(SalesTotals):
    """Totals plus the size of the filtered set they were computed over."""
    total_records: int = Field(default=0, description="Records matching the filters")


class SalesQueryResult(_WireModel):
    """Response envelope for one sales query."""
    data: List[SalesRecord] = Field(description="Records on the requested page, in sort order")
    pagination: PaginationInfo
    statistics: SalesStatistics
    snapshot_consistent: bool = Field(
        default=True,
        exclude=True,
        description="Whether count, page and statistics were read from one snapshot",
    )
    statistics_error: Optional[str] = Field(
        default=None,
        exclude=True,
        description="Why statistics were zeroed, if the aggregate failed",
    )
