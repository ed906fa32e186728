from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .data_filters import SalesFilters

SortKey = Literal["date", "quantity", "customerName"]
SortOrder = Literal["asc", "desc"]

SORT_KEYS = ("date", "quantity", "customerName")
SORT_ORDERS = ("asc", "desc")


class SortSpec(BaseModel):
    """Sort key and direction for the sales table."""
    model_config = ConfigDict(frozen=True)

    sort_by: SortKey = Field(default="date", description="Field to sort by")
    sort_order: SortOrder = Field(default="desc", description="Sort direction")


class PageRequest(BaseModel):
    """1-based page number and page size."""
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1, description="Page number, starting at 1")
    page_size: int = Field(default=10, gt=0, description="Records per page")


class SalesQuery(BaseModel):
    """Everything needed to answer one dashboard request."""
    model_config = ConfigDict(frozen=True)

    filters: SalesFilters = Field(default_factory=SalesFilters)
    search: str = Field(default="", description="Free-text search on customer name or phone number")
    sort: SortSpec = Field(default_factory=SortSpec)
    page: PageRequest = Field(default_factory=PageRequest)
