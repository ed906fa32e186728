from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class IntBounds(BaseModel):
    """Response model for integer bounds data."""
    min: int = Field(description="Smallest value")
    max: int = Field(description="Largest value")


class DateBounds(BaseModel):
    """Response model for date bounds data."""
    min: date = Field(description="Earliest date")
    max: date = Field(description="Latest date")


class FilterOptions(BaseModel):
    """Values available to populate the dashboard's filter controls."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    regions: List[str] = Field(default_factory=list, description="Distinct customer regions")
    genders: List[str] = Field(default_factory=list, description="Distinct genders")
    categories: List[str] = Field(default_factory=list, description="Distinct product categories")
    tags: List[str] = Field(default_factory=list, description="Distinct individual tags")
    payment_methods: List[str] = Field(default_factory=list, description="Distinct payment methods")
    age_range: IntBounds = Field(default_factory=lambda: IntBounds(min=0, max=100), description="Age bounds")
    date_range: Optional[DateBounds] = Field(default=None, description="Transaction date bounds")


class HealthStatus(BaseModel):
    """Response model for the store health check."""
    status: Literal["ok", "error"] = Field(description="Overall status")
    source: str = Field(description="Kind of store answering queries")
    records: Optional[int] = Field(default=None, description="Records held by the store")
    message: Optional[str] = Field(default=None, description="Error detail when unavailable")
