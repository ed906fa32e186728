from __future__ import annotations

from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

END_OF_DAY = time(23, 59, 59, 999000)


class AgeRange(BaseModel):
    """Inclusive age bounds; either bound may be open."""
    model_config = ConfigDict(frozen=True)

    min: Optional[int] = Field(default=None, description="Minimum age (inclusive)")
    max: Optional[int] = Field(default=None, description="Maximum age (inclusive)")

    def is_open(self) -> bool:
        return self.min is None and self.max is None


class DateRange(BaseModel):
    """Inclusive calendar-date bounds; `end` covers the whole day."""
    model_config = ConfigDict(frozen=True)

    start: Optional[date] = Field(default=None, description="First day of the range")
    end: Optional[date] = Field(default=None, description="Last day of the range")

    def is_open(self) -> bool:
        return self.start is None and self.end is None

    @property
    def start_instant(self) -> Optional[datetime]:
        return datetime.combine(self.start, time.min) if self.start is not None else None

    @property
    def end_instant(self) -> Optional[datetime]:
        return datetime.combine(self.end, END_OF_DAY) if self.end is not None else None


class SalesFilters(BaseModel):
    """Filters for the sales data. An absent field places no constraint."""
    model_config = ConfigDict(frozen=True)

    regions: Optional[List[str]] = Field(default=None, description="Customer regions to include")
    genders: Optional[List[str]] = Field(default=None, description="Customer genders to include")
    categories: Optional[List[str]] = Field(default=None, description="Product categories to include")
    payment_methods: Optional[List[str]] = Field(default=None, description="Payment methods to include")
    age_range: Optional[AgeRange] = Field(default=None, description="Inclusive customer age range")
    date_range: Optional[DateRange] = Field(default=None, description="Inclusive transaction date range")
    tags: Optional[List[str]] = Field(default=None, description="Tag substrings; any one may match")

    @field_validator("regions", "genders", "categories", "payment_methods", "tags")
    @classmethod
    def _empty_list_is_absent(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return value or None

    @field_validator("age_range", "date_range")
    @classmethod
    def _open_range_is_absent(cls, value):
        if value is not None and value.is_open():
            return None
        return value

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)
