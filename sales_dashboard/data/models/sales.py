from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Optional, Tuple

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

CENT = Decimal("0.01")


def to_cents(value: Decimal) -> Decimal:
    """Round to the two decimal places every store keeps, half away from zero."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# Decimals go over the wire as JSON numbers, not strings
Money = Annotated[
    Decimal,
    AfterValidator(to_cents),
    PlainSerializer(float, return_type=float, when_used="json"),
]


def split_tags(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated tag field into trimmed, de-duplicated tags."""
    if not raw:
        return ()
    return _unique_tags(raw.split(","))


def _unique_tags(pieces) -> Tuple[str, ...]:
    stripped = (str(piece).strip() for piece in pieces)
    return tuple(dict.fromkeys(tag for tag in stripped if tag))


class SalesRecord(BaseModel):
    """Response model for one sales transaction."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    date: Optional[datetime] = Field(default=None, description="Transaction timestamp, None when unknown")
    customer_name: str = Field(default="", description="Customer name")
    phone_number: str = Field(default="", description="Customer phone number")
    region: str = Field(default="", description="Customer region")
    gender: str = Field(default="", description="Customer gender")
    age: int = Field(default=0, description="Customer age")
    product_category: str = Field(default="", description="Product category")
    product_name: str = Field(default="", description="Product name")
    quantity: int = Field(default=0, description="Units sold")
    price_per_unit: Money = Field(default=Decimal("0"), description="Unit price")
    discount_percentage: Money = Field(default=Decimal("0"), description="Discount percentage applied")
    total_amount: Money = Field(default=Decimal("0"), description="Amount before discount")
    final_amount: Money = Field(default=Decimal("0"), description="Amount after discount")
    payment_method: str = Field(default="", description="Payment method used")
    tags: Tuple[str, ...] = Field(default=(), description="Product tags")
    order_status: str = Field(default="", description="Order status")

    @field_validator("date")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tag_field(cls, value):
        if value is None or isinstance(value, str):
            return split_tags(value)
        return _unique_tags(value)
