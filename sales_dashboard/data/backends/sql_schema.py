"""Table definitions and bulk loading for the SQL sales store.

Tags live in a child table, one row per tag, so tag matching can be done per
tag exactly as the in-memory predicate does it.
"""
from __future__ import annotations

from typing import Iterable, List

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    delete,
    insert,
    select,
)
from sqlalchemy.engine import Engine

from ...app_logging import get_logger
from ..models import SalesRecord

logger = get_logger(__name__)

metadata = MetaData()

sales = Table(
    "sales",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("date", DateTime, nullable=True),
    Column("customer_name", String(255), nullable=False, default=""),
    Column("phone_number", String(64), nullable=False, default=""),
    Column("region", String(64), nullable=False, default=""),
    Column("gender", String(32), nullable=False, default=""),
    Column("age", Integer, nullable=False, default=0),
    Column("product_category", String(128), nullable=False, default=""),
    Column("product_name", String(255), nullable=False, default=""),
    Column("quantity", Integer, nullable=False, default=0),
    Column("price_per_unit", Numeric(14, 2), nullable=False, default=0),
    Column("discount_percentage", Numeric(6, 2), nullable=False, default=0),
    Column("total_amount", Numeric(14, 2), nullable=False, default=0),
    Column("final_amount", Numeric(14, 2), nullable=False, default=0),
    Column("payment_method", String(64), nullable=False, default=""),
    Column("order_status", String(64), nullable=False, default=""),
    Index("ix_sales_region", "region"),
    Index("ix_sales_gender", "gender"),
    Index("ix_sales_age", "age"),
    Index("ix_sales_product_category", "product_category"),
    Index("ix_sales_payment_method", "payment_method"),
    Index("ix_sales_date", "date"),
    Index("ix_sales_quantity", "quantity"),
)

sale_tags = Table(
    "sale_tags",
    metadata,
    Column("sale_id", Integer, ForeignKey("sales.id", ondelete="CASCADE"), primary_key=True),
    Column("position", Integer, primary_key=True),
    Column("tag", String(128), nullable=False),
)

RECORD_COLUMNS = [column.name for column in sales.columns if column.name != "id"]


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)


def load_records(
    engine: Engine,
    records: Iterable[SalesRecord],
    batch_size: int = 1000,
    replace: bool = True,
) -> int:
    """Insert records in batches, keeping their order as row ids. Returns rows inserted."""
    records = list(records)
    create_schema(engine)
    inserted = 0
    with engine.begin() as conn:
        if replace:
            conn.execute(delete(sale_tags))
            conn.execute(delete(sales))
        next_id = conn.execute(select(sales.c.id).order_by(sales.c.id.desc()).limit(1)).scalar() or 0

        for start in range(0, len(records), batch_size):
            batch: List[SalesRecord] = records[start:start + batch_size]
            sale_rows = []
            tag_rows = []
            for offset, record in enumerate(batch, start=1):
                sale_id = next_id + start + offset
                sale_rows.append({"id": sale_id, **record.model_dump(include=set(RECORD_COLUMNS))})
                tag_rows.extend(
                    {"sale_id": sale_id, "position": position, "tag": tag}
                    for position, tag in enumerate(record.tags)
                )
            conn.execute(insert(sales), sale_rows)
            if tag_rows:
                conn.execute(insert(sale_tags), tag_rows)
            inserted += len(sale_rows)
            logger.info(f"Inserted {inserted} / {len(records)} sales records")
    return inserted
