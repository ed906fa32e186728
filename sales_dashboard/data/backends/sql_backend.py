from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from sqlalchemy import and_, false, func, or_, select, text, true
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from ...app_logging import get_logger
from ..aggregation import discount_from_sums
from ..interface import SalesStore
from ..models import (
    DateBounds,
    FilterOptions,
    IntBounds,
    SalesFilters,
    SalesRecord,
    SalesTotals,
    SortSpec,
)
from ..predicates import normalize_search
from .sql_schema import RECORD_COLUMNS, sale_tags, sales

logger = get_logger(__name__)

# Dialects whose REPEATABLE READ isolation gives every statement in a
# transaction the same snapshot
SNAPSHOT_DIALECTS = {"postgresql"}

# Bound parameters must fit a signed 64-bit integer
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ---------- pushdown translation ----------

def _contains(column, needle: str) -> ColumnElement:
    return func.lower(column).contains(needle, autoescape=True)


def _age_conditions(low: Optional[int], high: Optional[int]) -> List[ColumnElement]:
    """Inclusive age bounds; a bound beyond the 64-bit range matches all or nothing."""
    conditions: List[ColumnElement] = []
    if low is not None:
        if low > INT64_MAX:
            conditions.append(false())
        elif low > INT64_MIN:
            conditions.append(sales.c.age >= low)
    if high is not None:
        if high < INT64_MIN:
            conditions.append(false())
        elif high < INT64_MAX:
            conditions.append(sales.c.age <= high)
    return conditions


def build_conditions(filters: SalesFilters, search: Optional[str] = "") -> List[ColumnElement]:
    """
    WHERE clauses selecting exactly what `predicates.matches` selects.

    Returned in the evaluator's order: search, membership, age, tags, date.
    """
    conditions: List[ColumnElement] = []

    needle = normalize_search(search)
    if needle:
        conditions.append(or_(_contains(sales.c.customer_name, needle), _contains(sales.c.phone_number, needle)))

    if filters.regions is not None:
        conditions.append(sales.c.region.in_(filters.regions))
    if filters.genders is not None:
        conditions.append(sales.c.gender.in_(filters.genders))
    if filters.categories is not None:
        conditions.append(sales.c.product_category.in_(filters.categories))
    if filters.payment_methods is not None:
        conditions.append(sales.c.payment_method.in_(filters.payment_methods))

    if filters.age_range is not None:
        conditions.extend(_age_conditions(filters.age_range.min, filters.age_range.max))

    if filters.tags is not None:
        any_tag = or_(*[_contains(sale_tags.c.tag, wanted.lower()) for wanted in filters.tags])
        conditions.append(
            select(sale_tags.c.sale_id)
            .where(sale_tags.c.sale_id == sales.c.id, any_tag)
            .exists()
        )

    if filters.date_range is not None:
        # NULL dates fail both comparisons, so undated rows never match
        if filters.date_range.start is not None:
            conditions.append(sales.c.date >= filters.date_range.start_instant)
        if filters.date_range.end is not None:
            conditions.append(sales.c.date <= filters.date_range.end_instant)

    return conditions


def build_order_by(sort: SortSpec, dialect: Optional[str] = None) -> list:
    """ORDER BY matching `sorting.compare`, with row id as the stable tie-breaker."""
    if sort.sort_by == "quantity":
        key = sales.c.quantity
    elif sort.sort_by == "customerName":
        key = func.lower(sales.c.customer_name)
        if dialect == "postgresql":
            # code point order; locale collations skip spaces and punctuation
            key = key.collate("C")
    else:
        key = sales.c.date

    if sort.sort_order == "asc":
        ordered = key.asc().nulls_first() if sort.sort_by == "date" else key.asc()
    else:
        ordered = key.desc().nulls_last() if sort.sort_by == "date" else key.desc()
    return [ordered, sales.c.id.asc()]


# ---------- reader ----------

class SqlSalesReader:
    """Issues count, find and aggregate on one connection inside one transaction."""

    def __init__(self, conn: Connection, filters: SalesFilters, search: Optional[str]) -> None:
        self._conn = conn
        self._where = and_(true(), *build_conditions(filters, search))

    def count(self) -> int:
        stmt = select(func.count()).select_from(sales).where(self._where)
        return int(self._conn.execute(stmt).scalar_one())

    def find(self, sort: SortSpec, skip: int, limit: int) -> List[SalesRecord]:
        if skip > INT64_MAX:
            return []
        stmt = (
            select(sales)
            .where(self._where)
            .order_by(*build_order_by(sort, self._conn.dialect.name))
            .offset(skip)
            .limit(min(limit, INT64_MAX))
        )
        rows = self._conn.execute(stmt).mappings().all()
        tags = self._tags_for([row["id"] for row in rows])
        return [
            SalesRecord.model_validate(
                {**{name: row[name] for name in RECORD_COLUMNS}, "tags": tags.get(row["id"], ())}
            )
            for row in rows
        ]

    def aggregate(self) -> SalesTotals:
        stmt = select(
            func.sum(sales.c.quantity).label("units"),
            func.sum(sales.c.total_amount).label("total_sum"),
            func.sum(sales.c.final_amount).label("final_sum"),
        ).where(self._where)
        row = self._conn.execute(stmt).one()
        return SalesTotals(
            total_units=int(row.units or 0),
            total_amount=row.final_sum or 0,
            total_discount=discount_from_sums(row.total_sum, row.final_sum),
        )

    def _tags_for(self, ids: List[int]) -> Dict[int, List[str]]:
        if not ids:
            return {}
        stmt = (
            select(sale_tags.c.sale_id, sale_tags.c.tag)
            .where(sale_tags.c.sale_id.in_(ids))
            .order_by(sale_tags.c.sale_id, sale_tags.c.position)
        )
        tags: Dict[int, List[str]] = {}
        for sale_id, tag in self._conn.execute(stmt):
            tags.setdefault(sale_id, []).append(tag)
        return tags


# ---------- store ----------

class SqlSalesStore(SalesStore):
    """
    SQL implementation (Lakebase/PostgreSQL in deployment, SQLite locally).
    - Filters, sort, paging and sums are pushed down to the database.
    - Each reader holds one connection and one transaction; on PostgreSQL the
      transaction runs at REPEATABLE READ so count, page and statistics share a
      snapshot. Other dialects do not guarantee this and report
      `snapshot_reads = False`.
    """

    source = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.snapshot_reads = engine.dialect.name in SNAPSHOT_DIALECTS

    def is_available(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning(f"Sales database unavailable: {e}")
            return False
        return True

    @contextmanager
    def reader(self, filters: SalesFilters, search: Optional[str] = "") -> Iterator[SqlSalesReader]:
        conn = self.engine.connect()
        if self.snapshot_reads:
            conn = conn.execution_options(isolation_level="REPEATABLE READ")
        try:
            with conn.begin():
                yield SqlSalesReader(conn, filters, search)
        finally:
            conn.close()

    def count_all(self) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(sales)).scalar_one())

    def get_filter_options(self) -> FilterOptions:
        with self.engine.connect() as conn:
            def distinct(column) -> List[str]:
                # sorted client-side so ordering does not depend on the database collation
                stmt = select(column).where(column != "").distinct()
                return sorted(conn.execute(stmt).scalars())

            tag_values = conn.execute(select(sale_tags.c.tag).distinct()).scalars()
            ages = conn.execute(select(func.min(sales.c.age), func.max(sales.c.age))).one()
            dates = conn.execute(select(func.min(sales.c.date), func.max(sales.c.date))).one()

            return FilterOptions(
                regions=distinct(sales.c.region),
                genders=distinct(sales.c.gender),
                categories=distinct(sales.c.product_category),
                tags=sorted(set(tag_values)),
                payment_methods=distinct(sales.c.payment_method),
                age_range=IntBounds(min=ages[0], max=ages[1]) if ages[0] is not None else IntBounds(min=0, max=100),
                date_range=DateBounds(min=dates[0].date(), max=dates[1].date()) if dates[0] is not None else None,
            )
