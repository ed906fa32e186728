from __future__ import annotations

from typing import Literal, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from ..config import get_config
from .backends.csv_backend import CsvSalesStore
from .backends.sql_backend import SqlSalesStore
from .executor import SalesQueryExecutor
from .interface import SalesStore
from .models import HealthStatus


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Engine for the SQL store: an explicit URL, DATABASE_URL, or a Lakebase instance."""
    config = get_config()
    url = database_url or config.database_url
    if url is None and config.lakebase_instance_name:
        from ..databricks.auth import get_databricks_auth
        url = get_databricks_auth().get_lakebase_url(config.lakebase_instance_name, config.lakebase_database)
    if url is None:
        raise RuntimeError("No database configured: set DATABASE_URL or LAKEBASE_INSTANCE_NAME.")
    connect_args = {"check_same_thread": False} if str(url).startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def get_sales_store(kind: Optional[Literal["csv", "sql"]] = None) -> SalesStore:
    kind = kind or get_config().store_backend
    if kind == "csv":
        # Reads from configured CSV folder
        return CsvSalesStore()
    if kind == "sql":
        return SqlSalesStore(get_engine())
    raise ValueError(f"Unknown sales store kind: {kind}")


def get_query_executor(store: SalesStore) -> SalesQueryExecutor:
    config = get_config()
    return SalesQueryExecutor(
        store,
        timeout=config.query_timeout_seconds,
        mode=config.execution_mode,
    )


def check_health(store: SalesStore) -> HealthStatus:
    """Availability and size of the store, for a health endpoint or status badge."""
    if not store.is_available():
        return HealthStatus(status="error", source=store.source, message="Sales store not available")
    return HealthStatus(status="ok", source=store.source, records=store.count_all())
