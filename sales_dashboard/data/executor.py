"""Answer one dashboard query: count, page and statistics over one filtered set.

Two execution modes:

- ``snapshot`` (default): a single store reader serves all three operations.
  With the in-memory store they are derived from one materialized filtered
  list; with the SQL store they run in one transaction, which is a true
  snapshot only where the store declares ``snapshot_reads``.
- ``parallel``: the three operations run concurrently on independent readers
  to cut latency. Results are then never flagged as snapshot-consistent,
  since a write landing between them can make count, page and statistics
  disagree.

Failure policy: count or page failures fail the request with
`QueryExecutionError`; an aggregate failure zeroes the statistics block and
keeps the page. A caller-supplied timeout bounds the whole unit of work,
the store availability check included.
"""
from __future__ import annotations

import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, List, Literal, Optional, Tuple, TypeVar

from ..app_logging import get_logger
from .errors import (
    AggregationError,
    QueryExecutionError,
    QueryTimeoutError,
    SalesQueryError,
    StoreUnavailableError,
)
from .interface import SalesReader, SalesStore
from .models import (
    PaginationInfo,
    SalesQuery,
    SalesQueryResult,
    SalesRecord,
    SalesStatistics,
    SalesTotals,
)
from .pagination import page_offset, paginate

ExecutionMode = Literal["snapshot", "parallel"]
T = TypeVar("T")

logger = get_logger(__name__)


def run_step(operation: str, fn: Callable[..., T], *args) -> T:
    """Run one store operation, tagging any failure with the operation name."""
    try:
        return fn(*args)
    except SalesQueryError:
        raise
    except Exception as e:
        if operation == "aggregate":
            raise AggregationError(e) from e
        raise QueryExecutionError(operation, e) from e


class SalesQueryExecutor:
    """Executes `SalesQuery` objects against an injected `SalesStore`."""

    def __init__(
        self,
        store: SalesStore,
        timeout: Optional[float] = None,
        mode: ExecutionMode = "snapshot",
        max_workers: int = 4,
    ) -> None:
        if mode not in ("snapshot", "parallel"):
            raise ValueError(f"Unknown execution mode: {mode}")
        self.store = store
        self.timeout = timeout
        self.mode = mode
        self.max_workers = max_workers
        self._pool: Optional[ThreadPoolExecutor] = None

    # ---------- lifecycle ----------

    def _get_pool(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="sales-query")
        return self._pool

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=False, cancel_futures=True)
            self._pool = None

    def __enter__(self) -> "SalesQueryExecutor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ---------- execution ----------

    def execute(self, query: SalesQuery) -> SalesQueryResult:
        t0 = time.perf_counter()
        if self.mode == "parallel":
            result = self._execute_parallel(query)
        elif self.timeout is None:
            result = self._execute_snapshot(query)
        else:
            future = self._get_pool().submit(self._execute_snapshot, query)
            try:
                result = future.result(timeout=self.timeout)
            except FuturesTimeoutError:
                future.cancel()
                raise QueryTimeoutError(self.timeout) from None

        logger.debug(
            f"{self.store.source} query ({self.mode}) matched {result.pagination.total_items} records "
            f"in {(time.perf_counter() - t0) * 1000.0:.2f} ms"
        )
        return result

    def _execute_snapshot(self, query: SalesQuery) -> SalesQueryResult:
        self._check_available()
        try:
            with self.store.reader(query.filters, query.search) as reader:
                total = run_step("count", reader.count)
                window = paginate(total, query.page.page, query.page.page_size)
                data = run_step("find", reader.find, query.sort, window.skip, window.limit)
                totals, error = self._aggregate_or_zero(reader)
        except SalesQueryError:
            raise
        except Exception as e:
            raise QueryExecutionError("open", e) from e
        return self._build_result(query, total, data, totals, error, self.store.snapshot_reads)

    def _execute_parallel(self, query: SalesQuery) -> SalesQueryResult:
        skip = page_offset(query.page.page, query.page.page_size)
        pool = self._get_pool()
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        def remaining() -> Optional[float]:
            return None if deadline is None else max(0.0, deadline - time.monotonic())

        futures: List[Future] = [pool.submit(self._check_available)]
        try:
            futures[0].result(timeout=remaining())
            futures += [
                pool.submit(self._isolated, query, "count", lambda r: r.count()),
                pool.submit(self._isolated, query, "find", lambda r: r.find(query.sort, skip, query.page.page_size)),
                pool.submit(self._isolated, query, "aggregate", lambda r: r.aggregate()),
            ]
            _, count_f, find_f, agg_f = futures
            total = count_f.result(timeout=remaining())
            data = find_f.result(timeout=remaining())
            try:
                totals, error = agg_f.result(timeout=remaining()), None
            except AggregationError as e:
                totals, error = SalesTotals(), str(e)
        except FuturesTimeoutError:
            raise QueryTimeoutError(self.timeout) from None
        finally:
            for f in futures:
                f.cancel()
        return self._build_result(query, total, data, totals, error, snapshot=False)

    # ---------- helpers ----------

    def _check_available(self) -> None:
        if not self.store.is_available():
            raise StoreUnavailableError(f"{self.store.source} sales store is not available")

    def _isolated(self, query: SalesQuery, operation: str, fn: Callable[[SalesReader], T]) -> T:
        """One operation on its own reader, for parallel mode."""
        def work() -> T:
            with self.store.reader(query.filters, query.search) as reader:
                return fn(reader)
        return run_step(operation, work)

    @staticmethod
    def _aggregate_or_zero(reader: SalesReader) -> Tuple[SalesTotals, Optional[str]]:
        try:
            return run_step("aggregate", reader.aggregate), None
        except AggregationError as e:
            return SalesTotals(), str(e)

    @staticmethod
    def _build_result(
        query: SalesQuery,
        total: int,
        data: List[SalesRecord],
        totals: SalesTotals,
        error: Optional[str],
        snapshot: bool,
    ) -> SalesQueryResult:
        window = paginate(total, query.page.page, query.page.page_size)
        # a failed aggregate zeroes the whole statistics block
        statistics = SalesStatistics() if error else SalesStatistics(**totals.model_dump(), total_records=total)
        return SalesQueryResult(
            data=data,
            pagination=PaginationInfo(
                current_page=query.page.page,
                page_size=query.page.page_size,
                total_items=total,
                total_pages=window.total_pages,
                has_next_page=window.has_next_page,
                has_previous_page=window.has_previous_page,
            ),
            statistics=statistics,
            snapshot_consistent=snapshot,
            statistics_error=error,
        )
