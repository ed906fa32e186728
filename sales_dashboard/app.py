import time

import pandas as pd
import streamlit as st

# Configuration
from sales_dashboard.config import get_config

# SalesStore factory + query pipeline
from sales_dashboard.data.errors import SalesQueryError, StoreUnavailableError
from sales_dashboard.data.models import SalesQuery, SortSpec
from sales_dashboard.data.normalize import build_sales_query
from sales_dashboard.data.sorting import next_sort_state
from sales_dashboard.data.util import check_health, get_query_executor, get_sales_store

st.set_page_config(page_title="Retail Sales Dashboard", layout="wide")

config = get_config()

SORT_LABELS = {
    "date": "Date",
    "quantity": "Quantity",
    "customerName": "Customer name",
}


@st.cache_resource
def load_store():
    # Built once per process; the CSV store keeps its records in memory
    return get_sales_store()


@st.cache_resource
def load_executor():
    # One executor (and its thread pool) per process, shared across reruns
    return get_query_executor(load_store())


store = load_store()
executor = load_executor()

# -----------------------------------------------------------------------------
# Session state: sort and page survive reruns
# -----------------------------------------------------------------------------
if "sort" not in st.session_state:
    st.session_state.sort = SortSpec()
if "page" not in st.session_state:
    st.session_state.page = 1


def reset_page() -> None:
    st.session_state.page = 1


def select_sort(key: str) -> None:
    st.session_state.sort = next_sort_state(st.session_state.sort, key)
    reset_page()


# -----------------------------------------------------------------------------
# Sidebar filters (all choices sourced from the store)
# -----------------------------------------------------------------------------
health = check_health(store)
if health.status != "ok":
    st.error(f"Sales data unavailable ({health.source}): {health.message}")
    st.stop()

options = store.get_filter_options()

st.sidebar.header("Filters")
search = st.sidebar.text_input("Search customer name or phone", on_change=reset_page)
regions = st.sidebar.multiselect("Customer region", options.regions, on_change=reset_page)
genders = st.sidebar.multiselect("Gender", options.genders, on_change=reset_page)
categories = st.sidebar.multiselect("Product category", options.categories, on_change=reset_page)
tags = st.sidebar.multiselect("Tags", options.tags, on_change=reset_page)
payment_methods = st.sidebar.multiselect("Payment method", options.payment_methods, on_change=reset_page)

age_lo, age_hi = options.age_range.min, options.age_range.max
if age_lo < age_hi:
    age_sel = st.sidebar.slider("Age range", age_lo, age_hi, (age_lo, age_hi), on_change=reset_page)
else:
    age_sel = (age_lo, age_hi)

date_sel = None
if options.date_range is not None:
    date_sel = st.sidebar.date_input(
        "Date range",
        (options.date_range.min, options.date_range.max),
        min_value=options.date_range.min,
        max_value=options.date_range.max,
        on_change=reset_page,
    )

page_size = st.sidebar.number_input(
    "Rows per page",
    min_value=1,
    max_value=config.max_page_size,
    value=config.default_page_size,
    step=5,
    on_change=reset_page,
)

# Raw parameters, exactly as an HTTP request would carry them
params = {
    "search": search,
    "regions": regions,
    "genders": genders,
    "categories": categories,
    "tags": tags,
    "paymentMethods": payment_methods,
    "sortBy": st.session_state.sort.sort_by,
    "sortOrder": st.session_state.sort.sort_order,
    "page": str(st.session_state.page),
    "pageSize": str(page_size),
}
# full-width slider selections mean "no age constraint"
if age_sel != (age_lo, age_hi):
    params["ageMin"], params["ageMax"] = str(age_sel[0]), str(age_sel[1])
if date_sel and len(date_sel) == 2 and tuple(date_sel) != (options.date_range.min, options.date_range.max):
    params["dateStart"], params["dateEnd"] = date_sel[0].isoformat(), date_sel[1].isoformat()

query: SalesQuery = build_sales_query(
    params,
    policy=config.filter_coercion,
    default_page_size=config.default_page_size,
    max_page_size=config.max_page_size,
)

# -----------------------------------------------------------------------------
# Query via the executor (each interaction triggers fresh work)
# -----------------------------------------------------------------------------
t0 = time.perf_counter()
try:
    result = executor.execute(query)
except StoreUnavailableError as e:
    st.error(f"Sales data unavailable: {e}")
    st.stop()
except SalesQueryError as e:
    st.error(f"Could not load sales: {e}")
    st.stop()
t_query = (time.perf_counter() - t0) * 1000.0

# -----------------------------------------------------------------------------
# Summary metrics
# -----------------------------------------------------------------------------
stats = result.statistics
c1, c2, c3, c4 = st.columns(4)
c1.metric("Total units sold", f"{stats.total_units:,}")
c2.metric("Total amount", f"₹{stats.total_amount:,.2f}")
c3.metric("Total discount", f"₹{stats.total_discount:,.2f}")
c4.metric("Records", f"{stats.total_records:,}")
if result.statistics_error:
    st.warning("Statistics are temporarily unavailable; showing the page without totals.")

# Optional: tiny latency readout (useful when comparing backends)
with st.expander("Query timings (ms)"):
    st.write(
        {
            "source": store.source,
            "mode": executor.mode,
            "execute": round(t_query, 2),
            "snapshot_consistent": result.snapshot_consistent,
        }
    )

# -----------------------------------------------------------------------------
# Sort controls
# -----------------------------------------------------------------------------
sort = st.session_state.sort
sort_cols = st.columns(len(SORT_LABELS))
for col, (key, label) in zip(sort_cols, SORT_LABELS.items()):
    arrow = (" ↓" if sort.sort_order == "desc" else " ↑") if sort.sort_by == key else ""
    col.button(f"Sort: {label}{arrow}", key=f"sort_{key}", on_click=select_sort, args=(key,), use_container_width=True)

# -----------------------------------------------------------------------------
# Sales table
# -----------------------------------------------------------------------------
st.markdown("### Sales transactions (filtered)")
if result.data:
    rows = [record.model_dump(mode="json", by_alias=True) for record in result.data]
    table = pd.DataFrame(rows)
    table["tags"] = table["tags"].map(", ".join)
    st.dataframe(table, use_container_width=True, hide_index=True)
else:
    st.info("No sales match the current filters.")

# -----------------------------------------------------------------------------
# Pagination
# -----------------------------------------------------------------------------
pagination = result.pagination
prev_col, info_col, next_col = st.columns([1, 3, 1])
if prev_col.button("◀ Previous", disabled=not pagination.has_previous_page):
    st.session_state.page = pagination.current_page - 1
    st.rerun()
info_col.markdown(
    f"Page **{pagination.current_page}** of **{max(pagination.total_pages, 1)}** "
    f"({pagination.total_items:,} records)"
)
if next_col.button("Next ▶", disabled=not pagination.has_next_page):
    st.session_state.page = pagination.current_page + 1
    st.rerun()

# -----------------------------------------------------------------------------
# Footer
# -----------------------------------------------------------------------------
with st.expander("Data source & architecture"):
    st.write(
        f"This page reads sales via a **SalesStore** interface (`{store.source}` store, "
        f"{health.records:,} records). Filtering, sorting, paging and totals run through one "
        "query executor, so the CSV store and the SQL (Lakebase) store answer identically."
    )
