from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

import pandas as pd

from ...app_logging import get_logger
from ...config import get_config
from ..models import SalesRecord
from .memory_backend import InMemorySalesStore

# CSV header -> SalesRecord field
CSV_COLUMNS = {
    "Date": "date",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Customer Region": "region",
    "Gender": "gender",
    "Age": "age",
    "Product Category": "product_category",
    "Product Name": "product_name",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Payment Method": "payment_method",
    "Tags": "tags",
    "Order Status": "order_status",
}
INT_FIELDS = ["age", "quantity"]
DECIMAL_FIELDS = ["price_per_unit", "discount_percentage", "total_amount", "final_amount"]

logger = get_logger(__name__)


def _to_decimal(raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def frame_to_records(df: pd.DataFrame) -> List[SalesRecord]:
    """
    Coerce a raw (all-string) sales frame into records.

    Unparsable numbers become 0, unparsable dates become None.
    """
    df = df.rename(columns=CSV_COLUMNS)
    for field in CSV_COLUMNS.values():
        if field not in df.columns:
            df[field] = ""

    for field in INT_FIELDS:
        df[field] = pd.to_numeric(df[field], errors="coerce").fillna(0).astype(int)
    for field in DECIMAL_FIELDS:
        df[field] = df[field].map(_to_decimal)
    # kept out of the frame so pandas cannot turn None back into NaT
    dates = [
        None if pd.isna(ts) else ts.to_pydatetime()
        for ts in pd.to_datetime(df["date"], errors="coerce", format="mixed")
    ]

    fields = [field for field in CSV_COLUMNS.values() if field != "date"]
    rows = df[fields].to_dict(orient="records")
    return [SalesRecord.model_validate({**row, "date": when}) for row, when in zip(rows, dates)]


def load_sales_csv(path: Path) -> List[SalesRecord]:
    if not path.exists():
        raise FileNotFoundError(
            f"Sales data file not found: {path}\n"
            f"Please either:\n"
            f"  1. Generate sample data: python -m sales_dashboard.backend.seed_data\n"
            f"  2. Set DATA_DIR environment variable to point to your data directory\n"
            f"  3. Create a .env file with DATA_DIR=/path/to/your/data"
        )
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except Exception as e:
        raise RuntimeError(
            f"Error reading sales CSV {path}: {e}\n"
            f"Please check that the CSV file is valid and readable."
        ) from e
    return frame_to_records(df)


def resolve_data_dir(data_dir: str | Path) -> Path:
    """Make a relative data directory relative to the repository root."""
    data_dir = Path(data_dir)
    if data_dir.is_absolute():
        return data_dir

    # Look up the directory tree for pyproject.toml
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent / data_dir
    return current / data_dir


class CsvSalesStore(InMemorySalesStore):
    """
    CSV-backed implementation.
    - Loads `data_file` from `data_dir` once at construction.
    - Every reader performs a fresh filter/sort/aggregate pass over the loaded
      records (so each UI interaction triggers new work, mirroring a DB query).
    """

    source = "csv"

    def __init__(self, data_dir: str | Path = None, data_file: Optional[str] = None) -> None:
        config = get_config()
        self.data_dir = resolve_data_dir(data_dir if data_dir is not None else config.data_dir)
        self.path = self.data_dir / (data_file or config.data_file)
        super().__init__(self._load())

    def _load(self) -> List[SalesRecord]:
        records = load_sales_csv(self.path)
        logger.info(f"Loaded {len(records)} sales records from {self.path}")
        return records

    def reload(self) -> None:
        """Re-read the CSV; readers already open keep the records they started with."""
        self.replace_records(self._load())
