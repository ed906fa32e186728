#!/usr/bin/env python3
"""
seed_data.py

Generates realistic fake retail sales transactions to a single CSV
(default: sample_data/sales_data.csv) using the column headers the dashboard
ingests, and optionally loads the file into a SQL database for the SQL store.

Run:
  python -m sales_dashboard.backend.seed_data --rows 5000 --days 90
  python -m sales_dashboard.backend.seed_data --load-sql sqlite:///sample_data/sales.db
"""

from __future__ import annotations
import argparse
import csv
import os
import random
import sys
from datetime import date, datetime, time, timedelta, timezone
from math import pi, sin
from typing import Dict, List, Optional

from sales_dashboard.config import get_config
from sales_dashboard.data.backends.csv_backend import CSV_COLUMNS, load_sales_csv, resolve_data_dir

# -----------------------------
# Reference data
# -----------------------------

REGIONS = ["North", "South", "East", "West", "Central"]
GENDERS = ["Male", "Female"]

FIRST_NAMES = [
    "Aarav", "Ananya", "Rohan", "Priya", "Vikram", "Neha", "Arjun", "Kavya",
    "Rahul", "Sneha", "Karan", "Isha", "Aditya", "Pooja", "Siddharth", "Meera",
]
LAST_NAMES = [
    "Sharma", "Verma", "Iyer", "Reddy", "Patel", "Gupta", "Nair", "Mehta",
    "Kapoor", "Singh", "Das", "Joshi",
]

PRODUCTS = {
    "Electronics": ["Wireless Earbuds", "Smartwatch", "Bluetooth Speaker", "Power Bank", "Tablet"],
    "Clothing": ["Denim Jacket", "Cotton T-Shirt", "Running Shoes", "Formal Shirt", "Hoodie"],
    "Beauty": ["Face Serum", "Lipstick", "Moisturizer", "Perfume", "Sunscreen"],
    "Home": ["Table Lamp", "Cushion Cover", "Wall Clock", "Bedsheet Set", "Coffee Mug"],
    "Sports": ["Yoga Mat", "Dumbbell Set", "Cricket Bat", "Football", "Water Bottle"],
}

PRICE_RANGES = {
    "Electronics": (999.0, 24999.0),
    "Clothing": (299.0, 4999.0),
    "Beauty": (149.0, 2999.0),
    "Home": (199.0, 3999.0),
    "Sports": (249.0, 6999.0),
}

TAGS = ["organic", "wireless", "portable", "gift", "premium", "eco-friendly", "bestseller", "new", "fashion", "unisex"]

PAYMENT_METHODS = ["Credit Card", "Debit Card", "UPI", "Cash", "Net Banking", "Wallet"]
ORDER_STATUSES = ["Delivered", "Shipped", "Processing", "Cancelled", "Returned"]

HEADERS = list(CSV_COLUMNS.keys())


# -----------------------------
# Utility functions
# -----------------------------

def ensure_dir(path: str) -> None:
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)

def price_round(p: float) -> float:
    return round(max(p, 0.01), 2)

def diurnal_hour(rnd: random.Random) -> int:
    """
    Draw an hour of day biased toward the midday and evening shopping peaks.
    """
    while True:
        hour = rnd.randint(0, 23)
        weight = 0.3 + 0.35 * (1 + sin((hour - 9) / 24 * 2 * pi)) + 0.2 * (hour >= 18)
        if rnd.random() < weight:
            return hour

def random_phone(rnd: random.Random) -> str:
    return f"{rnd.choice('6789')}{rnd.randint(0, 999_999_999):09d}"


# -----------------------------
# Core generator
# -----------------------------

def gen_sales_rows(n: int, start_d: date, days: int, seed: int) -> List[Dict]:
    rnd = random.Random(seed)
    # a fixed customer pool so names repeat across orders
    customers = [
        {
            "name": f"{rnd.choice(FIRST_NAMES)} {rnd.choice(LAST_NAMES)}",
            "phone": random_phone(rnd),
            "region": rnd.choice(REGIONS),
            "gender": rnd.choice(GENDERS),
            "age": rnd.randint(18, 65),
        }
        for _ in range(max(1, n // 4))
    ]

    rows: List[Dict] = []
    for _ in range(n):
        customer = rnd.choice(customers)
        category = rnd.choice(list(PRODUCTS.keys()))
        low, high = PRICE_RANGES[category]
        unit = price_round(rnd.uniform(low, high))
        qty = 1 if rnd.random() < 0.6 else rnd.randint(2, 5)
        discount = rnd.choice([0, 0, 5, 10, 15, 20, 25])
        total = price_round(unit * qty)
        final = price_round(total * (1 - discount / 100.0))

        day = start_d + timedelta(days=rnd.randint(0, days - 1))
        ts = datetime.combine(day, time(diurnal_hour(rnd), rnd.randint(0, 59), rnd.randint(0, 59)))

        rows.append({
            "Date": ts.isoformat(timespec="seconds"),
            "Customer Name": customer["name"],
            "Phone Number": customer["phone"],
            "Customer Region": customer["region"],
            "Gender": customer["gender"],
            "Age": customer["age"],
            "Product Category": category,
            "Product Name": rnd.choice(PRODUCTS[category]),
            "Quantity": qty,
            "Price per Unit": f"{unit:.2f}",
            "Discount Percentage": discount,
            "Total Amount": f"{total:.2f}",
            "Final Amount": f"{final:.2f}",
            "Payment Method": rnd.choices(PAYMENT_METHODS, weights=[0.25, 0.2, 0.3, 0.1, 0.1, 0.05])[0],
            "Tags": ",".join(rnd.sample(TAGS, k=rnd.randint(1, 3))),
            "Order Status": rnd.choices(ORDER_STATUSES, weights=[0.6, 0.15, 0.1, 0.1, 0.05])[0],
        })
    return rows


# -----------------------------
# CSV writer
# -----------------------------

def write_csv(path: str, rows: List[Dict], headers: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=headers)
        w.writeheader()
        for r in rows:
            w.writerow(r)


# -----------------------------
# SQL loader
# -----------------------------

def load_into_sql(csv_path: str, database_url: str) -> int:
    from sales_dashboard.data.backends.sql_schema import load_records
    from sales_dashboard.data.util import get_engine

    records = load_sales_csv(resolve_data_dir(csv_path))
    engine = get_engine(database_url)
    try:
        return load_records(engine, records)
    finally:
        engine.dispose()


# -----------------------------
# Main
# -----------------------------

def main(argv: Optional[List[str]] = None) -> int:
    config = get_config()

    parser = argparse.ArgumentParser(description="Generate fake sales transactions to a CSV.")
    parser.add_argument("--rows", type=int, default=config.default_seed_rows, help="Number of transactions.")
    parser.add_argument("--days", type=int, default=config.default_seed_days, help="Number of days of history.")
    parser.add_argument("--start-date", type=str, default=None, help="YYYY-MM-DD (defaults to today - days + 1)")
    parser.add_argument("--output-dir", type=str, default=config.data_dir)
    parser.add_argument("--output-file", type=str, default=config.data_file)
    parser.add_argument("--seed", type=int, default=config.default_seed_value)
    parser.add_argument("--no-overwrite", action="store_true", help="Fail if the CSV already exists.")
    parser.add_argument(
        "--load-sql",
        type=str,
        nargs="?",
        const="",
        default=None,
        metavar="DATABASE_URL",
        help="Also load the CSV into a SQL database (defaults to DATABASE_URL / Lakebase config).",
    )
    args = parser.parse_args(argv)

    if args.rows < 0 or args.days < 1:
        parser.error("--rows must be >= 0 and --days must be >= 1")

    outdir = str(resolve_data_dir(args.output_dir))
    ensure_dir(outdir)
    path = os.path.join(outdir, args.output_file)
    if args.no_overwrite and os.path.exists(path):
        print(f"Refusing to overwrite existing file: {path}", file=sys.stderr)
        return 2

    # time window
    if args.start_date:
        start_d = date.fromisoformat(args.start_date)
    else:
        start_d = datetime.now(timezone.utc).date() - timedelta(days=args.days - 1)

    rows = gen_sales_rows(args.rows, start_d, args.days, args.seed)
    write_csv(path, rows, HEADERS)
    print(f"Generated {len(rows)} sales rows in {path}")

    if args.load_sql is not None:
        inserted = load_into_sql(path, args.load_sql or None)
        print(f"Loaded {inserted} rows into the sales database")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
