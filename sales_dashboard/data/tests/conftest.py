from datetime import datetime
from decimal import Decimal

import pytest

from sales_dashboard.config import set_config_for_test
from sales_dashboard.data.backends.memory_backend import InMemorySalesStore
from sales_dashboard.data.backends.sql_backend import SqlSalesStore
from sales_dashboard.data.backends.sql_schema import load_records
from sales_dashboard.data.models import SalesRecord
from sales_dashboard.data.util import get_engine


def make_record(**overrides) -> SalesRecord:
    fields = dict(
        date=datetime(2023, 1, 1, 12, 0),
        customer_name="Test Customer",
        phone_number="9000000000",
        region="North",
        gender="Female",
        age=30,
        product_category="Electronics",
        product_name="Widget",
        quantity=1,
        price_per_unit=Decimal("10"),
        discount_percentage=Decimal("0"),
        total_amount=Decimal("10"),
        final_amount=Decimal("10"),
        payment_method="Cash",
        tags="",
        order_status="Delivered",
    )
    fields.update(overrides)
    return SalesRecord(**fields)


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    for var in ["DATABASE_URL", "LAKEBASE_INSTANCE_NAME", "STORE_BACKEND", "DATA_DIR", "EXECUTION_MODE"]:
        monkeypatch.delenv(var, raising=False)
    set_config_for_test()


@pytest.fixture
def sample_records():
    """Five sales with known totals: 12 units, 940 gross, 652 net, 288 discount."""
    return [
        make_record(
            date=datetime(2023, 1, 15, 10, 0), customer_name="Alice Smith", phone_number="9876500001",
            region="North", gender="Female", age=25, product_category="Electronics", product_name="Earbuds",
            quantity=2, price_per_unit=Decimal("100"), discount_percentage=Decimal("10"),
            total_amount=Decimal("200"), final_amount=Decimal("180"),
            payment_method="Credit Card", tags="wireless,portable",
        ),
        make_record(
            date=datetime(2023, 2, 20, 12, 0), customer_name="Bob Jones", phone_number="9876500002",
            region="South", gender="Male", age=40, product_category="Clothing", product_name="Hoodie",
            quantity=1, price_per_unit=Decimal("50"), total_amount=Decimal("50"), final_amount=Decimal("50"),
            payment_method="Cash", tags="fashion",
        ),
        make_record(
            date=datetime(2023, 1, 31, 23, 59, 59), customer_name="carol White", phone_number="9123400003",
            region="North", gender="Female", age=33, product_category="Beauty", product_name="Face Serum",
            quantity=3, price_per_unit=Decimal("30"), discount_percentage=Decimal("20"),
            total_amount=Decimal("90"), final_amount=Decimal("72"),
            payment_method="UPI", tags="organic,gift",
        ),
        make_record(
            date=None, customer_name="Dave Brown", phone_number="9000000004",
            region="East", gender="Male", age=55, product_category="Electronics", product_name="Power Bank",
            quantity=5, price_per_unit=Decimal("20"), total_amount=Decimal("100"), final_amount=Decimal("100"),
            payment_method="Credit Card", tags="Wireless",
        ),
        make_record(
            date=datetime(2023, 3, 1, 9, 30), customer_name="Eve Black", phone_number="9555500005",
            region="West", gender="Female", age=19, product_category="Sports", product_name="Yoga Mat",
            quantity=1, price_per_unit=Decimal("500"), discount_percentage=Decimal("50"),
            total_amount=Decimal("500"), final_amount=Decimal("250"),
            payment_method="Debit Card", tags="",
        ),
    ]


@pytest.fixture
def memory_store(sample_records):
    return InMemorySalesStore(sample_records)


@pytest.fixture
def sql_engine(tmp_path):
    engine = get_engine(f"sqlite:///{tmp_path / 'sales.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine, sample_records):
    load_records(sql_engine, sample_records)
    return SqlSalesStore(sql_engine)


@pytest.fixture
def record_factory():
    return make_record
