from dataclasses import dataclass
from pathlib import Path

import pytest
from lakeindex.catalog import IndexCatalog
from lakeindex.core.schema import Schema
from lakeindex.core.types import FieldType
from lakeindex.index import IndexBuilder, IndexManager
from lakeindex.query import PlanExecutor, PlanRewriter
from lakeindex.storage import Dataset, DatasetStore


ORDERS_SCHEMA = Schema.of(
    ("OrderId", FieldType.INT),
    ("CustomerId", FieldType.INT),
    ("TotalAmount", FieldType.DOUBLE),
    ("Status", FieldType.STRING),
)

CUSTOMERS_SCHEMA = Schema.of(
    ("CustomerId", FieldType.INT),
    ("Name", FieldType.STRING),
    ("City", FieldType.STRING),
)

ORDER_ROWS = [
    (1, 203, 42.5, "shipped"),
    (2, 101, 17.0, "pending"),
    (3, 203, 99.9, "shipped"),
    (4, 305, 12.25, "cancelled"),
    (5, None, 3.0, "lost"),
    (6, 101, 60.0, "shipped"),
]

CUSTOMER_ROWS = [
    (305, "Casey", "Lima"),
    (101, "Avery", "Lisbon"),
    (203, "Blake", "Oslo"),
    (404, "Drew", "Quito"),
]


@dataclass
class Lake:
    """Components wired over a temporary directory, plus two source datasets."""
    root: Path
    store: DatasetStore
    catalog: IndexCatalog
    builder: IndexBuilder
    manager: IndexManager
    rewriter: PlanRewriter
    executor: PlanExecutor
    orders: Dataset
    customers: Dataset


@pytest.fixture
def lake(tmp_path) -> Lake:
    store = DatasetStore()
    catalog = IndexCatalog(str(tmp_path / "catalog"))
    builder = IndexBuilder(catalog, store, str(tmp_path / "indexes"))
    return Lake(
        root=tmp_path,
        store=store,
        catalog=catalog,
        builder=builder,
        manager=IndexManager(catalog, store, builder),
        rewriter=PlanRewriter(catalog),
        executor=PlanExecutor(store),
        orders=store.write(str(tmp_path / "data" / "orders"), ORDERS_SCHEMA, ORDER_ROWS),
        customers=store.write(str(tmp_path / "data" / "customers"), CUSTOMERS_SCHEMA,
                              CUSTOMER_ROWS),
    )
