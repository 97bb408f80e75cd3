import tempfile
import threading
from pathlib import Path

import pytest
from lakeindex.catalog import IndexCatalog, IndexConfig, IndexState
from lakeindex.core.exceptions import ConfigError, DuplicateNameError
from lakeindex.core.schema import Schema
from lakeindex.core.types import FieldType
from lakeindex.index import IndexBuilder
from lakeindex.storage import DatasetStore


ORDERS = Schema.of(
    ("OrderId", FieldType.INT),
    ("CustomerId", FieldType.INT),
    ("TotalAmount", FieldType.DOUBLE),
    ("Status", FieldType.STRING),
)

ROWS = [
    (1, 203, 42.5, "shipped"),
    (2, 101, 17.0, "pending"),
    (3, 203, 99.9, "shipped"),
    (4, None, 5.0, "lost"),
    (5, 305, 12.25, "cancelled"),
]


class TestIndexBuilder:
    """Tests for building and publishing covering indexes."""

    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.store = DatasetStore()
        self.catalog = IndexCatalog(str(root / "catalog"))
        self.builder = IndexBuilder(self.catalog, self.store, str(root / "indexes"))
        self.orders = self.store.write(str(root / "data" / "orders"), ORDERS, ROWS)

    def teardown_method(self):
        self.temp_dir.cleanup()

    def test_create_index_publishes_active_entry(self):
        entry = self.builder.create_index(
            self.orders, IndexConfig("by_customer", ["CustomerId"], ["TotalAmount"]))

        assert entry.state == IndexState.ACTIVE
        assert entry.version == 0
        assert entry.row_count == len(ROWS)
        assert entry.source_path == self.orders.path
        assert entry.source_fingerprint == self.orders.fingerprint
        assert entry.schema.field_names == ["CustomerId", "TotalAmount"]
        assert self.catalog.get("by_customer") == entry

    def test_storage_location_is_versioned(self):
        entry = self.builder.create_index(self.orders, IndexConfig("by_customer", ["CustomerId"]))
        assert entry.storage_location == str(self.builder.system_path / "by_customer" / "v__=0")
        assert self.store.exists(entry.storage_location)

    def test_index_data_is_projected_and_sorted(self):
        entry = self.builder.create_index(
            self.orders, IndexConfig("by_customer", ["CustomerId"], ["TotalAmount"]))
        index = self.store.open(entry.storage_location)

        assert index.sort_order == ("CustomerId",)
        assert self.store.read_rows(index) == (
            (101, 17.0),
            (203, 42.5),
            (203, 99.9),
            (305, 12.25),
            (None, 5.0),
        )

    def test_missing_column_raises_config_error(self):
        with pytest.raises(ConfigError, match="Index creation failed"):
            self.builder.create_index(self.orders, IndexConfig("bad", ["Nope"]))
        assert not self.catalog.contains("bad")

    def test_duplicate_active_name(self):
        self.builder.create_index(self.orders, IndexConfig("idx", ["CustomerId"]))
        with pytest.raises(DuplicateNameError):
            self.builder.create_index(self.orders, IndexConfig("idx", ["OrderId"]))

    def test_duplicate_stale_name(self):
        self.builder.create_index(self.orders, IndexConfig("idx", ["CustomerId"]))
        self.catalog.update_state("idx", IndexState.STALE)
        with pytest.raises(DuplicateNameError):
            self.builder.create_index(self.orders, IndexConfig("idx", ["OrderId"]))

    def test_recreate_over_deleted_uses_new_location(self):
        first = self.builder.create_index(self.orders, IndexConfig("idx", ["CustomerId"]))
        self.catalog.update_state("idx", IndexState.DELETED)

        second = self.builder.create_index(self.orders, IndexConfig("idx", ["OrderId"]))

        assert second.version == 1
        assert second.storage_location != first.storage_location
        assert second.state == IndexState.ACTIVE
        assert not self.store.exists(first.storage_location)

    def test_build_does_not_publish(self):
        entry = self.builder.build(self.orders, IndexConfig("idx", ["CustomerId"]))
        assert not self.catalog.contains("idx")
        assert self.store.exists(entry.storage_location)

    def test_concurrent_creates_with_same_name(self):
        results, errors = [], []

        def create():
            try:
                results.append(self.builder.create_index(
                    self.orders, IndexConfig("race", ["CustomerId"])))
            except DuplicateNameError as e:
                errors.append(e)

        threads = [threading.Thread(target=create) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 1
        assert len(errors) == 3
        assert self.catalog.get("race") == results[0]
