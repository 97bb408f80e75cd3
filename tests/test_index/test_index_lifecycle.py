import tempfile
from pathlib import Path

import pytest
from lakeindex.catalog import IndexCatalog, IndexConfig, IndexState
from lakeindex.core.exceptions import InvalidStateError, NotFoundError, StorageError
from lakeindex.core.schema import Schema
from lakeindex.core.types import FieldType
from lakeindex.index import IndexBuilder, IndexManager
from lakeindex.query import Filter, PlanExecutor, PlanRewriter, Project, Scan, eq
from lakeindex.session import RewriteSettings
from lakeindex.storage import DatasetStore


ORDERS = Schema.of(
    ("OrderId", FieldType.INT),
    ("CustomerId", FieldType.INT),
    ("TotalAmount", FieldType.DOUBLE),
)


class TestIndexLifecycle:
    """Tests for delete, restore, vacuum, staleness and refresh."""

    def setup_method(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        root = Path(self.temp_dir.name)
        self.orders_path = str(root / "data" / "orders")
        self.store = DatasetStore()
        self.catalog = IndexCatalog(str(root / "catalog"))
        self.builder = IndexBuilder(self.catalog, self.store, str(root / "indexes"))
        self.manager = IndexManager(self.catalog, self.store, self.builder)

        self.orders = self.store.write(self.orders_path, ORDERS,
                                       [(1, 203, 42.5), (2, 101, 17.0), (3, 203, 99.9)])
        self.entry = self.manager.create_index(
            self.orders, IndexConfig("by_customer", ["CustomerId"], ["TotalAmount"]))

    def teardown_method(self):
        self.temp_dir.cleanup()

    def test_delete_keeps_storage(self):
        deleted = self.manager.delete_index("by_customer")
        assert deleted.state == IndexState.DELETED
        assert self.store.exists(deleted.storage_location)
        assert self.catalog.get("by_customer").state == IndexState.DELETED

    def test_delete_unknown(self):
        with pytest.raises(NotFoundError):
            self.manager.delete_index("nope")

    def test_delete_twice(self):
        self.manager.delete_index("by_customer")
        with pytest.raises(NotFoundError):
            self.manager.delete_index("by_customer")

    def test_delete_stale_index(self):
        self.catalog.update_state("by_customer", IndexState.STALE)
        assert self.manager.delete_index("by_customer").state == IndexState.DELETED

    def test_vacuum_requires_delete_first(self):
        with pytest.raises(InvalidStateError):
            self.manager.vacuum_index("by_customer")
        assert self.store.exists(self.entry.storage_location)

    def test_vacuum_unknown(self):
        with pytest.raises(NotFoundError):
            self.manager.vacuum_index("nope")

    def test_delete_then_vacuum_removes_everything(self):
        self.manager.delete_index("by_customer")
        self.manager.vacuum_index("by_customer")

        assert not self.catalog.contains("by_customer")
        assert not self.store.exists(self.entry.storage_location)
        with pytest.raises(NotFoundError):
            self.manager.get_index("by_customer")

    def test_vacuum_then_recreate_uses_new_version(self):
        self.manager.delete_index("by_customer")
        self.manager.vacuum_index("by_customer")
        recreated = self.manager.create_index(
            self.orders, IndexConfig("by_customer", ["CustomerId"]))
        assert recreated.version == 1
        assert recreated.storage_location != self.entry.storage_location

    def test_restore_deleted_index(self):
        self.manager.delete_index("by_customer")
        restored = self.manager.restore_index("by_customer")
        assert restored.state == IndexState.ACTIVE

    def test_restore_requires_deleted_state(self):
        with pytest.raises(InvalidStateError):
            self.manager.restore_index("by_customer")

    def test_restore_unknown(self):
        with pytest.raises(NotFoundError):
            self.manager.restore_index("nope")

    def test_catalog_restore_skips_vacuumed_index(self):
        backup_file = self.catalog.create_backup()
        self.manager.delete_index("by_customer")
        self.manager.vacuum_index("by_customer")

        self.catalog.restore_from_backup(backup_file)

        assert not self.catalog.contains("by_customer")
        plan = Project(("TotalAmount",), Filter(eq("CustomerId", 203), Scan.of(self.orders)))
        rewritten = PlanRewriter(self.catalog).rewrite(plan, RewriteSettings(enabled=True))
        assert rewritten is plan
        assert PlanExecutor(self.store).execute(rewritten) == [(42.5,), (99.9,)]

    def test_restore_after_source_change_is_stale(self):
        self.manager.delete_index("by_customer")
        self.store.append(self.orders_path, [(4, 305, 1.0)])
        assert self.manager.restore_index("by_customer").state == IndexState.STALE

    def test_check_staleness_marks_changed_sources(self):
        assert self.manager.check_staleness() == []
        self.store.append(self.orders_path, [(4, 305, 1.0)])

        assert self.manager.check_staleness() == ["by_customer"]
        assert self.catalog.get("by_customer").state == IndexState.STALE
        assert self.manager.check_staleness() == []

    def test_check_staleness_when_source_deleted(self):
        self.store.delete(self.orders_path)
        assert self.manager.check_staleness() == ["by_customer"]

    def test_refresh_rebuilds_into_new_version(self):
        self.store.append(self.orders_path, [(4, 305, 1.0)])
        self.manager.check_staleness()

        refreshed = self.manager.refresh_index("by_customer")

        assert refreshed.state == IndexState.ACTIVE
        assert refreshed.version == 1
        assert refreshed.row_count == 4
        assert refreshed.source_fingerprint == self.store.fingerprint(self.orders_path)
        assert not self.store.exists(self.entry.storage_location)
        assert self.store.exists(refreshed.storage_location)

    def test_refresh_deleted_index(self):
        self.manager.delete_index("by_customer")
        with pytest.raises(NotFoundError):
            self.manager.refresh_index("by_customer")

    def test_refresh_with_missing_source(self):
        self.store.delete(self.orders_path)
        with pytest.raises(StorageError):
            self.manager.refresh_index("by_customer")

    def test_indexes_listing(self):
        self.manager.create_index(self.orders, IndexConfig("a_by_order", ["OrderId"]))
        self.manager.delete_index("a_by_order")

        listing = self.manager.indexes()
        assert [s["name"] for s in listing] == ["a_by_order", "by_customer"]
        assert [s["state"] for s in listing] == ["DELETED", "ACTIVE"]
