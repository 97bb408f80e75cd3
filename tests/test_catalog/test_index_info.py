import pytest
from dataclasses import FrozenInstanceError

from lakeindex.catalog import IndexConfig, IndexEntry, IndexState
from lakeindex.core.schema import Schema
from lakeindex.core.types import FieldType


class TestIndexConfig:
    """Tests for IndexConfig."""

    def test_lists_are_frozen_to_tuples(self):
        config = IndexConfig("idx", ["a", "b"], ["c"])
        assert config.indexed_columns == ("a", "b")
        assert config.included_columns == ("c",)

    def test_all_columns(self):
        assert IndexConfig("idx", ["a"], ["c", "d"]).all_columns == ("a", "c", "d")

    def test_round_trip(self):
        config = IndexConfig("idx", ["a"], ["b"])
        assert IndexConfig.from_dict(config.to_dict()) == config

    def test_from_dict_without_included(self):
        config = IndexConfig.from_dict({"name": "idx", "indexed_columns": ["a"]})
        assert config.included_columns == ()

    def test_immutable(self):
        config = IndexConfig("idx", ["a"])
        with pytest.raises(FrozenInstanceError):
            config.name = "other"


class TestIndexEntry:
    """Tests for IndexEntry."""

    def setup_method(self):
        self.entry = IndexEntry(
            config=IndexConfig("idx", ["CustomerId"], ["TotalAmount"]),
            source_path="/data/orders",
            storage_location="/indexes/idx/v__=0",
            source_fingerprint="f00",
            schema=Schema.of(("CustomerId", FieldType.INT), ("TotalAmount", FieldType.DOUBLE)),
            row_count=3,
        )

    def test_defaults(self):
        assert self.entry.state == IndexState.ACTIVE
        assert self.entry.version == 0
        assert self.entry.name == "idx"
        assert self.entry.column_count() == 2

    def test_with_state(self):
        deleted = self.entry.with_state(IndexState.DELETED)
        assert deleted.state == IndexState.DELETED
        assert deleted.storage_location == self.entry.storage_location
        assert self.entry.state == IndexState.ACTIVE

    def test_round_trip(self):
        assert IndexEntry.from_dict(self.entry.to_dict()) == self.entry

    def test_summary(self):
        summary = self.entry.summary()
        assert summary["name"] == "idx"
        assert summary["indexed_columns"] == ["CustomerId"]
        assert summary["included_columns"] == ["TotalAmount"]
        assert summary["state"] == "ACTIVE"
        assert summary["storage_location"] == "/indexes/idx/v__=0"
        assert summary["row_count"] == 3

    def test_state_liveness(self):
        assert IndexState.ACTIVE.is_live()
        assert IndexState.STALE.is_live()
        assert not IndexState.DELETED.is_live()
