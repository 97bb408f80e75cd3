from lakeindex.catalog import IndexConfig, IndexConfigValidator
from lakeindex.core.schema import Schema
from lakeindex.core.types import FieldType


class TestIndexConfigValidator:
    """Tests for IndexConfigValidator."""

    def setup_method(self):
        self.validator = IndexConfigValidator()
        self.schema = Schema.of(
            ("OrderId", FieldType.INT),
            ("CustomerId", FieldType.INT),
            ("TotalAmount", FieldType.DOUBLE),
        )

    def test_valid_config(self):
        config = IndexConfig("idx", ["CustomerId"], ["TotalAmount"])
        assert self.validator.validate_config(config, self.schema)
        assert self.validator.get_validation_errors() == []

    def test_missing_indexed_column(self):
        config = IndexConfig("idx", ["Nope"])
        assert not self.validator.validate_config(config, self.schema)
        errors = self.validator.get_validation_errors()
        assert any("Indexed columns not in source schema: ['Nope']" in e for e in errors)

    def test_missing_included_column(self):
        config = IndexConfig("idx", ["CustomerId"], ["Ghost"])
        assert not self.validator.validate_config(config, self.schema)
        assert any("Included columns" in e for e in self.validator.get_validation_errors())

    def test_empty_indexed_columns(self):
        assert not self.validator.validate_config(IndexConfig("idx", []), self.schema)

    def test_empty_name(self):
        assert not self.validator.validate_config(IndexConfig("  ", ["OrderId"]), self.schema)

    def test_name_with_path_separator(self):
        assert not self.validator.validate_config(IndexConfig("a/b", ["OrderId"]), self.schema)
        assert not self.validator.validate_config(IndexConfig("..", ["OrderId"]), self.schema)

    def test_duplicate_columns(self):
        config = IndexConfig("idx", ["OrderId", "OrderId"])
        assert not self.validator.validate_config(config, self.schema)

    def test_overlap_between_indexed_and_included(self):
        config = IndexConfig("idx", ["OrderId"], ["OrderId"])
        assert not self.validator.validate_config(config, self.schema)
        assert any("both indexed and included" in e for e in self.validator.get_validation_errors())

    def test_errors_reset_between_runs(self):
        self.validator.validate_config(IndexConfig("idx", ["Nope"]), self.schema)
        self.validator.validate_config(IndexConfig("idx", ["OrderId"]), self.schema)
        assert self.validator.get_validation_errors() == []
