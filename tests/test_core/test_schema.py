import pytest
from lakeindex.core.exceptions import ConfigError
from lakeindex.core.schema import Schema, sort_key
from lakeindex.core.types import FieldType, Predicate


class TestSchema:
    """Tests for Schema lookups, projection and validation."""

    def setup_method(self):
        self.orders = Schema.of(
            ("OrderId", FieldType.INT),
            ("CustomerId", FieldType.INT),
            ("TotalAmount", FieldType.DOUBLE),
            ("Status", FieldType.STRING),
        )

    def test_of_builds_names_and_types(self):
        assert self.orders.field_names == ["OrderId", "CustomerId", "TotalAmount", "Status"]
        assert self.orders.get_field_type("TotalAmount") == FieldType.DOUBLE
        assert self.orders.num_fields() == 4

    def test_empty_schema_rejected(self):
        with pytest.raises(ConfigError, match="at least one column"):
            Schema([], [])

    def test_mismatched_lengths_rejected(self):
        with pytest.raises(ConfigError, match="must match"):
            Schema(["a", "b"], [FieldType.INT])

    def test_duplicate_names_rejected(self):
        with pytest.raises(ConfigError, match="Duplicate"):
            Schema(["a", "a"], [FieldType.INT, FieldType.INT])

    def test_name_to_index(self):
        assert self.orders.name_to_index("OrderId") == 0
        assert self.orders.name_to_index("Status") == 3

    def test_name_to_index_strips_qualifier(self):
        assert self.orders.name_to_index("orders.CustomerId") == 1

    def test_name_to_index_unknown_column(self):
        with pytest.raises(ConfigError, match="not found"):
            self.orders.name_to_index("Missing")

    def test_missing_preserves_order(self):
        assert self.orders.missing(["Zed", "OrderId", "Alpha"]) == ["Zed", "Alpha"]
        assert self.orders.missing(["OrderId"]) == []

    def test_project_reorders(self):
        projected = self.orders.project(["TotalAmount", "CustomerId"])
        assert projected.field_names == ["TotalAmount", "CustomerId"]
        assert projected.field_types == [FieldType.DOUBLE, FieldType.INT]

    def test_validate_row_accepts_matching_row(self):
        self.orders.validate_row((1, 203, 42.5, "shipped"))
        self.orders.validate_row((1, None, 42, None))

    def test_validate_row_wrong_arity(self):
        with pytest.raises(ConfigError, match="schema expects 4"):
            self.orders.validate_row((1, 2))

    def test_validate_row_wrong_type(self):
        with pytest.raises(ConfigError, match="Status"):
            self.orders.validate_row((1, 203, 42.5, 7))

    def test_validate_row_rejects_bool_for_int(self):
        with pytest.raises(ConfigError, match="OrderId"):
            self.orders.validate_row((True, 203, 42.5, "shipped"))

    def test_combine_renames_clashing_right_columns(self):
        customers = Schema.of(("CustomerId", FieldType.INT), ("Name", FieldType.STRING))
        combined = Schema.combine(self.orders, customers)
        assert combined.field_names == [
            "OrderId", "CustomerId", "TotalAmount", "Status", "right.CustomerId", "Name"]

    def test_round_trip_dict(self):
        assert Schema.from_dict(self.orders.to_dict()) == self.orders

    def test_equality_and_hash(self):
        same = Schema.of(
            ("OrderId", FieldType.INT),
            ("CustomerId", FieldType.INT),
            ("TotalAmount", FieldType.DOUBLE),
            ("Status", FieldType.STRING),
        )
        assert same == self.orders
        assert hash(same) == hash(self.orders)
        assert self.orders != self.orders.project(["OrderId"])
        assert self.orders != "not a schema"

    def test_str(self):
        assert str(Schema.of(("a", FieldType.INT))) == "Schema(a:int)"


class TestSortKey:
    """Tests for the row sort key helper."""

    def test_sorts_by_positions(self):
        rows = [(3, "c"), (1, "b"), (2, "a")]
        assert sorted(rows, key=sort_key([1])) == [(2, "a"), (1, "b"), (3, "c")]

    def test_none_sorts_last(self):
        rows = [(None,), (2,), (1,)]
        assert sorted(rows, key=sort_key([0])) == [(1,), (2,), (None,)]


class TestTypes:
    """Tests for FieldType and Predicate."""

    def test_accepts(self):
        assert FieldType.INT.accepts(5)
        assert not FieldType.INT.accepts("5")
        assert FieldType.DOUBLE.accepts(5)
        assert FieldType.FLOAT.accepts(1.5)
        assert FieldType.BOOLEAN.accepts(False)
        assert not FieldType.DOUBLE.accepts(True)
        assert FieldType.STRING.accepts(None)

    def test_comparable_with(self):
        assert FieldType.INT.comparable_with(FieldType.INT)
        assert FieldType.INT.comparable_with(FieldType.DOUBLE)
        assert FieldType.FLOAT.comparable_with(FieldType.INT)
        assert not FieldType.INT.comparable_with(FieldType.STRING)
        assert not FieldType.BOOLEAN.comparable_with(FieldType.INT)

    def test_predicate_evaluate(self):
        assert Predicate.EQUALS.evaluate(3, 3)
        assert Predicate.NOT_EQUALS.evaluate(3, 4)
        assert Predicate.GREATER_THAN.evaluate(4, 3)
        assert Predicate.LESS_THAN_OR_EQ.evaluate(3, 3)
        assert not Predicate.LESS_THAN.evaluate(3, 3)

    def test_predicate_with_none_is_false(self):
        assert not Predicate.EQUALS.evaluate(None, None)
        assert not Predicate.NOT_EQUALS.evaluate(None, 1)
