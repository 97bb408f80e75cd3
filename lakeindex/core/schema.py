from .exceptions import ConfigError
from .types import FieldType


class Schema:
    """
    Column descriptor for a dataset.

    A Schema defines:
    1. The names of the columns, in order
    2. The type of each column
    3. Methods to look up, project and validate columns

    Rows flowing through the system are plain Python tuples laid out in
    schema order; the Schema is what tells us what a row looks like.
    """

    def __init__(self, field_names: list[str], field_types: list[FieldType]):
        if not field_names:
            raise ConfigError("Schema must have at least one column")

        if len(field_names) != len(field_types):
            raise ConfigError(f"Number of column names ({len(field_names)}) "
                              f"must match number of column types ({len(field_types)})")

        if len(field_names) != len(set(field_names)):
            raise ConfigError(f"Duplicate column names in schema: {field_names}")

        self.field_names = list(field_names)
        self.field_types = list(field_types)

    @classmethod
    def of(cls, *columns: tuple[str, FieldType]) -> 'Schema':
        """Build a schema from ``(name, type)`` pairs."""
        return cls([name for name, _ in columns], [ftype for _, ftype in columns])

    def num_fields(self) -> int:
        """Return the number of columns in this schema."""
        return len(self.field_names)

    def has_field(self, field_name: str) -> bool:
        return field_name in self.field_names

    def get_field_type(self, field_name: str) -> FieldType:
        """Get the type of the named column."""
        return self.field_types[self.name_to_index(field_name)]

    def name_to_index(self, field_name: str) -> int:
        """
        Find the position of a column by name.

        Supports both simple names ("id") and qualified names ("orders.id").
        For qualified names, we strip the dataset prefix and match on the column name.
        """
        if '.' in field_name and field_name not in self.field_names:
            field_name = field_name.split('.', 1)[1]

        try:
            return self.field_names.index(field_name)
        except ValueError:
            raise ConfigError(
                f"Column '{field_name}' not found in schema {self.field_names}")

    def missing(self, field_names: list[str]) -> list[str]:
        """Return the given column names that are not part of this schema, in order."""
        return [name for name in field_names if name not in self.field_names]

    def project(self, field_names: list[str]) -> 'Schema':
        """Return a new schema with only the given columns, in the given order."""
        indexes = [self.name_to_index(name) for name in field_names]
        return Schema([self.field_names[i] for i in indexes],
                      [self.field_types[i] for i in indexes])

    def validate_row(self, row: tuple) -> None:
        """
        Check that a row matches this schema.

        Raises:
            ConfigError: If the arity or any value type does not match
        """
        if len(row) != len(self.field_names):
            raise ConfigError(
                f"Row has {len(row)} values, schema expects {len(self.field_names)}")

        for name, field_type, value in zip(self.field_names, self.field_types, row):
            if not field_type.accepts(value):
                raise ConfigError(
                    f"Column '{name}' expects {field_type.value}, got {type(value).__name__}")

    @staticmethod
    def combine(left: 'Schema', right: 'Schema') -> 'Schema':
        """
        Combine two schemas into one (used for joins).

        The result has columns from left followed by columns from right.
        Right-hand columns whose names clash with the left side are
        renamed with a ``right.`` prefix.
        """
        names = list(left.field_names)
        for name in right.field_names:
            names.append(name if name not in left.field_names else f"right.{name}")
        return Schema(names, left.field_types + right.field_types)

    def to_dict(self) -> dict:
        return {
            "field_names": self.field_names,
            "field_types": [ft.value for ft in self.field_types],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Schema':
        return cls(data["field_names"], [FieldType(ft) for ft in data["field_types"]])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return False
        return (self.field_names == other.field_names and
                self.field_types == other.field_types)

    def __hash__(self) -> int:
        return hash((tuple(self.field_names), tuple(self.field_types)))

    def __str__(self) -> str:
        parts = [f"{name}:{ftype.value}"
                 for name, ftype in zip(self.field_names, self.field_types)]
        return f"Schema({', '.join(parts)})"

    def __repr__(self) -> str:
        return self.__str__()


def sort_key(indexes: list[int]):
    """
    Build a sort key over the given row positions.

    None values sort after every other value so that sorted datasets with
    missing values stay totally ordered.
    """
    def key(row: tuple) -> tuple:
        return tuple((row[i] is None, row[i]) for i in indexes)
    return key
