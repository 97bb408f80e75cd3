from typing import Iterator, Optional

from .abstract_iterator import AbstractDbIterator
from ...core.schema import Schema


class RowIterator(AbstractDbIterator):
    """
    Implements a DbIterator by wrapping a list of rows.

    This is useful for:
    1. **Testing**: Create test data sets easily
    2. **Materialized results**: Rows already read from storage
    3. **Sorted lookups**: The run of rows a binary search found in an index

    The iterator validates that all rows conform to the provided schema.
    """

    def __init__(self, schema: Schema, rows: list[tuple]):
        """
        Raises:
            ConfigError: If any row doesn't match the schema
        """
        super().__init__()
        self.schema = schema
        self.rows = list(rows)
        self.iterator: Optional[Iterator[tuple]] = None

        for row in self.rows:
            schema.validate_row(row)

    def open(self) -> None:
        super().open()
        self.iterator = iter(self.rows)

    def close(self) -> None:
        self.iterator = None
        super().close()

    def rewind(self) -> None:
        self._clear_buffer()
        self.iterator = iter(self.rows)

    def get_schema(self) -> Schema:
        return self.schema

    def read_next(self) -> Optional[tuple]:
        if not self.iterator:
            return None
        return next(self.iterator, None)
