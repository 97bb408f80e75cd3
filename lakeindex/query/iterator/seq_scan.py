from typing import Iterator, Optional

from .abstract_iterator import AbstractDbIterator
from ...core.exceptions import StorageError
from ...core.schema import Schema
from ...storage import DatasetStore


class SeqScan(AbstractDbIterator):
    """
    SeqScan reads every row of a dataset in storage order.

    Used for both source datasets and index storage locations; index data
    comes back sorted by the indexed columns because that is how the
    builder wrote it.
    """

    def __init__(self, store: DatasetStore, path: str, schema: Schema):
        """
        Args:
            store: Dataset store to read through
            path: Directory of the dataset
            schema: Columns the plan expects, in output order
        """
        super().__init__()
        self.store = store
        self.path = path
        self.schema = schema
        self.rows: tuple[tuple, ...] = ()
        self.iterator: Optional[Iterator[tuple]] = None

    def open(self) -> None:
        """
        Read the dataset and line its columns up with the expected schema.

        Raises:
            StorageError: If the dataset is gone or lacks an expected column
        """
        super().open()
        dataset = self.store.open(self.path)
        missing = dataset.schema.missing(self.schema.field_names)
        if missing:
            raise StorageError(f"Dataset {self.path} lacks columns {missing}")

        rows = self.store.read_rows(dataset)
        if dataset.schema.field_names != self.schema.field_names:
            positions = [dataset.schema.name_to_index(name) for name in self.schema.field_names]
            rows = tuple(tuple(row[i] for i in positions) for row in rows)
        self.rows = rows
        self.iterator = iter(self.rows)

    def close(self) -> None:
        self.iterator = None
        self.rows = ()
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
