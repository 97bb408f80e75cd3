from typing import Optional

from .abstract_iterator import AbstractDbIterator
from .db_iterator import DbIterator
from ...core.schema import Schema


class ProjectIterator(AbstractDbIterator):
    """Keeps the named columns of each child row, in the given order."""

    def __init__(self, child: DbIterator, columns: tuple[str, ...]):
        super().__init__()
        self.child = child
        child_schema = child.get_schema()
        self.positions = [child_schema.name_to_index(name) for name in columns]
        self.schema = child_schema.project(list(columns))

    def open(self) -> None:
        super().open()
        self.child.open()

    def close(self) -> None:
        self.child.close()
        super().close()

    def rewind(self) -> None:
        self._clear_buffer()
        self.child.rewind()

    def get_schema(self) -> Schema:
        return self.schema

    def read_next(self) -> Optional[tuple]:
        if not self.child.has_next():
            return None
        row = self.child.next()
        return tuple(row[i] for i in self.positions)
