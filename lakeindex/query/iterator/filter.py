import bisect
from typing import Any, Optional

from .abstract_iterator import AbstractDbIterator
from .db_iterator import DbIterator
from .row_iterator import RowIterator
from ...core.schema import Schema, sort_key


class FilterIterator(AbstractDbIterator):
    """Passes through the child rows that satisfy a condition."""

    def __init__(self, child: DbIterator, condition):
        super().__init__()
        self.child = child
        self.condition = condition
        self.matches = condition.bind(child.get_schema())

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
        return self.child.get_schema()

    def read_next(self) -> Optional[tuple]:
        while self.child.has_next():
            row = self.child.next()
            if self.matches(row):
                return row
        return None


class SortedLookupIterator(AbstractDbIterator):
    """
    Filter over input sorted by ``lookup_column``.

    Instead of testing every row, binary-searches the run of rows whose
    lookup column equals ``lookup_value`` and only tests those against the
    full condition. A lookup value that cannot be ordered against the
    column finds no run.
    """

    def __init__(self, child: DbIterator, condition, lookup_column: str, lookup_value: Any):
        super().__init__()
        self.child = child
        self.condition = condition
        self.matches = condition.bind(child.get_schema())
        self.position = child.get_schema().name_to_index(lookup_column)
        self.lookup_value = lookup_value
        self.candidates: Optional[RowIterator] = None

    def open(self) -> None:
        super().open()
        self.child.open()
        rows = []
        while self.child.has_next():
            rows.append(self.child.next())

        key = sort_key([self.position])
        keys = [key(row) for row in rows]
        probe = ((self.lookup_value is None, self.lookup_value),)
        try:
            low = bisect.bisect_left(keys, probe)
            high = bisect.bisect_right(keys, probe)
        except TypeError:
            low = high = 0

        self.candidates = RowIterator(self.child.get_schema(), rows[low:high])
        self.candidates.open()

    def close(self) -> None:
        self.child.close()
        if self.candidates is not None:
            self.candidates.close()
        self.candidates = None
        super().close()

    def rewind(self) -> None:
        self._clear_buffer()
        if self.candidates is not None:
            self.candidates.rewind()

    def get_schema(self) -> Schema:
        return self.child.get_schema()

    def read_next(self) -> Optional[tuple]:
        if self.candidates is None:
            return None
        while self.candidates.has_next():
            row = self.candidates.next()
            if self.matches(row):
                return row
        return None
