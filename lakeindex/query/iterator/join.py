from collections import defaultdict
from typing import Optional

from .abstract_iterator import AbstractDbIterator
from .db_iterator import DbIterator
from ...core.schema import Schema, sort_key


class _JoinBase(AbstractDbIterator):
    """Shared plumbing for inner equi-joins: key extraction and buffered output."""

    def __init__(self, left: DbIterator, right: DbIterator,
                 left_keys: tuple[str, ...], right_keys: tuple[str, ...]):
        super().__init__()
        self.left = left
        self.right = right
        left_schema, right_schema = left.get_schema(), right.get_schema()
        self.left_positions = [left_schema.name_to_index(k) for k in left_keys]
        self.right_positions = [right_schema.name_to_index(k) for k in right_keys]
        self.schema = Schema.combine(left_schema, right_schema)
        self.output: list[tuple] = []
        self.cursor = 0

    def open(self) -> None:
        super().open()
        self.left.open()
        self.right.open()
        self.output = self.compute()
        self.cursor = 0

    def close(self) -> None:
        self.left.close()
        self.right.close()
        self.output = []
        super().close()

    def rewind(self) -> None:
        self._clear_buffer()
        self.cursor = 0

    def get_schema(self) -> Schema:
        return self.schema

    def read_next(self) -> Optional[tuple]:
        if self.cursor >= len(self.output):
            return None
        row = self.output[self.cursor]
        self.cursor += 1
        return row

    def compute(self) -> list[tuple]:
        raise NotImplementedError

    @staticmethod
    def drain(iterator: DbIterator) -> list[tuple]:
        rows = []
        while iterator.has_next():
            rows.append(iterator.next())
        return rows

    @staticmethod
    def key_of(row: tuple, positions: list[int]) -> Optional[tuple]:
        """Join key of a row, or None when any key column is missing (never matches)."""
        key = tuple(row[i] for i in positions)
        return None if any(value is None for value in key) else key


class HashJoinIterator(_JoinBase):
    """
    Broadcast hash join: builds a hash table over the right input and
    probes it with every left row. Output follows left input order.
    """

    def compute(self) -> list[tuple]:
        table: dict[tuple, list[tuple]] = defaultdict(list)
        for row in self.drain(self.right):
            key = self.key_of(row, self.right_positions)
            if key is not None:
                table[key].append(row)

        output = []
        for row in self.drain(self.left):
            key = self.key_of(row, self.left_positions)
            if key is None:
                continue
            for match in table.get(key, ()):
                output.append(row + match)
        return output


class SortMergeJoinIterator(_JoinBase):
    """
    Sort-merge join over inputs already sorted on their join keys.

    Both sides are advanced in lock step; each run of equal keys on the
    left is paired with the matching run on the right. Inputs that are not
    sorted are sorted first, so the result never depends on the caller
    getting the physical order right. Keys whose types cannot be ordered
    against each other never compare equal, so such inputs join to nothing.
    """

    def compute(self) -> list[tuple]:
        left_rows = self._sorted(self.drain(self.left), self.left_positions)
        right_rows = self._sorted(self.drain(self.right), self.right_positions)
        try:
            return self._merge(left_rows, right_rows)
        except TypeError:
            return []

    def _merge(self, left_rows: list[tuple], right_rows: list[tuple]) -> list[tuple]:
        left_key, right_key = sort_key(self.left_positions), sort_key(self.right_positions)

        output = []
        i = j = 0
        while i < len(left_rows) and j < len(right_rows):
            lk, rk = left_key(left_rows[i]), right_key(right_rows[j])
            if lk < rk:
                i += 1
            elif lk > rk:
                j += 1
            else:
                i_end = i
                while i_end < len(left_rows) and left_key(left_rows[i_end]) == lk:
                    i_end += 1
                j_end = j
                while j_end < len(right_rows) and right_key(right_rows[j_end]) == rk:
                    j_end += 1

                if self.key_of(left_rows[i], self.left_positions) is not None:
                    for left_row in left_rows[i:i_end]:
                        for right_row in right_rows[j:j_end]:
                            output.append(left_row + right_row)
                i, j = i_end, j_end
        return output

    @staticmethod
    def _sorted(rows: list[tuple], positions: list[int]) -> list[tuple]:
        key = sort_key(positions)
        if all(key(a) <= key(b) for a, b in zip(rows, rows[1:])):
            return rows
        return sorted(rows, key=key)
