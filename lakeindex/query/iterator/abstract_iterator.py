from abc import abstractmethod
from typing import Optional

from .db_iterator import DbIterator


class AbstractDbIterator(DbIterator):
    """
    Helper base class for implementing DbIterators.

    This class handles the common logic for has_next()/next() by implementing
    a "read-ahead" pattern. Subclasses only need to implement read_next().

    How it works:
    1. has_next() calls read_next() if no row is buffered
    2. next() returns the buffered row and clears the buffer
    3. read_next() is where subclasses implement their specific logic
    """

    def __init__(self):
        self._next_row: Optional[tuple] = None
        self._is_open = False

    def has_next(self) -> bool:
        if not self._is_open:
            raise RuntimeError("Iterator not open")

        if self._next_row is None:
            self._next_row = self.read_next()
        return self._next_row is not None

    def next(self) -> tuple:
        if not self._is_open:
            raise RuntimeError("Iterator not open")

        if self._next_row is None:
            self._next_row = self.read_next()

        if self._next_row is None:
            raise StopIteration("No more rows")

        result = self._next_row
        self._next_row = None  # Clear buffer
        return result

    def open(self) -> None:
        """Mark iterator as open. Subclasses should override and call super()."""
        self._is_open = True

    def close(self) -> None:
        """Mark iterator as closed and clear buffer. Subclasses should override and call super()."""
        self._is_open = False
        self._next_row = None

    def _clear_buffer(self) -> None:
        self._next_row = None

    @abstractmethod
    def read_next(self) -> Optional[tuple]:
        """
        Read the next row from the data source.

        Should return None when no more rows are available.
        """
        pass
