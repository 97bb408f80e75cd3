from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.schema import Schema


class DbIterator(ABC):
    """
    DbIterator is the iterator interface that all plan operators implement.

    The executor turns every plan node into one of these and pulls rows
    from the root.

    Key Design Principles:
    1. **Pull-based execution**: Operators pull rows from their children
    2. **Iterator pattern**: has_next() + next() for row streaming
    3. **Resource management**: open() + close() for setup/cleanup
    4. **Composability**: Operators can be chained together
    """

    @abstractmethod
    def open(self) -> None:
        """
        Opens the iterator.
        This must be called before any other methods.

        Raises:
            StorageError: When the underlying data cannot be read
        """
        pass

    @abstractmethod
    def has_next(self) -> bool:
        """
        Returns true if the iterator has more rows.

        This method should NOT advance the iterator position.

        Raises:
            RuntimeError: If the iterator has not been opened
        """
        pass

    @abstractmethod
    def next(self) -> tuple:
        """
        Returns the next row from the operator.

        Raises:
            StopIteration: If there are no more rows
            RuntimeError: If the iterator has not been opened
        """
        pass

    @abstractmethod
    def rewind(self) -> None:
        """
        Resets the iterator to the start.

        After calling rewind(), the next call to next() returns the
        first row again.
        """
        pass

    @abstractmethod
    def get_schema(self) -> 'Schema':
        """
        Returns the Schema of the rows produced by this operator.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Closes the iterator and releases resources.

        This method should:
        1. Close child iterators (if any)
        2. Release any held resources
        3. Mark iterator as closed
        """
        pass
