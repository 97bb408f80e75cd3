from .db_iterator import DbIterator
from .abstract_iterator import AbstractDbIterator
from .row_iterator import RowIterator
from .seq_scan import SeqScan
from .filter import FilterIterator, SortedLookupIterator
from .project import ProjectIterator
from .join import HashJoinIterator, SortMergeJoinIterator

__all__ = [
    "DbIterator",
    "AbstractDbIterator",
    "RowIterator",
    "SeqScan",
    "FilterIterator",
    "SortedLookupIterator",
    "ProjectIterator",
    "HashJoinIterator",
    "SortMergeJoinIterator",
]
