from ..core.exceptions import PlanError
from ..storage import DatasetStore
from .iterator import (
    DbIterator, SeqScan, FilterIterator, SortedLookupIterator,
    ProjectIterator, HashJoinIterator, SortMergeJoinIterator,
)
from .plan import (
    PlanNode, Scan, Filter, Project, Join, Comparison,
    FilterStrategy, JoinStrategy,
)


class PlanExecutor:
    """
    Turns a plan into an iterator tree and runs it.

    Each node maps to exactly one operator; the physical choices recorded
    in the plan (filter and join strategies) decide which operator.
    """

    def __init__(self, store: DatasetStore):
        self.store = store

    def build(self, plan: PlanNode) -> DbIterator:
        """Create the (unopened) iterator tree for a plan."""
        if isinstance(plan, Scan):
            return SeqScan(self.store, plan.path, plan.schema)

        if isinstance(plan, Filter):
            child = self.build(plan.child)
            if plan.strategy == FilterStrategy.SORTED_LOOKUP:
                lookup = self._lookup_conjunct(plan)
                return SortedLookupIterator(child, plan.condition, lookup.column, lookup.value)
            return FilterIterator(child, plan.condition)

        if isinstance(plan, Project):
            return ProjectIterator(self.build(plan.child), plan.columns)

        if isinstance(plan, Join):
            left, right = self.build(plan.left), self.build(plan.right)
            if plan.strategy == JoinStrategy.SORT_MERGE:
                return SortMergeJoinIterator(left, right, plan.left_keys, plan.right_keys)
            return HashJoinIterator(left, right, plan.left_keys, plan.right_keys)

        raise PlanError(f"Unsupported plan node: {type(plan).__name__}")

    def execute(self, plan: PlanNode) -> list[tuple]:
        """Run a plan to completion and return its rows."""
        iterator = self.build(plan)
        iterator.open()
        try:
            rows = []
            while iterator.has_next():
                rows.append(iterator.next())
            return rows
        finally:
            iterator.close()

    @staticmethod
    def _lookup_conjunct(plan: Filter) -> Comparison:
        """The ``=`` conjunct on the leading sort column a sorted lookup probes with."""
        lookup = plan.lookup_conjunct()
        if lookup is None:
            raise PlanError(f"Sorted lookup needs '=' on {plan.child.sort_order()[:1]} "
                            f"in {plan.condition}")
        return lookup
