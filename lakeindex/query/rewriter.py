from dataclasses import replace
from typing import Optional

from ..catalog import IndexCatalog, IndexEntry, IndexState
from ..session import RewriteSettings
from .plan import (
    PlanNode, Scan, Filter, Project, Join,
    FilterStrategy, JoinStrategy,
)


class PlanRewriter:
    """
    Substitutes source scans with scans of covering indexes.

    For every leaf scan of a source dataset the rewriter works out:
    1. **Required columns**: what the ancestors read (projections, filter
       columns, join keys, output columns)
    2. **Equality columns**: columns pinned by ``=`` in the filter conjuncts
       above the scan, plus the join keys of the enclosing join side

    An ACTIVE index qualifies when it was built from the same dataset at the
    same fingerprint, its indexed columns contain every equality column and
    its indexed + included columns contain every required column. Among
    qualifying indexes the narrowest wins, then the lexicographically
    smallest name.

    Once a scan is replaced, strategies above it switch to ones that use
    the index sort order:
    - Filter with ``=`` on the first indexed column, with a value of that
      column's type -> SortedLookup
    - Join with both sides sorted on exactly the join keys, and key types
      that can be ordered against each other -> SortMergeJoin

    Rewriting is pure: the catalog is only read through one snapshot per
    call and nothing is written. If no scan is replaced, the input plan
    object is returned as is.
    """

    def __init__(self, catalog: IndexCatalog):
        self.catalog = catalog

    def rewrite(self, plan: PlanNode, settings: RewriteSettings) -> PlanNode:
        """
        Rewrite a plan to use indexes.

        Args:
            plan: Plan over source datasets
            settings: Planning snapshot; when disabled this is the identity

        Returns:
            The rewritten plan, or ``plan`` itself if nothing applied
        """
        if not settings.enabled:
            return plan

        candidates = tuple(entry for entry in self.catalog.snapshot()
                           if entry.state == IndexState.ACTIVE)
        if not candidates:
            return plan

        required = frozenset(plan.output_schema().field_names)
        rewritten = _RewritePass(candidates).visit(plan, required, frozenset())
        if rewritten is plan:
            return plan

        # Index scans lay out columns indexed-first; keep the caller's column order
        if rewritten.output_schema() != plan.output_schema():
            rewritten = Project(tuple(plan.output_schema().field_names), rewritten)
        return rewritten

    def indexes_used(self, plan: PlanNode, settings: RewriteSettings) -> list[IndexEntry]:
        """Entries whose storage the rewritten plan scans, ordered by name."""
        rewritten = self.rewrite(plan, settings)
        names = {scan.index_name for scan in rewritten.scans() if scan.is_index_scan}
        return [entry for entry in self.catalog.snapshot() if entry.name in names]


class _RewritePass:
    """One walk over a plan against a fixed set of candidate entries."""

    def __init__(self, candidates: tuple[IndexEntry, ...]):
        self.candidates = candidates

    def visit(self, node: PlanNode, required: frozenset[str],
              equalities: frozenset[str]) -> PlanNode:
        if isinstance(node, Scan):
            return self._visit_scan(node, required, equalities)
        if isinstance(node, Filter):
            return self._visit_filter(node, required, equalities)
        if isinstance(node, Project):
            return self._visit_project(node, equalities)
        if isinstance(node, Join):
            return self._visit_join(node, required, equalities)
        return node

    def _visit_scan(self, scan: Scan, required: frozenset[str],
                    equalities: frozenset[str]) -> PlanNode:
        if scan.is_index_scan or not equalities:
            return scan

        entry = self.choose_index(scan, required, equalities)
        if entry is None:
            return scan

        return Scan(
            path=entry.storage_location,
            schema=entry.schema,
            fingerprint=entry.source_fingerprint,
            physical_sort=entry.config.indexed_columns,
            index_name=entry.name,
        )

    def choose_index(self, scan: Scan, required: frozenset[str],
                     equalities: frozenset[str]) -> Optional[IndexEntry]:
        qualifying = [
            entry for entry in self.candidates
            if entry.source_path == scan.path
            and entry.source_fingerprint == scan.fingerprint
            and equalities <= set(entry.config.indexed_columns)
            and required <= set(entry.config.all_columns)
        ]
        if not qualifying:
            return None
        return min(qualifying, key=lambda entry: (entry.column_count(), entry.name))

    def _visit_filter(self, node: Filter, required: frozenset[str],
                      equalities: frozenset[str]) -> PlanNode:
        child_required = required | node.condition.columns()
        child_equalities = equalities | node.condition.equality_columns()
        child = self.visit(node.child, frozenset(child_required), frozenset(child_equalities))
        if child is node.child:
            return node

        rewritten = replace(node, child=child)
        if rewritten.lookup_conjunct() is not None:
            rewritten = replace(rewritten, strategy=FilterStrategy.SORTED_LOOKUP)
        return rewritten

    def _visit_project(self, node: Project, equalities: frozenset[str]) -> PlanNode:
        child_equalities = frozenset(c for c in equalities if c in node.columns)
        child = self.visit(node.child, frozenset(node.columns), child_equalities)
        if child is node.child:
            return node
        return replace(node, child=child)

    def _visit_join(self, node: Join, required: frozenset[str],
                    equalities: frozenset[str]) -> PlanNode:
        left_names = node.left.output_schema().field_names
        right_names = node.right.output_schema().field_names

        # Left columns that shadow right columns must stay, or right-hand names would shift
        left_required = set(node.left_keys) | (set(left_names) & set(right_names))
        right_required = set(node.right_keys)
        left_equalities = set(node.left_keys)
        right_equalities = set(node.right_keys)

        for column in required:
            side, name = node.resolve_output(column)
            (left_required if side == "left" else right_required).add(name)
        for column in equalities:
            side, name = node.resolve_output(column)
            (left_equalities if side == "left" else right_equalities).add(name)

        left = self.visit(node.left, frozenset(left_required), frozenset(left_equalities))
        right = self.visit(node.right, frozenset(right_required), frozenset(right_equalities))
        if left is node.left and right is node.right:
            return node

        strategy = node.strategy
        key_count = len(node.left_keys)
        if (left.sort_order()[:key_count] == node.left_keys
                and right.sort_order()[:key_count] == node.right_keys
                and node.keys_comparable()):
            strategy = JoinStrategy.SORT_MERGE
        return Join(left, right, node.left_keys, node.right_keys, strategy)
