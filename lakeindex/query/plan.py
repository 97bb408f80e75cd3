"""
Logical query plans.

A plan is a tree of immutable nodes. Every node type is a frozen dataclass
with a fixed set of children, so code that walks plans can dispatch on the
node type with ``isinstance`` and rebuild trees with ``with_children``:

```
Project [TotalAmount]
+- Filter (CustomerId = 203)
   +- Scan orders [OrderId, CustomerId, TotalAmount]
```
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from ..core.exceptions import PlanError, ConfigError
from ..core.schema import Schema
from ..core.types import Predicate
from ..storage import Dataset


# =============================================================================
# FILTER EXPRESSIONS
# =============================================================================

class Expression(ABC):
    """Boolean condition over the columns of a row."""

    @abstractmethod
    def columns(self) -> set[str]:
        """Every column the condition reads."""

    @abstractmethod
    def equality_columns(self) -> set[str]:
        """Columns compared with ``=`` in top-level conjuncts."""

    @abstractmethod
    def bind(self, schema: Schema) -> Callable[[tuple], bool]:
        """Compile the condition against a schema into a row predicate."""

    def conjuncts(self) -> list['Expression']:
        return [self]

    def __and__(self, other: 'Expression') -> 'Expression':
        return And(self, other)

    def __or__(self, other: 'Expression') -> 'Expression':
        return Or(self, other)


@dataclass(frozen=True)
class Comparison(Expression):
    column: str
    predicate: Predicate
    value: Any

    def columns(self) -> set[str]:
        return {self.column}

    def equality_columns(self) -> set[str]:
        return {self.column} if self.predicate == Predicate.EQUALS else set()

    def bind(self, schema: Schema) -> Callable[[tuple], bool]:
        position = schema.name_to_index(self.column)
        predicate, value = self.predicate, self.value
        return lambda row: predicate.evaluate(row[position], value)

    def __str__(self) -> str:
        return f"({self.column} {self.predicate.value} {self.value!r})"


@dataclass(frozen=True)
class And(Expression):
    left: Expression
    right: Expression

    def columns(self) -> set[str]:
        return self.left.columns() | self.right.columns()

    def equality_columns(self) -> set[str]:
        return self.left.equality_columns() | self.right.equality_columns()

    def conjuncts(self) -> list[Expression]:
        return self.left.conjuncts() + self.right.conjuncts()

    def bind(self, schema: Schema) -> Callable[[tuple], bool]:
        left, right = self.left.bind(schema), self.right.bind(schema)
        return lambda row: left(row) and right(row)

    def __str__(self) -> str:
        return f"({self.left} AND {self.right})"


@dataclass(frozen=True)
class Or(Expression):
    left: Expression
    right: Expression

    def columns(self) -> set[str]:
        return self.left.columns() | self.right.columns()

    def equality_columns(self) -> set[str]:
        # Neither side alone pins a column to a value
        return set()

    def bind(self, schema: Schema) -> Callable[[tuple], bool]:
        left, right = self.left.bind(schema), self.right.bind(schema)
        return lambda row: left(row) or right(row)

    def __str__(self) -> str:
        return f"({self.left} OR {self.right})"


def eq(column: str, value: Any) -> Comparison:
    """Shorthand for ``column = value``."""
    return Comparison(column, Predicate.EQUALS, value)


def compare(column: str, op: str, value: Any) -> Comparison:
    """Build a comparison from an operator string such as ``">="``."""
    try:
        return Comparison(column, Predicate(op), value)
    except ValueError:
        raise PlanError(f"Unknown comparison operator: {op}")


# =============================================================================
# PLAN NODES
# =============================================================================

class FilterStrategy(Enum):
    """How a filter reaches its matching rows."""
    SCAN = "Scan"
    SORTED_LOOKUP = "SortedLookup"


class JoinStrategy(Enum):
    """Physical join algorithm."""
    BROADCAST_HASH = "BroadcastHashJoin"
    SORT_MERGE = "SortMergeJoin"


class PlanNode(ABC):
    """
    Base class for plan nodes.

    Subclasses are frozen dataclasses; they validate their inputs on
    construction, so a plan that exists is well-formed.
    """

    @abstractmethod
    def children(self) -> tuple['PlanNode', ...]:
        pass

    @abstractmethod
    def with_children(self, *children: 'PlanNode') -> 'PlanNode':
        """Return a copy of this node over new children."""

    @abstractmethod
    def output_schema(self) -> Schema:
        """Columns produced by this node."""

    @abstractmethod
    def sort_order(self) -> tuple[str, ...]:
        """Columns the output is known to be sorted by."""

    @abstractmethod
    def operator_name(self) -> str:
        """Physical operator label used by explain output."""

    @abstractmethod
    def describe(self) -> str:
        """One-line description of this node alone."""

    def walk(self) -> Iterator['PlanNode']:
        """Pre-order traversal of the tree."""
        yield self
        for child in self.children():
            yield from child.walk()

    def scans(self) -> list['Scan']:
        return [node for node in self.walk() if isinstance(node, Scan)]

    def tree_lines(self) -> list[str]:
        """Render the tree as indented lines, Spark-style."""
        lines = [self.describe()]
        children = self.children()
        for position, child in enumerate(children):
            last = position == len(children) - 1
            child_lines = child.tree_lines()
            lines.append(f"{'+-' if last else ':-'} {child_lines[0]}")
            lines.extend(f"{'  ' if last else ': '} {line}" for line in child_lines[1:])
        return lines

    def tree_string(self) -> str:
        return "\n".join(self.tree_lines())


@dataclass(frozen=True)
class Scan(PlanNode):
    """
    Leaf reading a whole dataset.

    A scan of a source dataset has no ``index_name``; the rewriter
    produces scans over index storage locations that carry the index name
    and the index's physical sort order.
    """
    path: str
    schema: Schema
    fingerprint: str = ""
    physical_sort: tuple[str, ...] = ()
    index_name: Optional[str] = None

    @classmethod
    def of(cls, dataset: Dataset) -> 'Scan':
        """Scan a source dataset as it was when the handle was opened."""
        return cls(dataset.path, dataset.schema, dataset.fingerprint, dataset.sort_order)

    @property
    def is_index_scan(self) -> bool:
        return self.index_name is not None

    def children(self) -> tuple[PlanNode, ...]:
        return ()

    def with_children(self, *children: PlanNode) -> PlanNode:
        if children:
            raise PlanError("Scan has no children")
        return self

    def output_schema(self) -> Schema:
        return self.schema

    def sort_order(self) -> tuple[str, ...]:
        return self.physical_sort

    def operator_name(self) -> str:
        return "IndexScan" if self.is_index_scan else "FileScan"

    def describe(self) -> str:
        columns = ", ".join(self.schema.field_names)
        if self.is_index_scan:
            return (f"IndexScan {self.index_name} [{columns}] "
                    f"sorted by [{', '.join(self.physical_sort)}] Location: {self.path}")
        return f"FileScan [{columns}] Location: {self.path}"


@dataclass(frozen=True)
class Filter(PlanNode):
    condition: Expression
    child: PlanNode
    strategy: FilterStrategy = FilterStrategy.SCAN

    def __post_init__(self):
        missing = self.child.output_schema().missing(sorted(self.condition.columns()))
        if missing:
            raise PlanError(f"Filter references unknown columns: {missing}")

    def children(self) -> tuple[PlanNode, ...]:
        return (self.child,)

    def with_children(self, *children: PlanNode) -> PlanNode:
        (child,) = children
        return replace(self, child=child)

    def output_schema(self) -> Schema:
        return self.child.output_schema()

    def sort_order(self) -> tuple[str, ...]:
        return self.child.sort_order()

    def lookup_conjunct(self) -> Optional[Comparison]:
        """
        The ``=`` conjunct a sorted lookup would probe with.

        Only an equality on the leading sort column of the child whose
        value fits that column's type can drive a binary search.
        """
        order = self.child.sort_order()
        if not order:
            return None
        column_type = self.child.output_schema().get_field_type(order[0])
        for conjunct in self.condition.conjuncts():
            if (isinstance(conjunct, Comparison)
                    and conjunct.predicate == Predicate.EQUALS
                    and conjunct.column == order[0]
                    and column_type.accepts(conjunct.value)):
                return conjunct
        return None

    def operator_name(self) -> str:
        return "Filter"

    def describe(self) -> str:
        suffix = f" [{self.strategy.value}]" if self.strategy != FilterStrategy.SCAN else ""
        return f"Filter {self.condition}{suffix}"


@dataclass(frozen=True)
class Project(PlanNode):
    columns: tuple[str, ...]
    child: PlanNode

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        if not self.columns:
            raise PlanError("Project must keep at least one column")
        missing = self.child.output_schema().missing(list(self.columns))
        if missing:
            raise PlanError(f"Project references unknown columns: {missing}")

    def children(self) -> tuple[PlanNode, ...]:
        return (self.child,)

    def with_children(self, *children: PlanNode) -> PlanNode:
        (child,) = children
        return replace(self, child=child)

    def output_schema(self) -> Schema:
        return self.child.output_schema().project(list(self.columns))

    def sort_order(self) -> tuple[str, ...]:
        # Sortedness survives only for the leading columns that are kept
        kept = []
        for column in self.child.sort_order():
            if column not in self.columns:
                break
            kept.append(column)
        return tuple(kept)

    def operator_name(self) -> str:
        return "Project"

    def describe(self) -> str:
        return f"Project [{', '.join(self.columns)}]"


@dataclass(frozen=True)
class Join(PlanNode):
    """
    Inner equi-join.

    Output columns are the left columns followed by the right columns;
    right-hand names that clash with the left side appear as ``right.<name>``.
    """
    left: PlanNode
    right: PlanNode
    left_keys: tuple[str, ...]
    right_keys: tuple[str, ...]
    strategy: JoinStrategy = JoinStrategy.BROADCAST_HASH
    _schema: Schema = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "left_keys", tuple(self.left_keys))
        object.__setattr__(self, "right_keys", tuple(self.right_keys))
        if not self.left_keys or len(self.left_keys) != len(self.right_keys):
            raise PlanError(
                f"Join keys must be non-empty and pairwise: {self.left_keys} vs {self.right_keys}")
        for side, child, keys in (("left", self.left, self.left_keys),
                                  ("right", self.right, self.right_keys)):
            missing = child.output_schema().missing(list(keys))
            if missing:
                raise PlanError(f"Join {side} keys not in {side} input: {missing}")
        try:
            combined = Schema.combine(self.left.output_schema(), self.right.output_schema())
        except ConfigError as e:
            raise PlanError(f"Join produces an invalid schema: {e}")
        object.__setattr__(self, "_schema", combined)

    def children(self) -> tuple[PlanNode, ...]:
        return (self.left, self.right)

    def with_children(self, *children: PlanNode) -> PlanNode:
        left, right = children
        return Join(left, right, self.left_keys, self.right_keys, self.strategy)

    def output_schema(self) -> Schema:
        return self._schema

    def sort_order(self) -> tuple[str, ...]:
        if self.strategy == JoinStrategy.SORT_MERGE:
            return self.left_keys
        return ()

    def keys_comparable(self) -> bool:
        """Whether every key pair has types that can be merged in sort order."""
        left_schema, right_schema = self.left.output_schema(), self.right.output_schema()
        return all(
            left_schema.get_field_type(lk).comparable_with(right_schema.get_field_type(rk))
            for lk, rk in zip(self.left_keys, self.right_keys)
        )

    def resolve_output(self, column: str) -> tuple[str, str]:
        """
        Map an output column name to ``(side, input column)``.

        Returns:
            ``("left", name)`` or ``("right", name)``
        """
        position = self._schema.name_to_index(column)
        left_width = self.left.output_schema().num_fields()
        if position < left_width:
            return "left", self.left.output_schema().field_names[position]
        return "right", self.right.output_schema().field_names[position - left_width]

    def operator_name(self) -> str:
        return self.strategy.value

    def describe(self) -> str:
        keys = ", ".join(f"{lk} = {rk}" for lk, rk in zip(self.left_keys, self.right_keys))
        return f"{self.strategy.value} [{keys}]"
