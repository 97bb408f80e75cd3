from .plan import (
    Expression, Comparison, And, Or, eq, compare,
    PlanNode, Scan, Filter, Project, Join,
    FilterStrategy, JoinStrategy,
)
from .rewriter import PlanRewriter
from .executor import PlanExecutor

__all__ = [
    "Expression",
    "Comparison",
    "And",
    "Or",
    "eq",
    "compare",
    "PlanNode",
    "Scan",
    "Filter",
    "Project",
    "Join",
    "FilterStrategy",
    "JoinStrategy",
    "PlanRewriter",
    "PlanExecutor",
]
