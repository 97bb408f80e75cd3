"""
Covering indexes for data lake datasets.

Build secondary indexes over datasets, let the planner substitute index
scans for source scans, and compare plans with and without indexes.
"""

from .catalog import IndexCatalog, IndexConfig, IndexEntry, IndexState
from .config import DisplayMode, LakeIndexConfig
from .core import (
    IndexException,
    ConfigError,
    DuplicateNameError,
    NotFoundError,
    InvalidStateError,
    StorageError,
    PlanError,
    Schema,
    FieldType,
    Predicate,
)
from .explain import ExplainReporter
from .index import IndexBuilder, IndexManager
from .query import (
    Comparison, And, Or, eq, compare,
    PlanNode, Scan, Filter, Project, Join,
    FilterStrategy, JoinStrategy,
    PlanRewriter, PlanExecutor,
)
from .session import IndexingSession, RewriteSettings
from .storage import Dataset, DatasetStore
from .workspace import Workspace

__all__ = [
    "IndexCatalog", "IndexConfig", "IndexEntry", "IndexState",
    "DisplayMode", "LakeIndexConfig",
    "IndexException", "ConfigError", "DuplicateNameError", "NotFoundError",
    "InvalidStateError", "StorageError", "PlanError",
    "Schema", "FieldType", "Predicate",
    "ExplainReporter",
    "IndexBuilder", "IndexManager",
    "Comparison", "And", "Or", "eq", "compare",
    "PlanNode", "Scan", "Filter", "Project", "Join",
    "FilterStrategy", "JoinStrategy",
    "PlanRewriter", "PlanExecutor",
    "IndexingSession", "RewriteSettings",
    "Dataset", "DatasetStore",
    "Workspace",
]
