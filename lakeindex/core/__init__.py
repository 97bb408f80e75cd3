from .exceptions import (
    IndexException,
    ConfigError,
    DuplicateNameError,
    NotFoundError,
    InvalidStateError,
    StorageError,
    PlanError,
)
from .schema import Schema
from .types import FieldType, Predicate

__all__ = [
    "IndexException",
    "ConfigError",
    "DuplicateNameError",
    "NotFoundError",
    "InvalidStateError",
    "StorageError",
    "PlanError",
    "Schema",
    "FieldType",
    "Predicate",
]
