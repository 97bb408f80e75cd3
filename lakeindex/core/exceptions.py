"""Custom exceptions for the indexing system."""


class IndexException(Exception):
    """Base exception for index-related errors."""
    pass


class ConfigError(IndexException):
    """Raised when an index config or runtime setting is invalid (bad column references, bad values)."""
    pass


class DuplicateNameError(IndexException):
    """Raised when an index name collides with a live catalog entry."""
    pass


class NotFoundError(IndexException):
    """Raised when an index is absent, or not in a state the operation can find."""
    pass


class InvalidStateError(IndexException):
    """Raised when an index exists but is in the wrong lifecycle state (e.g. vacuum before delete)."""
    pass


class StorageError(IndexException):
    """Raised when a dataset cannot be read or written."""
    pass


class PlanError(IndexException):
    """Raised when a query plan is malformed."""
    pass
