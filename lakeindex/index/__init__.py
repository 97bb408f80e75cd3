from .index_builder import IndexBuilder
from .index_manager import IndexManager

__all__ = ["IndexBuilder", "IndexManager"]
