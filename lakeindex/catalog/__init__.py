from .catalog import IndexCatalog
from .config_validator import IndexConfigValidator
from .index_info import IndexConfig, IndexEntry, IndexState
from .persistence import CatalogPersistence, CatalogState

__all__ = [
    "IndexCatalog",
    "IndexConfigValidator",
    "IndexConfig",
    "IndexEntry",
    "IndexState",
    "CatalogPersistence",
    "CatalogState",
]
