"""
Catalog persistence management module.
Handles saving/loading index metadata to/from storage.
"""
import json
import threading
import time
from pathlib import Path
from typing import NamedTuple

from .index_info import IndexEntry
from ..core.exceptions import StorageError


CATALOG_FORMAT_VERSION = "1.0"


class CatalogState(NamedTuple):
    """Everything the catalog keeps on disk."""
    entries: dict[str, IndexEntry]
    versions: dict[str, int]


class CatalogPersistence:
    """Handles catalog metadata persistence operations."""

    def __init__(self, catalog_dir: Path, backup_dir: Path):
        self.catalog_dir = catalog_dir
        self.backup_dir = backup_dir
        self.metadata_file = catalog_dir / "catalog_metadata.json"
        self._lock = threading.RLock()

    def save_catalog(self, state: CatalogState) -> None:
        """Save catalog metadata to persistent storage."""
        with self._lock:
            try:
                data = self._to_document(state)

                # Write to temp file first, then rename (atomic operation)
                temp_file = self.metadata_file.with_suffix('.tmp')
                with open(temp_file, 'w') as f:
                    json.dump(data, f, indent=2)

                temp_file.replace(self.metadata_file)

            except OSError as e:
                raise StorageError(f"Failed to save catalog: {e}")

    def load_catalog(self) -> CatalogState:
        """Load catalog metadata from persistent storage."""
        if not self.metadata_file.exists():
            return CatalogState({}, {})

        with self._lock:
            try:
                with open(self.metadata_file, 'r') as f:
                    data = json.load(f)
                return self._from_document(data)

            except (OSError, ValueError, KeyError) as e:
                raise StorageError(f"Failed to load catalog: {e}")

    def create_backup(self, state: CatalogState) -> Path:
        """Create a backup of the catalog."""
        with self._lock:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            timestamp = time.time_ns()
            backup_file = self.backup_dir / f"catalog_backup_{timestamp}.json"

            with open(backup_file, 'w') as f:
                json.dump(self._to_document(state), f, indent=2)

            return backup_file

    def restore_from_backup(self, backup_file: Path) -> CatalogState:
        """Restore catalog from a backup file."""
        with self._lock:
            if not backup_file.exists():
                raise StorageError(f"Backup file not found: {backup_file}")

            try:
                with open(backup_file, 'r') as f:
                    backup_data = json.load(f)
                return self._from_document(backup_data)
            except (OSError, ValueError, KeyError) as e:
                raise StorageError(f"Corrupt catalog backup {backup_file}: {e}")

    @staticmethod
    def _to_document(state: CatalogState) -> dict:
        return {
            "version": CATALOG_FORMAT_VERSION,
            "created_at": time.time(),
            "indexes": {name: entry.to_dict() for name, entry in state.entries.items()},
            "versions": dict(state.versions),
        }

    @staticmethod
    def _from_document(data: dict) -> CatalogState:
        entries = {}
        for name, entry_data in data.get("indexes", {}).items():
            entries[name] = IndexEntry.from_dict(entry_data)
        versions = {name: int(v) for name, v in data.get("versions", {}).items()}
        return CatalogState(entries, versions)
