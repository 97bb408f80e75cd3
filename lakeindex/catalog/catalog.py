import threading
from pathlib import Path
from typing import Optional

from ..core.exceptions import NotFoundError, InvalidStateError
from .index_info import IndexEntry, IndexState
from .persistence import CatalogPersistence, CatalogState


class IndexCatalog:
    """
    Durable record of every index known to the system.

    Features:
    - Persistent metadata storage (JSON, atomic rename)
    - Per-name build versions that are never reused
    - Concurrent access support
    - Immutable snapshots for the plan rewriter
    - Backup and recovery

    Entries are immutable, so publishing a new or transitioned entry is a
    single dictionary assignment under the lock. Readers holding an older
    snapshot keep a consistent view.
    """

    def __init__(self, catalog_dir: str = "catalog"):
        """
        Initialize the catalog.

        Args:
            catalog_dir: Directory to store catalog metadata files
        """
        self.catalog_dir = Path(catalog_dir)
        self.catalog_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir = self.catalog_dir / "backups"

        self.persistence = CatalogPersistence(self.catalog_dir, self.backup_dir)

        # In-memory catalog state
        self._entries: dict[str, IndexEntry] = {}  # name -> entry
        self._versions: dict[str, int] = {}  # name -> last version handed out

        # Thread safety
        self._lock = threading.RLock()

        # Load existing catalog
        self._load_catalog()

    def get(self, name: str) -> IndexEntry:
        """Get an entry by name, in any state."""
        with self._lock:
            if name not in self._entries:
                raise NotFoundError(f"Index '{name}' not found in catalog")
            return self._entries[name]

    def find(self, name: str) -> Optional[IndexEntry]:
        with self._lock:
            return self._entries.get(name)

    def contains(self, name: str) -> bool:
        with self._lock:
            return name in self._entries

    def list_entries(self) -> list[IndexEntry]:
        """All entries ordered by name."""
        with self._lock:
            return [self._entries[name] for name in sorted(self._entries)]

    def snapshot(self) -> tuple[IndexEntry, ...]:
        """
        Point-in-time view of the catalog.

        A planning call works against one snapshot, so it sees the catalog
        either before or after any concurrent publish, never halfway.
        """
        with self._lock:
            return tuple(self._entries[name] for name in sorted(self._entries))

    def next_version(self, name: str) -> int:
        """Reserve the next build version for a name. Versions are never handed out twice."""
        with self._lock:
            version = self._versions.get(name, -1) + 1
            self._versions[name] = version
            self._save_catalog()
            return version

    def publish(self, entry: IndexEntry) -> None:
        """
        Insert or replace an entry.

        Raises:
            InvalidStateError: If another entry already uses the storage location
        """
        with self._lock:
            for other in self._entries.values():
                if other.name != entry.name and other.storage_location == entry.storage_location:
                    raise InvalidStateError(
                        f"Storage location {entry.storage_location} already used by '{other.name}'")

            self._entries[entry.name] = entry
            self._save_catalog()

    def update_state(self, name: str, state: IndexState) -> IndexEntry:
        """Transition an entry to a new state and return the new entry."""
        with self._lock:
            updated = self.get(name).with_state(state)
            self._entries[name] = updated
            self._save_catalog()
            return updated

    def remove(self, name: str) -> IndexEntry:
        """Remove an entry from the catalog. The version counter is kept."""
        with self._lock:
            entry = self.get(name)
            del self._entries[name]
            self._save_catalog()
            return entry

    def create_backup(self) -> Path:
        """Create a backup of the catalog."""
        with self._lock:
            backup_file = self.persistence.create_backup(self._state())
            print(f"💾 Created catalog backup: {backup_file}")
            return backup_file

    def restore_from_backup(self, backup_file: Path) -> None:
        """
        Restore catalog entries from a backup file.

        Version counters only move forward, so storage locations handed out
        after the backup was taken are still never reused. Entries whose
        storage was vacuumed or replaced since the backup are dropped.
        """
        with self._lock:
            restored = self.persistence.restore_from_backup(backup_file)
            self._entries = {}
            for name, entry in restored.entries.items():
                if not Path(entry.storage_location).is_dir():
                    print(f"⚠️ Dropped index '{name}' from restore: "
                          f"storage {entry.storage_location} no longer exists")
                    continue
                self._entries[name] = entry
            for name, version in restored.versions.items():
                self._versions[name] = max(version, self._versions.get(name, -1))
            self._save_catalog()
            print(f"🔄 Restored catalog from backup: {backup_file}")

    def clear(self) -> None:
        """Forget all entries. Storage is not touched."""
        with self._lock:
            self._entries.clear()
            self._save_catalog()
            print("🧹 Cleared all indexes from catalog")

    def _state(self) -> CatalogState:
        return CatalogState(dict(self._entries), dict(self._versions))

    def _load_catalog(self) -> None:
        """Load catalog from persistent storage."""
        state = self.persistence.load_catalog()
        self._entries = dict(state.entries)
        self._versions = dict(state.versions)
        if self._entries:
            print(f"📖 Loaded catalog with {len(self._entries)} indexes")

    def _save_catalog(self) -> None:
        self.persistence.save_catalog(self._state())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __str__(self) -> str:
        with self._lock:
            return f"IndexCatalog({len(self._entries)} indexes)"

    def __repr__(self) -> str:
        return self.__str__()
