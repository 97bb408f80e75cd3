from ..catalog import IndexCatalog, IndexConfig, IndexEntry, IndexState
from ..core.exceptions import NotFoundError, InvalidStateError
from ..storage import Dataset, DatasetStore
from .index_builder import IndexBuilder


class IndexManager:
    """
    Manages the lifecycle of every index.

    Responsibilities:
    1. Create indexes (through the builder)
    2. Soft delete, restore and vacuum them
    3. Detect indexes whose source changed and refresh them

    Lifecycle:
    ```
    create ──> ACTIVE ──delete──> DELETED ──vacuum──> (gone)
                 │  ▲               │
          source │  │ refresh       └──restore──> ACTIVE / STALE
         changed ▼  │
                STALE ──delete──> DELETED
    ```
    """

    def __init__(self, catalog: IndexCatalog, store: DatasetStore, builder: IndexBuilder):
        self.catalog = catalog
        self.store = store
        self.builder = builder

    def create_index(self, dataset: Dataset, config: IndexConfig) -> IndexEntry:
        """Build and publish a new index. See :meth:`IndexBuilder.create_index`."""
        entry = self.builder.create_index(dataset, config)
        print(f"📊 Created index '{entry.name}' on {dataset.name}"
              f"({', '.join(config.indexed_columns)}) "
              f"including ({', '.join(config.included_columns)}) -> {entry.storage_location}")
        return entry

    def delete_index(self, name: str) -> IndexEntry:
        """
        Soft-delete an index. Its storage stays until vacuum.

        Raises:
            NotFoundError: If no ACTIVE or STALE index has the name
        """
        with self.builder.build_lock:
            entry = self.catalog.find(name)
            if entry is None or not entry.state.is_live():
                raise NotFoundError(f"No active index named '{name}'")

            deleted = self.catalog.update_state(name, IndexState.DELETED)
            print(f"🗑️  Deleted index '{name}' (storage kept at {deleted.storage_location})")
            return deleted

    def restore_index(self, name: str) -> IndexEntry:
        """
        Bring a soft-deleted index back.

        The index comes back STALE if its source changed while it was deleted.

        Raises:
            NotFoundError: If the index is absent
            InvalidStateError: If the index is not DELETED
        """
        with self.builder.build_lock:
            entry = self.catalog.get(name)
            if entry.state != IndexState.DELETED:
                raise InvalidStateError(
                    f"Index '{name}' is {entry.state.value}; only DELETED indexes can be restored")

            state = IndexState.ACTIVE if self._is_current(entry) else IndexState.STALE
            restored = self.catalog.update_state(name, state)
            print(f"♻️  Restored index '{name}' as {state.value}")
            return restored

    def vacuum_index(self, name: str) -> IndexEntry:
        """
        Permanently remove a soft-deleted index and its storage.

        Raises:
            NotFoundError: If the index is absent
            InvalidStateError: If the index has not been deleted first
        """
        with self.builder.build_lock:
            entry = self.catalog.get(name)
            if entry.state != IndexState.DELETED:
                raise InvalidStateError(
                    f"Index '{name}' is {entry.state.value}; delete it before vacuuming")

            self.store.delete(entry.storage_location)
            removed = self.catalog.remove(name)
            print(f"🧹 Vacuumed index '{name}' ({entry.storage_location})")
            return removed

    def refresh_index(self, name: str) -> IndexEntry:
        """
        Rebuild a live index from the current source data into a new version.

        The new entry replaces the old one in a single publish, then the
        previous version's storage is reclaimed.

        Raises:
            NotFoundError: If no ACTIVE or STALE index has the name
            StorageError: If the source dataset no longer exists
        """
        with self.builder.build_lock:
            entry = self.catalog.find(name)
            if entry is None or not entry.state.is_live():
                raise NotFoundError(f"No active index named '{name}'")

            dataset = self.store.open(entry.source_path)
            refreshed = self.builder.build(dataset, entry.config)
            self.catalog.publish(refreshed)
            self.store.delete(entry.storage_location)

            print(f"🔄 Refreshed index '{name}' -> {refreshed.storage_location}")
            return refreshed

    def check_staleness(self) -> list[str]:
        """
        Mark ACTIVE indexes whose source changed (or vanished) as STALE.

        Returns:
            Names of the indexes marked, ordered by name
        """
        marked = []
        with self.builder.build_lock:
            for entry in self.catalog.list_entries():
                if entry.state == IndexState.ACTIVE and not self._is_current(entry):
                    self.catalog.update_state(entry.name, IndexState.STALE)
                    marked.append(entry.name)

        if marked:
            print(f"⚠️  Marked {len(marked)} index(es) stale: {', '.join(marked)}")
        return marked

    def get_index(self, name: str) -> IndexEntry:
        return self.catalog.get(name)

    def indexes(self) -> list[dict]:
        """Summaries of every index, ordered by name."""
        return [entry.summary() for entry in self.catalog.list_entries()]

    def _is_current(self, entry: IndexEntry) -> bool:
        return self.store.fingerprint(entry.source_path) == entry.source_fingerprint

    def __str__(self) -> str:
        return f"IndexManager({len(self.catalog)} indexes)"

    def __repr__(self) -> str:
        return self.__str__()
