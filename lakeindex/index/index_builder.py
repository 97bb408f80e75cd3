import threading
import time
from pathlib import Path

from ..catalog import IndexCatalog, IndexConfig, IndexConfigValidator, IndexEntry, IndexState
from ..core.exceptions import ConfigError, DuplicateNameError
from ..core.schema import sort_key
from ..storage import Dataset, DatasetStore


class IndexBuilder:
    """
    Builds covering indexes and registers them in the catalog.

    Build steps:
    1. Validate the config against the source schema
    2. Reserve a fresh version so the storage location is never reused
    3. Project indexed + included columns and sort by the indexed columns
    4. Write the projection (atomic rename into the versioned location)
    5. Publish the ACTIVE entry

    The entry is published only after step 4 completes, so planners see
    either no index or a complete one.

    Storage layout:
    ```
    <system_path>/<index name>/v__=0/   (first build)
    <system_path>/<index name>/v__=1/   (refresh or rebuild after delete)
    ```
    """

    def __init__(self, catalog: IndexCatalog, store: DatasetStore, system_path: str = "indexes"):
        """
        Args:
            catalog: Catalog to publish entries into
            store: Dataset store used to read sources and write index data
            system_path: Root directory for index data
        """
        self.catalog = catalog
        self.store = store
        self.system_path = Path(system_path).resolve()
        self.system_path.mkdir(parents=True, exist_ok=True)
        self.validator = IndexConfigValidator()

        # Serializes name checks and publishes between concurrent builds
        self.build_lock = threading.RLock()

    def create_index(self, dataset: Dataset, config: IndexConfig) -> IndexEntry:
        """
        Build an index over a dataset and publish it as ACTIVE.

        A DELETED entry with the same name is replaced and its storage reclaimed.

        Raises:
            ConfigError: If columns are missing, duplicated or overlapping
            DuplicateNameError: If an ACTIVE or STALE index already has the name
            StorageError: If reading the source or writing the index fails
        """
        with self.build_lock:
            if not self.validator.validate_config(config, dataset.schema):
                errors = self.validator.get_validation_errors()
                raise ConfigError(f"Index creation failed: {'; '.join(errors)}")

            existing = self.catalog.find(config.name)
            if existing is not None and existing.state.is_live():
                raise DuplicateNameError(
                    f"Index '{config.name}' already exists ({existing.state.value})")

            entry = self.build(dataset, config)
            self.catalog.publish(entry)

            if existing is not None:
                self.store.delete(existing.storage_location)

            return entry

    def build(self, dataset: Dataset, config: IndexConfig) -> IndexEntry:
        """
        Write the index data for a config into a new version directory.

        Returns the entry without publishing it.
        """
        version = self.catalog.next_version(config.name)
        location = self.storage_location(config.name, version)

        columns = list(config.all_columns)
        index_schema = dataset.schema.project(columns)
        positions = [dataset.schema.name_to_index(name) for name in columns]

        rows = [tuple(row[i] for i in positions) for row in self.store.read_rows(dataset)]
        rows.sort(key=sort_key(list(range(len(config.indexed_columns)))))

        self.store.write(str(location), index_schema, rows, sort_order=config.indexed_columns)

        now = time.time()
        return IndexEntry(
            config=config,
            source_path=dataset.path,
            storage_location=str(location),
            source_fingerprint=dataset.fingerprint,
            schema=index_schema,
            state=IndexState.ACTIVE,
            version=version,
            row_count=len(rows),
            created_at=now,
            modified_at=now,
        )

    def storage_location(self, name: str, version: int) -> Path:
        return self.system_path / name / f"v__={version}"

    def __str__(self) -> str:
        return f"IndexBuilder(system_path={self.system_path})"

    def __repr__(self) -> str:
        return self.__str__()
