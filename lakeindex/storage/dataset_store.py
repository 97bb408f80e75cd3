import hashlib
import json
import shutil
import threading
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from cachetools import LRUCache

from ..core.exceptions import StorageError, ConfigError
from ..core.schema import Schema
from .dataset import Dataset


@dataclass
class DatasetStoreStats:
    datasets_written: int = 0
    parts_read: int = 0
    rows_read: int = 0
    cache_hits: int = 0
    cache_misses: int = 0


class DatasetStore:
    """
    Reads and writes datasets on the local filesystem.

    On-disk layout of a dataset directory:
    ```
    <path>/
    ├── _schema.json        (column names, types, sort order)
    ├── part-00000.json     ({"rows": [[...], ...]})
    └── part-00001.json     (one more file per append)
    ```

    Key Design Decisions:
    1. **Atomic publish**: new datasets are written into a hidden temp
       directory and renamed into place, so readers never see a partial write
    2. **Immutable parts**: appends add part files and never rewrite existing
       ones, so a Dataset handle keeps reading the parts it was opened with
    3. **Read cache**: decoded rows are kept in an LRU cache keyed by
       (path, fingerprint), so a changed dataset can never hit a stale entry
    """

    SCHEMA_FILE = "_schema.json"
    PART_PREFIX = "part-"

    def __init__(self, cache_size: int = 64):
        self._cache: LRUCache[tuple[str, str], tuple[tuple, ...]] = LRUCache(maxsize=cache_size)
        self._lock = threading.RLock()
        self.stats = DatasetStoreStats()

    def write(self, path: str, schema: Schema, rows: Iterable[tuple],
              sort_order: tuple[str, ...] = (), overwrite: bool = False) -> Dataset:
        """
        Write a new dataset directory.

        Args:
            path: Target directory
            schema: Columns of the rows
            rows: Row tuples in schema order
            sort_order: Columns the rows are already sorted by
            overwrite: Replace an existing dataset at the same path

        Returns:
            Dataset handle for the written data

        Raises:
            StorageError: If the target exists and overwrite is False, or I/O fails
            ConfigError: If a row does not match the schema
        """
        target = Path(path).resolve()
        materialized = [tuple(row) for row in rows]
        for row in materialized:
            schema.validate_row(row)
        missing = schema.missing(list(sort_order))
        if missing:
            raise ConfigError(f"Sort columns not in schema: {missing}")

        with self._lock:
            if target.exists() and not overwrite:
                raise StorageError(f"Dataset already exists: {target}")

            temp_dir = target.parent / f".{target.name}.tmp-{uuid.uuid4().hex}"
            try:
                temp_dir.mkdir(parents=True)
                self._write_schema(temp_dir, schema, sort_order)
                self._write_part(temp_dir / self._part_name(0), materialized)

                # Write to temp dir first, then rename (atomic publish)
                if target.exists():
                    trash = target.parent / f".{target.name}.old-{uuid.uuid4().hex}"
                    target.rename(trash)
                    temp_dir.rename(target)
                    shutil.rmtree(trash)
                else:
                    temp_dir.rename(target)

            except OSError as e:
                shutil.rmtree(temp_dir, ignore_errors=True)
                raise StorageError(f"Failed to write dataset {target}: {e}")

            self.stats.datasets_written += 1

        return self.open(str(target))

    def append(self, path: str, rows: Iterable[tuple]) -> Dataset:
        """
        Append rows to an existing dataset as a new part file.

        Appending invalidates any physical sort order the dataset declared.
        """
        dataset = self.open(path)
        materialized = [tuple(row) for row in rows]
        for row in materialized:
            dataset.schema.validate_row(row)

        target = Path(dataset.path)
        with self._lock:
            try:
                part_file = target / self._part_name(len(dataset.parts))
                temp_file = part_file.with_suffix('.tmp')
                self._write_part(temp_file, materialized)
                temp_file.rename(part_file)

                if dataset.sort_order:
                    self._write_schema(target, dataset.schema, ())

            except OSError as e:
                raise StorageError(f"Failed to append to dataset {target}: {e}")

        return self.open(str(target))

    def open(self, path: str) -> Dataset:
        """
        Open a dataset directory and capture its current fingerprint.

        Raises:
            StorageError: If the directory or its schema file is missing or corrupt
        """
        target = Path(path).resolve()
        schema_file = target / self.SCHEMA_FILE
        if not schema_file.exists():
            raise StorageError(f"Dataset not found: {target}")

        try:
            with open(schema_file, 'r') as f:
                meta = json.load(f)
            schema = Schema.from_dict(meta)
        except (OSError, ValueError, KeyError) as e:
            raise StorageError(f"Corrupt schema file {schema_file}: {e}")

        parts = self._list_parts(target)
        return Dataset(
            path=str(target),
            schema=schema,
            sort_order=tuple(meta.get("sort_order", [])),
            fingerprint=self._fingerprint(target, parts),
            parts=tuple(parts),
        )

    def read_rows(self, dataset: Dataset) -> tuple[tuple, ...]:
        """
        Read every row of the parts the handle was opened with.

        Raises:
            StorageError: If a part file vanished or is corrupt
        """
        key = (dataset.path, dataset.fingerprint)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self.stats.cache_hits += 1
                return cached
            self.stats.cache_misses += 1

        rows: list[tuple] = []
        for part in dataset.parts:
            part_file = Path(dataset.path) / part
            try:
                with open(part_file, 'r') as f:
                    data = json.load(f)
            except FileNotFoundError:
                raise StorageError(
                    f"Part {part} of {dataset.path} no longer exists (dataset was replaced)")
            except (OSError, ValueError) as e:
                raise StorageError(f"Corrupt part file {part_file}: {e}")

            rows.extend(tuple(row) for row in data.get("rows", []))
            self.stats.parts_read += 1

        result = tuple(rows)
        with self._lock:
            self.stats.rows_read += len(result)
            self._cache[key] = result
        return result

    def fingerprint(self, path: str) -> Optional[str]:
        """Return the current fingerprint of a dataset, or None if it does not exist."""
        target = Path(path).resolve()
        if not (target / self.SCHEMA_FILE).exists():
            return None
        return self._fingerprint(target, self._list_parts(target))

    def exists(self, path: str) -> bool:
        return (Path(path).resolve() / self.SCHEMA_FILE).exists()

    def delete(self, path: str) -> None:
        """Physically remove a dataset directory. Missing directories are ignored."""
        target = Path(path).resolve()
        with self._lock:
            try:
                shutil.rmtree(target)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageError(f"Failed to delete dataset {target}: {e}")

            for key in [k for k in self._cache.keys() if k[0] == str(target)]:
                del self._cache[key]

    @classmethod
    def size_bytes(cls, path: str) -> int:
        """Total size of the files of a dataset in bytes."""
        target = Path(path)
        if not target.exists():
            return 0
        return sum(f.stat().st_size for f in target.iterdir() if f.is_file())

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _fingerprint(self, target: Path, parts: list[str]) -> str:
        """SHA-256 over the schema file and the names and contents of the part files."""
        digest = hashlib.sha256()
        try:
            digest.update((target / self.SCHEMA_FILE).read_bytes())
            for part in parts:
                digest.update(part.encode())
                digest.update((target / part).read_bytes())
        except OSError as e:
            raise StorageError(f"Failed to fingerprint dataset {target}: {e}")
        return digest.hexdigest()

    @classmethod
    def _list_parts(cls, target: Path) -> list[str]:
        return sorted(f.name for f in target.iterdir()
                      if f.name.startswith(cls.PART_PREFIX) and f.suffix == '.json')

    @classmethod
    def _part_name(cls, number: int) -> str:
        return f"{cls.PART_PREFIX}{number:05d}.json"

    @classmethod
    def _write_schema(cls, directory: Path, schema: Schema, sort_order: tuple[str, ...]) -> None:
        meta = schema.to_dict()
        meta["sort_order"] = list(sort_order)
        temp_file = directory / f"{cls.SCHEMA_FILE}.tmp"
        with open(temp_file, 'w') as f:
            json.dump(meta, f, indent=2)
        temp_file.replace(directory / cls.SCHEMA_FILE)

    @staticmethod
    def _write_part(part_file: Path, rows: list[tuple]) -> None:
        with open(part_file, 'w') as f:
            json.dump({"rows": [list(row) for row in rows]}, f)

    def __str__(self) -> str:
        return f"DatasetStore(cached={len(self._cache)}/{self._cache.maxsize})"

    def __repr__(self) -> str:
        return self.__str__()
