import time
from dataclasses import dataclass, asdict, field, replace
from enum import Enum

from ..core.schema import Schema


class IndexState(Enum):
    """
    Lifecycle state of a catalog entry.

    🟢 ACTIVE   => Built and consistent with its source, used by the rewriter
    🟠 STALE    => Source changed after the build, skipped until refreshed
    🔴 DELETED  => Soft-deleted, storage kept until vacuum
    """
    ACTIVE = "ACTIVE"
    STALE = "STALE"
    DELETED = "DELETED"

    def is_live(self) -> bool:
        """ACTIVE and STALE entries still own their name."""
        return self != IndexState.DELETED


@dataclass(frozen=True)
class IndexConfig:
    """
    Definition of a covering index.

    🏷️ Names the index and the columns it holds. Immutable once an index
    is built from it.
    """

    """🏷️ Unique name identifying this index"""
    name: str

    """🔑 Columns used for predicate/join matching, in sort order"""
    indexed_columns: tuple[str, ...]

    """📦 Payload columns carried along to avoid revisiting the source"""
    included_columns: tuple[str, ...] = ()

    def __post_init__(self):
        """
        🎬 Accept lists for convenience and freeze them as tuples.
        """
        object.__setattr__(self, "indexed_columns", tuple(self.indexed_columns))
        object.__setattr__(self, "included_columns", tuple(self.included_columns))

    @property
    def all_columns(self) -> tuple[str, ...]:
        """Indexed columns followed by included columns."""
        return self.indexed_columns + self.included_columns

    def to_dict(self) -> dict:
        """
        📦 Convert config to dictionary format for serialization.
        """
        return {
            "name": self.name,
            "indexed_columns": list(self.indexed_columns),
            "included_columns": list(self.included_columns),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'IndexConfig':
        """
        📥 Create config from dictionary representation.
        """
        return cls(
            name=data["name"],
            indexed_columns=tuple(data["indexed_columns"]),
            included_columns=tuple(data.get("included_columns", [])),
        )


@dataclass(frozen=True)
class IndexEntry:
    """
    Complete catalog record for a built index.

    📚 Entries are immutable: every state transition produces a new entry
    via :meth:`with_state`, so a snapshot taken by a planning call can never
    change underneath it.
    """

    """⚙️ The config the index was built from"""
    config: IndexConfig

    """📂 Resolved path of the source dataset"""
    source_path: str

    """💾 Directory holding the index data"""
    storage_location: str

    """🧬 Fingerprint of the source dataset at build time"""
    source_fingerprint: str

    """📝 Columns stored in the index (indexed then included)"""
    schema: Schema

    """🚦 Lifecycle state"""
    state: IndexState = IndexState.ACTIVE

    """🔢 Build number for this name, part of the storage location"""
    version: int = 0

    """📊 Number of rows in the index"""
    row_count: int = 0

    """⏰ Unix timestamp when index was built"""
    created_at: float = field(default_factory=time.time)

    """🔄 Unix timestamp of last state change"""
    modified_at: float = field(default_factory=time.time)

    @property
    def name(self) -> str:
        return self.config.name

    def column_count(self) -> int:
        """Number of columns a scan of this index reads."""
        return len(self.config.all_columns)

    def with_state(self, state: IndexState) -> 'IndexEntry':
        """
        🔄 Return a copy of this entry in a new state.
        """
        return replace(self, state=state, modified_at=time.time())

    def summary(self) -> dict:
        """Flat description used by index listings."""
        return {
            "name": self.name,
            "indexed_columns": list(self.config.indexed_columns),
            "included_columns": list(self.config.included_columns),
            "state": self.state.value,
            "storage_location": self.storage_location,
            "source_path": self.source_path,
            "version": self.version,
            "row_count": self.row_count,
        }

    def to_dict(self) -> dict:
        """
        📦 Convert to dictionary for JSON serialization.
        """
        result = asdict(self)
        result["config"] = self.config.to_dict()
        result["schema"] = self.schema.to_dict()
        result["state"] = self.state.value
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'IndexEntry':
        """
        📥 Create from dictionary loaded from JSON.
        """
        return cls(
            config=IndexConfig.from_dict(data["config"]),
            source_path=data["source_path"],
            storage_location=data["storage_location"],
            source_fingerprint=data["source_fingerprint"],
            schema=Schema.from_dict(data["schema"]),
            state=IndexState(data["state"]),
            version=data.get("version", 0),
            row_count=data.get("row_count", 0),
            created_at=data.get("created_at", 0.0),
            modified_at=data.get("modified_at", 0.0),
        )
