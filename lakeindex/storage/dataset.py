from dataclasses import dataclass, field
from pathlib import Path

from ..core.schema import Schema


@dataclass(frozen=True)
class Dataset:
    """
    Handle on a dataset directory at a particular point in time.

    📂 A dataset is a directory holding a ``_schema.json`` descriptor and one
    or more ``part-NNNNN.json`` row files. The handle captures the
    fingerprint of the directory contents when it was opened, so plans
    built from it know exactly which version of the data they describe.
    """

    """📂 Directory of the dataset"""
    path: str

    """📝 Column names and types"""
    schema: Schema

    """🔢 Columns the rows are physically sorted by (empty for unsorted data)"""
    sort_order: tuple[str, ...] = ()

    """🧬 Content hash of the dataset at open time"""
    fingerprint: str = ""

    """📄 Part files in read order"""
    parts: tuple[str, ...] = field(default=())

    @property
    def name(self) -> str:
        """Short display name (last path component)."""
        return Path(self.path).name
