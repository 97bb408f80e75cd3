"""
Dataset storage for the data lake.

Source datasets and built indexes share the same on-disk format, so an
index is just another dataset that happens to be sorted by its indexed
columns.
"""

from .dataset import Dataset
from .dataset_store import DatasetStore, DatasetStoreStats

__all__ = ['Dataset', 'DatasetStore', 'DatasetStoreStats']
