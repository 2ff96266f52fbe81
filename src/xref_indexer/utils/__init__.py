"""Utility exports for filesystem helpers."""

from xref_indexer.utils.fs import atomic_write_many

__all__ = [
    "atomic_write_many",
]
