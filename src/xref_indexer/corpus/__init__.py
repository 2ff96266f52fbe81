"""Access to the upstream definitions corpus: git sync, registry, raw sources."""

from xref_indexer.corpus.git_sync import (
    CommandResult,
    CorpusSync,
    CorpusSyncError,
    GitCommandError,
    SyncResult,
)
from xref_indexer.corpus.registry import (
    RegistryEntry,
    SpecsData,
    build_specs_data,
    load_registry,
)
from xref_indexer.corpus.sources import load_source_unit, read_definitions

__all__ = [
    "CommandResult",
    "CorpusSync",
    "CorpusSyncError",
    "GitCommandError",
    "RegistryEntry",
    "SpecsData",
    "SyncResult",
    "build_specs_data",
    "load_registry",
    "load_source_unit",
    "read_definitions",
]
