"""
xref-indexer indexing core.

Term normalization, definition mapping, per-source parsing, and aggregation into
the term and spec indexes. Everything here is pure and performs no I/O.
"""

from xref_indexer.indexing.aggregate import (
    Index,
    IndexEntry,
    add_to_spec_index,
    add_to_term_index,
)
from xref_indexer.indexing.kinds import DEFAULT_KIND_POLICY, KindPolicy
from xref_indexer.indexing.mapper import map_definition, strip_base_url
from xref_indexer.indexing.models import (
    NormalizedRecord,
    RawDefinition,
    SourceUnit,
    UriFixFailure,
)
from xref_indexer.indexing.normalize import has_argument_list, normalize_term, strip_arguments
from xref_indexer.indexing.parser import ParseResult, parse_source, unique_records

__all__ = [
    "DEFAULT_KIND_POLICY",
    "Index",
    "IndexEntry",
    "KindPolicy",
    "NormalizedRecord",
    "ParseResult",
    "RawDefinition",
    "SourceUnit",
    "UriFixFailure",
    "add_to_spec_index",
    "add_to_term_index",
    "has_argument_list",
    "map_definition",
    "normalize_term",
    "parse_source",
    "strip_arguments",
    "strip_base_url",
    "unique_records",
]
