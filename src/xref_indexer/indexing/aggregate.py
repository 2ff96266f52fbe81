"""Aggregators folding parsed records into the term- and spec-keyed indexes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from xref_indexer.indexing.normalize import has_argument_list, strip_arguments

if TYPE_CHECKING:
    from collections.abc import Iterable

    from xref_indexer.indexing.models import NormalizedRecord

IndexEntry = dict[str, Any]
Index = dict[str, list[IndexEntry]]


def add_to_term_index(records: Iterable[NormalizedRecord], index: Index) -> None:
    """
    Append each record under its term, in the order records arrive.

    Methods with an argument list are also filed under the bare ``name()`` key so
    lookups by exact signature and by method name both resolve.
    """

    for record in records:
        entry = record.term_entry()
        index.setdefault(record.term, []).append(entry)

        if record.kind == "method" and has_argument_list(record.term):
            index.setdefault(strip_arguments(record.term), []).append(entry)


def add_to_spec_index(records: Iterable[NormalizedRecord], index: Index) -> None:
    """Append each record under its series shortname, one entry per record."""

    for record in records:
        index.setdefault(record.series_shortname, []).append(record.spec_entry())


__all__ = ["Index", "IndexEntry", "add_to_spec_index", "add_to_term_index"]
