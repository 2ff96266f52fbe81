"""Source parser: map, filter, and deduplicate one specification's definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from xref_indexer.indexing.kinds import DEFAULT_KIND_POLICY, KindPolicy
from xref_indexer.indexing.mapper import map_definition

if TYPE_CHECKING:
    from collections.abc import Iterable

    from xref_indexer.indexing.models import NormalizedRecord, SourceUnit, UriFixFailure


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Records that survived filtering plus every URI-fix failure seen while mapping."""

    records: tuple[NormalizedRecord, ...] = ()
    errors: tuple[UriFixFailure, ...] = ()


def parse_source(source: SourceUnit, *, policy: KindPolicy = DEFAULT_KIND_POLICY) -> ParseResult:
    """
    Parse one specification's definitions.

    Every (definition, alias) pair is mapped; records that are not exported or
    whose kind is unsupported are dropped; exact duplicates collapse onto their
    first occurrence so source order is preserved.
    """

    mapped: list[NormalizedRecord] = []
    errors: list[UriFixFailure] = []
    for definition in source.definitions:
        for alias in definition.linking_text:
            record, failure = map_definition(
                definition,
                alias,
                spec_shortname=source.spec_shortname,
                series_shortname=source.series_shortname,
                base_url=source.base_url,
                policy=policy,
            )
            mapped.append(record)
            if failure is not None:
                errors.append(failure)

    filtered = (
        record for record in mapped if record.is_exported and policy.is_supported(record.kind)
    )
    return ParseResult(records=unique_records(filtered), errors=tuple(errors))


def unique_records(records: Iterable[NormalizedRecord]) -> tuple[NormalizedRecord, ...]:
    """Drop structural duplicates, keeping the first occurrence of each record."""

    return tuple(dict.fromkeys(records))


__all__ = ["ParseResult", "parse_source", "unique_records"]
