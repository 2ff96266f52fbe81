"""Definition mapper: one raw definition alias to one normalized record."""

from __future__ import annotations

from xref_indexer.constants import PUBLIC_ACCESS, STATUS_CURRENT
from xref_indexer.indexing.kinds import DEFAULT_KIND_POLICY, KindPolicy
from xref_indexer.indexing.models import NormalizedRecord, RawDefinition, UriFixFailure
from xref_indexer.indexing.normalize import normalize_term


def strip_base_url(href: str, base_url: str) -> str | None:
    """Return ``href`` relative to ``base_url``, or ``None`` when it is not a prefix."""

    if not base_url or not href.startswith(base_url):
        return None
    return href[len(base_url) :]


def map_definition(
    definition: RawDefinition,
    alias: str,
    *,
    spec_shortname: str,
    series_shortname: str,
    base_url: str,
    policy: KindPolicy = DEFAULT_KIND_POLICY,
) -> tuple[NormalizedRecord, UriFixFailure | None]:
    """
    Map ``definition`` under one of its linking-text aliases.

    A failure to strip ``base_url`` from the href does not raise: the record keeps
    the unmodified href and the failure is returned alongside it.
    """

    kind = policy.remap(definition.kind)

    failure: UriFixFailure | None = None
    uri_fragment = strip_base_url(definition.href, base_url)
    if uri_fragment is None:
        failure = UriFixFailure(
            spec_shortname=spec_shortname, href=definition.href, base_url=base_url
        )
        uri_fragment = definition.href

    record = NormalizedRecord(
        term=normalize_term(alias, kind),
        is_exported=definition.access == PUBLIC_ACCESS,
        kind=kind,
        spec_shortname=spec_shortname,
        series_shortname=series_shortname,
        status=STATUS_CURRENT,
        uri_fragment=uri_fragment,
        is_normative=not definition.informative,
        scope_for=definition.scope_for or None,
    )
    return record, failure


__all__ = ["map_definition", "strip_base_url"]
