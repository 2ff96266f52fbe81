"""
xref-indexer — typed records for the indexing core.

Purpose
- Typed, immutable views of raw definition entries, per-spec source units,
  normalized occurrence records, and URI-fix failures.

Functional requirements
- ``RawDefinition.from_dict`` rejects structurally invalid entries with
  ``MalformedSourceError`` naming the owning specification.
- ``NormalizedRecord`` renders the two index entry shapes with a fixed key order.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from xref_indexer.errors import MalformedSourceError

if TYPE_CHECKING:
    from pathlib import Path


def _require_str(data: Mapping[str, object], key: str, *, spec: str, index: int) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise MalformedSourceError(
            spec=spec,
            detail=f"dfns[{index}].{key} must be a string, got {type(value).__name__}",
        )
    return value


def _string_tuple(
    data: Mapping[str, object],
    key: str,
    *,
    spec: str,
    index: int,
    required: bool,
) -> tuple[str, ...]:
    if key not in data:
        if required:
            raise MalformedSourceError(spec=spec, detail=f"dfns[{index}].{key} is required")
        return ()
    value = data[key]
    if not isinstance(value, list):
        raise MalformedSourceError(
            spec=spec,
            detail=f"dfns[{index}].{key} must be a list, got {type(value).__name__}",
        )
    parsed: list[str] = []
    for position, item in enumerate(value):
        if not isinstance(item, str):
            raise MalformedSourceError(
                spec=spec, detail=f"dfns[{index}].{key}[{position}] must be a string"
            )
        parsed.append(item)
    return tuple(parsed)


@dataclass(frozen=True, slots=True)
class RawDefinition:
    """One definition entry exactly as exported by the upstream corpus."""

    href: str
    linking_text: tuple[str, ...]
    kind: str
    access: str
    id: str = ""
    local_linking_text: tuple[str, ...] = ()
    scope_for: tuple[str, ...] = ()
    informative: bool = False
    defined_in: str | None = None

    @classmethod
    def from_dict(cls, data: object, *, spec: str, index: int = 0) -> RawDefinition:
        if not isinstance(data, Mapping):
            raise MalformedSourceError(
                spec=spec, detail=f"dfns[{index}] must be an object, got {type(data).__name__}"
            )

        informative = data.get("informative", False)
        if not isinstance(informative, bool):
            raise MalformedSourceError(
                spec=spec, detail=f"dfns[{index}].informative must be a boolean"
            )

        raw_id = data.get("id", "")
        defined_in = data.get("definedIn")
        return cls(
            id=raw_id if isinstance(raw_id, str) else "",
            href=_require_str(data, "href", spec=spec, index=index),
            linking_text=_string_tuple(data, "linkingText", spec=spec, index=index, required=True),
            local_linking_text=_string_tuple(
                data, "localLinkingText", spec=spec, index=index, required=False
            ),
            kind=_require_str(data, "type", spec=spec, index=index),
            scope_for=_string_tuple(data, "for", spec=spec, index=index, required=True),
            access=_require_str(data, "access", spec=spec, index=index),
            informative=informative,
            defined_in=defined_in if isinstance(defined_in, str) else None,
        )


@dataclass(frozen=True, slots=True)
class SourceUnit:
    """All raw definitions of one specification plus its owning context."""

    series_shortname: str
    spec_shortname: str
    base_url: str
    definitions: tuple[RawDefinition, ...] = ()
    path: Path | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class UriFixFailure:
    """A definition whose href does not start with its specification's base URL."""

    spec_shortname: str
    href: str
    base_url: str

    def describe(self) -> str:
        return f"{self.spec_shortname}: {self.href} (base {self.base_url})"


@dataclass(frozen=True, slots=True)
class NormalizedRecord:
    """One (definition, alias) occurrence after kind remapping and normalization."""

    term: str
    is_exported: bool
    kind: str
    spec_shortname: str
    series_shortname: str
    status: str
    uri_fragment: str
    is_normative: bool
    scope_for: tuple[str, ...] | None = None

    def term_entry(self) -> dict[str, Any]:
        """Entry stored in the term index (``term`` and ``is_exported`` dropped)."""

        payload: dict[str, Any] = {
            "kind": self.kind,
            "specShortname": self.spec_shortname,
            "seriesShortname": self.series_shortname,
            "status": self.status,
            "uriFragment": self.uri_fragment,
            "isNormative": self.is_normative,
        }
        if self.scope_for:
            payload["scopeFor"] = list(self.scope_for)
        return payload

    def spec_entry(self) -> dict[str, Any]:
        """Entry stored in the spec index (grouping key and ``is_exported`` dropped)."""

        payload: dict[str, Any] = {
            "term": self.term,
            "kind": self.kind,
            "specShortname": self.spec_shortname,
            "status": self.status,
            "uriFragment": self.uri_fragment,
            "isNormative": self.is_normative,
        }
        if self.scope_for:
            payload["scopeFor"] = list(self.scope_for)
        return payload


__all__ = [
    "NormalizedRecord",
    "RawDefinition",
    "SourceUnit",
    "UriFixFailure",
]
