"""Raw definitions reader: one registry entry's ``dfns`` file to a ``SourceUnit``."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from xref_indexer.errors import MalformedSourceError
from xref_indexer.indexing.models import RawDefinition, SourceUnit

if TYPE_CHECKING:
    from xref_indexer.corpus.registry import RegistryEntry


def read_definitions(path: Path | str, *, spec: str) -> tuple[RawDefinition, ...]:
    """Read and validate every definition in a raw definitions file."""

    source_path = Path(path)
    try:
        payload = json.loads(source_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MalformedSourceError(
            spec=spec, path=source_path, detail=f"invalid JSON: {exc}"
        ) from exc
    except OSError as exc:
        raise MalformedSourceError(
            spec=spec, path=source_path, detail=f"unreadable: {exc}"
        ) from exc

    if not isinstance(payload, Mapping):
        raise MalformedSourceError(spec=spec, path=source_path, detail="root must be an object")
    entries = payload.get("dfns")
    if not isinstance(entries, list):
        raise MalformedSourceError(spec=spec, path=source_path, detail="missing 'dfns' list")

    try:
        return tuple(
            RawDefinition.from_dict(item, spec=spec, index=index)
            for index, item in enumerate(entries)
        )
    except MalformedSourceError as exc:
        raise MalformedSourceError(spec=spec, path=source_path, detail=exc.detail) from exc


def load_source_unit(entry: RegistryEntry, registry_dir: Path | str) -> SourceUnit:
    """Build the ``SourceUnit`` for ``entry``; its dfns path is relative to ``registry_dir``."""

    if not entry.definitions_path or not entry.nightly_url:
        raise MalformedSourceError(
            spec=entry.shortname, detail="registry entry declares no definitions file"
        )
    path = Path(registry_dir) / entry.definitions_path
    return SourceUnit(
        series_shortname=entry.series_shortname,
        spec_shortname=entry.shortname,
        base_url=entry.nightly_url,
        definitions=read_definitions(path, spec=entry.shortname),
        path=path,
    )


__all__ = ["load_source_unit", "read_definitions"]
