"""
xref-indexer — specification registry reader.

Purpose
- Read the corpus registry (``ed/index.json``) into ordered, typed entries.
- Derive the spec-metadata map and the sorted set of known spec URLs.

Functional requirements
- Entry order follows the registry file.
- Entries that declare a definitions file must carry a nightly URL; that URL is the
  base every definition href of the spec is resolved against.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from xref_indexer.errors import RegistryError

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """One specification as listed in the registry."""

    shortname: str
    title: str
    series_shortname: str
    nightly_url: str | None = None
    release_url: str | None = None
    url: str | None = None
    definitions_path: str | None = None

    @property
    def preferred_url(self) -> str | None:
        """Nightly URL, else release URL, else the generic URL."""

        return self.nightly_url or self.release_url or self.url

    def metadata(self) -> dict[str, Any]:
        return {
            "url": self.preferred_url,
            "title": self.title,
            "shortname": self.shortname,
        }

    @classmethod
    def from_dict(cls, data: object, *, index: int) -> RegistryEntry:
        where = f"results[{index}]"
        if not isinstance(data, Mapping):
            raise RegistryError(f"{where} must be an object, got {type(data).__name__}")

        shortname = data.get("shortname")
        if not isinstance(shortname, str) or not shortname.strip():
            raise RegistryError(f"{where}.shortname must be a non-empty string")
        where = f"{where} ({shortname})"

        title = data.get("title")
        if not isinstance(title, str):
            raise RegistryError(f"{where}.title must be a string")

        series = data.get("series")
        series_shortname = series.get("shortname") if isinstance(series, Mapping) else None
        if not isinstance(series_shortname, str) or not series_shortname.strip():
            raise RegistryError(f"{where}.series.shortname must be a non-empty string")

        definitions_path = data.get("dfns")
        if definitions_path is not None and not isinstance(definitions_path, str):
            raise RegistryError(f"{where}.dfns must be a string path")

        nightly_url = _version_url(data, "nightly", where=where)
        if definitions_path and not nightly_url:
            raise RegistryError(f"{where} declares dfns but has no nightly.url")

        generic_url = data.get("url")
        return cls(
            shortname=shortname,
            title=title,
            series_shortname=series_shortname,
            nightly_url=nightly_url,
            release_url=_version_url(data, "release", where=where),
            url=generic_url if isinstance(generic_url, str) and generic_url else None,
            definitions_path=definitions_path or None,
        )


@dataclass(frozen=True, slots=True)
class SpecsData:
    """Registry-derived data needed before any definitions are parsed."""

    entries: tuple[RegistryEntry, ...]
    spec_map: dict[str, dict[str, Any]]
    urls: tuple[str, ...]

    @property
    def source_entries(self) -> tuple[RegistryEntry, ...]:
        return tuple(entry for entry in self.entries if entry.definitions_path)


def load_registry(path: Path | str) -> tuple[RegistryEntry, ...]:
    """Read registry entries from ``path`` in file order."""

    registry_path = Path(path)
    try:
        payload = json.loads(registry_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RegistryError(f"registry file not found: {registry_path}") from exc
    except json.JSONDecodeError as exc:
        raise RegistryError(f"invalid JSON in registry {registry_path}: {exc}") from exc
    except OSError as exc:
        raise RegistryError(f"unable to read registry {registry_path}: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise RegistryError(f"registry root must be an object: {registry_path}")
    results = payload.get("results")
    if not isinstance(results, list):
        raise RegistryError(f"registry is missing a 'results' list: {registry_path}")

    return tuple(RegistryEntry.from_dict(item, index=i) for i, item in enumerate(results))


def build_specs_data(entries: Sequence[RegistryEntry]) -> SpecsData:
    """Build the spec-metadata map and the sorted URL set from registry entries."""

    spec_map: dict[str, dict[str, Any]] = {}
    urls: set[str] = set()
    for entry in entries:
        if entry.nightly_url:
            urls.add(entry.nightly_url)
        if entry.release_url:
            urls.add(entry.release_url)
        spec_map[entry.shortname] = entry.metadata()

    return SpecsData(entries=tuple(entries), spec_map=spec_map, urls=tuple(sorted(urls)))


def _version_url(data: Mapping[str, object], key: str, *, where: str) -> str | None:
    version = data.get(key)
    if version is None:
        return None
    if not isinstance(version, Mapping):
        raise RegistryError(f"{where}.{key} must be an object")
    url = version.get("url")
    if url is None:
        return None
    if not isinstance(url, str):
        raise RegistryError(f"{where}.{key}.url must be a string")
    return url or None


__all__ = ["RegistryEntry", "SpecsData", "build_specs_data", "load_registry"]
