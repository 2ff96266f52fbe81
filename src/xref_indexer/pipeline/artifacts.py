"""Serialization and all-or-nothing publication of the three output artifacts."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from xref_indexer.constants import (
    DEFAULT_JSON_INDENT,
    DEFAULT_OUTPUT_DIR,
    SPEC_INDEX_FILENAME,
    SPEC_MAP_FILENAME,
    TERM_INDEX_FILENAME,
)
from xref_indexer.errors import ArtifactWriteError
from xref_indexer.utils.fs import atomic_write_many

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ArtifactPaths:
    """Destination paths of the term index, spec index, and spec-metadata map."""

    term_index: Path
    spec_index: Path
    spec_map: Path

    @classmethod
    def in_directory(
        cls,
        directory: Path | str,
        *,
        term_index: str = TERM_INDEX_FILENAME,
        spec_index: str = SPEC_INDEX_FILENAME,
        spec_map: str = SPEC_MAP_FILENAME,
    ) -> ArtifactPaths:
        root = Path(directory)
        return cls(
            term_index=root / term_index,
            spec_index=root / spec_index,
            spec_map=root / spec_map,
        )

    @classmethod
    def from_config(cls, config: Mapping[str, object]) -> ArtifactPaths:
        section = config.get("output")
        output: Mapping[str, object] = section if isinstance(section, Mapping) else {}
        return cls.in_directory(
            str(output.get("directory", DEFAULT_OUTPUT_DIR)),
            term_index=str(output.get("term_index", TERM_INDEX_FILENAME)),
            spec_index=str(output.get("spec_index", SPEC_INDEX_FILENAME)),
            spec_map=str(output.get("spec_map", SPEC_MAP_FILENAME)),
        )

    def all(self) -> tuple[Path, Path, Path]:
        return (self.term_index, self.spec_index, self.spec_map)


def render_json(value: Any, *, indent: int = DEFAULT_JSON_INDENT) -> str:
    """Human-readable JSON with keys in insertion order and non-ASCII preserved."""

    return json.dumps(value, indent=indent, ensure_ascii=False)


def write_artifacts(
    documents: Mapping[Path, Any], *, indent: int = DEFAULT_JSON_INDENT
) -> tuple[Path, ...]:
    """
    Serialize every document, then publish them together.

    Serialization happens before any file is touched, so an unserializable value
    leaves the destination untouched as well.
    """

    rendered = {path: render_json(value, indent=indent) for path, value in documents.items()}
    try:
        for parent in sorted({path.parent for path in rendered}):
            parent.mkdir(parents=True, exist_ok=True)
        written = atomic_write_many(rendered)
    except OSError as exc:
        raise ArtifactWriteError(f"unable to write artifacts: {exc}") from exc

    for path in written:
        logger.debug("Wrote %s", path)
    return written


__all__ = ["ArtifactPaths", "render_json", "write_artifacts"]
