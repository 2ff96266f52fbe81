"""Stable constants shared across the indexing pipeline."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Upstream corpus.
DEFAULT_CORPUS_REPOSITORY: Final[str] = "https://github.com/w3c/webref.git"
DEFAULT_CORPUS_BRANCH: Final[str] = "main"
DEFAULT_CORPUS_DIR: Final[PurePosixPath] = PurePosixPath("data/webref")
DEFAULT_REGISTRY_PATH: Final[PurePosixPath] = PurePosixPath("ed/index.json")

# Output artifacts.
DEFAULT_OUTPUT_DIR: Final[PurePosixPath] = PurePosixPath("data/xref")
TERM_INDEX_FILENAME: Final[str] = "xref.json"
SPEC_INDEX_FILENAME: Final[str] = "specs.json"
SPEC_MAP_FILENAME: Final[str] = "specmap.json"
DEFAULT_JSON_INDENT: Final[int] = 2

# Every record is stamped with this status; nightly vs snapshot is not tracked.
STATUS_CURRENT: Final[str] = "current"

PUBLIC_ACCESS: Final[str] = "public"
CSS_KIND_PREFIX: Final[str] = "css-"

# Bare kind names that collide with generic kinds and are CSS-specific.
CSS_KINDS: Final[frozenset[str]] = frozenset(
    {
        "at-rule",
        "descriptor",
        "function",
        "property",
        "selector",
        "type",
        "value",
    }
)

SUPPORTED_KINDS: Final[frozenset[str]] = frozenset(
    {
        "abstract-op",
        "argument",
        "attr-value",
        "attribute",
        "callback",
        "const",
        "constructor",
        "dfn",
        "dict-member",
        "dictionary",
        "element",
        "element-attr",
        "element-state",
        "enum",
        "enum-value",
        "event",
        "exception",
        "extended-attribute",
        "http-header",
        "interface",
        "method",
        "namespace",
        "permission",
        "scheme",
        "typedef",
        *(f"{CSS_KIND_PREFIX}{kind}" for kind in CSS_KINDS),
    }
)

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "CSS_KINDS",
    "CSS_KIND_PREFIX",
    "DEFAULT_CORPUS_BRANCH",
    "DEFAULT_CORPUS_DIR",
    "DEFAULT_CORPUS_REPOSITORY",
    "DEFAULT_JSON_INDENT",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_REGISTRY_PATH",
    "PUBLIC_ACCESS",
    "SPEC_INDEX_FILENAME",
    "SPEC_MAP_FILENAME",
    "STATUS_CURRENT",
    "SUPPORTED_KINDS",
    "TERM_INDEX_FILENAME",
]
