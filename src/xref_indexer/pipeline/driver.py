"""
xref-indexer — pipeline driver.

Purpose
- Orchestrate one indexing run: update check, registry load, per-source parsing,
  aggregation into the term and spec indexes, and publication of the artifacts.

Functional requirements
- States progress ``IDLE -> SOURCE_LOADED -> PROCESSING -> DONE | ABORTED``.
- An unchanged corpus without a forced run halts at ``IDLE`` and writes nothing.
- A structural failure in any source aborts immediately; no artifact is written.
- URI-fix failures are accumulated over every source; a non-empty set aborts the
  run after processing and nothing is written.
- Sources are processed sequentially in registry order, which fixes the order of
  occurrences under every index key.
- Every collaborator is injected so runs can be exercised without git or disk.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from xref_indexer.constants import (
    DEFAULT_CORPUS_BRANCH,
    DEFAULT_CORPUS_DIR,
    DEFAULT_CORPUS_REPOSITORY,
    DEFAULT_JSON_INDENT,
    DEFAULT_REGISTRY_PATH,
)
from xref_indexer.corpus.git_sync import CorpusSync
from xref_indexer.corpus.registry import build_specs_data, load_registry
from xref_indexer.corpus.sources import load_source_unit
from xref_indexer.errors import SourceProcessingError, UriResolutionError
from xref_indexer.indexing.aggregate import Index, add_to_spec_index, add_to_term_index
from xref_indexer.indexing.kinds import DEFAULT_KIND_POLICY, KindPolicy
from xref_indexer.indexing.parser import parse_source
from xref_indexer.observability.logging import correlation_scope
from xref_indexer.pipeline.artifacts import ArtifactPaths, write_artifacts

if TYPE_CHECKING:
    from collections.abc import Sequence

    from xref_indexer.corpus.registry import RegistryEntry, SpecsData
    from xref_indexer.indexing.models import SourceUnit, UriFixFailure

logger = logging.getLogger(__name__)

UpdateCheck = Callable[[], bool]
RegistryLoader = Callable[[Path], "Sequence[RegistryEntry]"]
SourceLoader = Callable[["RegistryEntry", Path], "SourceUnit"]
ArtifactWriter = Callable[..., "tuple[Path, ...]"]


class PipelineState(str, Enum):
    IDLE = "idle"
    SOURCE_LOADED = "source_loaded"
    PROCESSING = "processing"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class PipelineOptions:
    """Run options; ``force_update`` skips the nothing-changed short-circuit."""

    force_update: bool = False

    @classmethod
    def from_mapping(cls, options: Mapping[str, object] | None) -> PipelineOptions:
        """Accept both ``forceUpdate`` and ``force_update`` spellings."""

        if not options:
            return cls()
        raw = options.get("force_update", options.get("forceUpdate", False))
        if not isinstance(raw, bool):
            raise TypeError(f"force_update must be a boolean, got {type(raw).__name__}")
        return cls(force_update=raw)


@dataclass(frozen=True, slots=True)
class PipelineResult:
    written: bool
    state: PipelineState
    artifacts: tuple[Path, ...] = ()
    stats: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class _RunAccumulator:
    terms: Index = field(default_factory=dict)
    specs: Index = field(default_factory=dict)
    failures: list[UriFixFailure] = field(default_factory=list)
    sources: int = 0
    records: int = 0


class XrefPipeline:
    """Single-run driver over injected collaborators."""

    def __init__(
        self,
        *,
        registry_path: Path | str,
        artifact_paths: ArtifactPaths,
        update_check: UpdateCheck | None = None,
        policy: KindPolicy = DEFAULT_KIND_POLICY,
        indent: int = DEFAULT_JSON_INDENT,
        registry_loader: RegistryLoader = load_registry,
        source_loader: SourceLoader = load_source_unit,
        artifact_writer: ArtifactWriter = write_artifacts,
    ) -> None:
        self.registry_path = Path(registry_path)
        self.artifact_paths = artifact_paths
        self.policy = policy
        self.indent = indent
        self._update_check = update_check
        self._registry_loader = registry_loader
        self._source_loader = source_loader
        self._artifact_writer = artifact_writer
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    def run(self, options: PipelineOptions | None = None) -> PipelineResult:
        opts = options or PipelineOptions()
        self._state = PipelineState.IDLE

        try:
            if self._update_check is not None:
                changed = self._update_check()
                if not changed and not opts.force_update:
                    logger.info("Nothing to update")
                    return PipelineResult(written=False, state=self._state)
            return self._run_loaded(self._load_specs())
        except BaseException:
            self._state = PipelineState.ABORTED
            raise

    def _load_specs(self) -> SpecsData:
        specs_data = build_specs_data(self._registry_loader(self.registry_path))
        self._state = PipelineState.SOURCE_LOADED
        return specs_data

    def _run_loaded(self, specs_data: SpecsData) -> PipelineResult:
        entries = specs_data.source_entries
        self._state = PipelineState.PROCESSING
        logger.info("Processing %d files...", len(entries))

        acc = _RunAccumulator()
        registry_dir = self.registry_path.parent
        for entry in entries:
            with correlation_scope(spec=entry.shortname):
                self._process_entry(entry, registry_dir, acc)

        if acc.failures:
            self._state = PipelineState.ABORTED
            logger.error(
                "[fixURI]: Failed to resolve base url. (x%d)\n%s",
                len(acc.failures),
                "\n".join(failure.describe() for failure in acc.failures),
            )
            raise UriResolutionError(acc.failures)

        logger.info("Writing processed data files...")
        paths = self.artifact_paths
        documents: dict[Path, Any] = {
            paths.term_index: acc.terms,
            paths.spec_index: acc.specs,
            paths.spec_map: specs_data.spec_map,
        }
        written = self._artifact_writer(documents, indent=self.indent)
        self._state = PipelineState.DONE

        stats = {
            "sources": acc.sources,
            "records": acc.records,
            "term_keys": len(acc.terms),
            "spec_keys": len(acc.specs),
            "spec_urls": len(specs_data.urls),
            "uri_failures": 0,
        }
        logger.info(
            "Indexed %d records from %d sources (%d terms, %d specs)",
            stats["records"],
            stats["sources"],
            stats["term_keys"],
            stats["spec_keys"],
            extra={"stats": stats},
        )
        return PipelineResult(
            written=True, state=self._state, artifacts=tuple(written), stats=stats
        )

    def _process_entry(
        self, entry: RegistryEntry, registry_dir: Path, acc: _RunAccumulator
    ) -> None:
        try:
            source = self._source_loader(entry, registry_dir)
            result = parse_source(source, policy=self.policy)
        except Exception as exc:
            self._state = PipelineState.ABORTED
            logger.error("error while processing %s", entry.shortname, exc_info=True)
            raise SourceProcessingError(entry.shortname, exc) from exc

        add_to_term_index(result.records, acc.terms)
        add_to_spec_index(result.records, acc.specs)
        acc.failures.extend(result.errors)
        acc.sources += 1
        acc.records += len(result.records)
        logger.debug(
            "Parsed %d records (%d URI failures)", len(result.records), len(result.errors)
        )


def pipeline_from_config(
    config: Mapping[str, Any],
    *,
    offline: bool = False,
    update_check: UpdateCheck | None = None,
) -> XrefPipeline:
    """
    Build a pipeline from an effective configuration mapping.

    Unless ``offline`` is set or an ``update_check`` is supplied, the corpus git
    checkout is synchronized before each run and gates it.
    """

    corpus: Mapping[str, Any] = config.get("corpus", {})
    output: Mapping[str, Any] = config.get("output", {})
    corpus_dir = Path(str(corpus.get("directory", DEFAULT_CORPUS_DIR)))

    check = update_check
    if check is None and not offline:
        check = corpus_sync_from_config(config).has_updated

    return XrefPipeline(
        registry_path=corpus_dir / str(corpus.get("registry", DEFAULT_REGISTRY_PATH)),
        artifact_paths=ArtifactPaths.from_config(config),
        update_check=check,
        policy=KindPolicy.from_config(config),
        indent=int(output.get("indent", DEFAULT_JSON_INDENT)),
    )


def corpus_sync_from_config(config: Mapping[str, Any]) -> CorpusSync:
    corpus: Mapping[str, Any] = config.get("corpus", {})
    return CorpusSync(
        str(corpus.get("repository_url", DEFAULT_CORPUS_REPOSITORY)),
        str(corpus.get("directory", DEFAULT_CORPUS_DIR)),
        branch=str(corpus.get("branch", DEFAULT_CORPUS_BRANCH)),
    )


def run_pipeline(
    config: Mapping[str, Any],
    options: PipelineOptions | Mapping[str, object] | None = None,
    *,
    offline: bool = False,
) -> bool:
    """Run once; ``True`` when artifacts were (re)written, ``False`` for a no-op."""

    opts = (
        options if isinstance(options, PipelineOptions) else PipelineOptions.from_mapping(options)
    )
    return pipeline_from_config(config, offline=offline).run(opts).written


__all__ = [
    "PipelineOptions",
    "PipelineResult",
    "PipelineState",
    "XrefPipeline",
    "corpus_sync_from_config",
    "pipeline_from_config",
    "run_pipeline",
]
