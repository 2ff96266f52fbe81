"""Pipeline driver and the all-or-nothing artifact writer."""

from xref_indexer.pipeline.artifacts import ArtifactPaths, render_json, write_artifacts
from xref_indexer.pipeline.driver import (
    PipelineOptions,
    PipelineResult,
    PipelineState,
    XrefPipeline,
    corpus_sync_from_config,
    pipeline_from_config,
    run_pipeline,
)

__all__ = [
    "ArtifactPaths",
    "PipelineOptions",
    "PipelineResult",
    "PipelineState",
    "XrefPipeline",
    "corpus_sync_from_config",
    "pipeline_from_config",
    "render_json",
    "run_pipeline",
    "write_artifacts",
]
