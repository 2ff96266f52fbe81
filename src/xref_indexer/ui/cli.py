"""Command-line interface router for xref-indexer."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Final

from xref_indexer.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from xref_indexer.corpus import CorpusSyncError
from xref_indexer.errors import (
    ArtifactWriteError,
    RegistryError,
    SourceProcessingError,
    UriResolutionError,
    XrefError,
)
from xref_indexer.observability import setup_logging, shutdown_logging
from xref_indexer.pipeline import PipelineOptions, corpus_sync_from_config, pipeline_from_config
from xref_indexer.ui.render import CLIRenderer, create_renderer

DEFAULT_COMMAND: Final[tuple[str, ...]] = ("build", "--force")


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 1

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router."""

    parser = argparse.ArgumentParser(
        prog="xref",
        description=(
            "xref-indexer — build cross-reference indexes from the webref corpus.\n\n"
            "Common workflows:\n"
            "  xref                        Sync the corpus and rebuild unconditionally\n"
            "  xref build                  Rebuild only when the corpus changed\n"
            "  xref build --offline        Rebuild from the local corpus checkout\n"
            "  xref config --json          Show the effective configuration\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to xref TOML config (default: ./xref.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log at DEBUG level and show per-run statistics.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # build ---------------------------------------------------------------
    build_parser_ = subparsers.add_parser(
        "build",
        parents=[common],
        help="Sync the corpus and rebuild the indexes",
        description=(
            "Pull the corpus, parse every specification's definitions, and write\n"
            "xref.json, specs.json and specmap.json. Nothing is written when any\n"
            "definition URI fails to resolve.\n\n"
            "Examples:\n"
            "  xref build\n"
            "  xref build --force\n"
            "  xref build --offline --config ./xref.toml\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    build_parser_.add_argument(
        "--force",
        action="store_true",
        help="Rebuild even when the corpus did not change",
    )
    build_parser_.add_argument(
        "--offline",
        action="store_true",
        help="Skip the corpus sync and always rebuild from the local checkout",
    )
    build_parser_.add_argument("--json", action="store_true", help="Emit JSON output")
    build_parser_.set_defaults(handler=_cmd_build)

    # sync ----------------------------------------------------------------
    sync_parser = subparsers.add_parser(
        "sync",
        parents=[common],
        help="Clone or update the corpus checkout only",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sync_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    sync_parser.set_defaults(handler=_cmd_sync)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  xref config\n"
            "  xref config --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    arguments = list(sys.argv[1:] if argv is None else argv)
    if not arguments:
        arguments = list(DEFAULT_COMMAND)

    parser = build_parser()
    namespace = parser.parse_args(arguments)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_build(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    renderer = _get_renderer(args)
    options = PipelineOptions(force_update=_flag(args, "force"))

    _start_logging(config, verbose=_flag(args, "verbose"))
    try:
        pipeline = pipeline_from_config(config, offline=_flag(args, "offline"))
        result = pipeline.run(options)
    except CorpusSyncError as exc:
        raise CLIError(f"corpus sync failed: {exc}", exit_code=3) from exc
    except SourceProcessingError as exc:
        if not isinstance(exc.__cause__, XrefError):
            raise
        raise CLIError(str(exc), exit_code=1) from exc
    except (UriResolutionError, RegistryError, ArtifactWriteError) as exc:
        raise CLIError(str(exc), exit_code=1) from exc
    finally:
        shutdown_logging()

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "build",
                "written": result.written,
                "state": result.state.value,
                "artifacts": [path.as_posix() for path in result.artifacts],
                "stats": result.stats,
            }
        )
        return 0

    if not result.written:
        renderer.text("nothing to update")
        return 0
    renderer.text("updated")
    if renderer.verbose:
        renderer.items([path.as_posix() for path in result.artifacts])
        renderer.section("Stats:")
        renderer.stats(result.stats)
    return 0


def _cmd_sync(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    renderer = _get_renderer(args)

    _start_logging(config, verbose=_flag(args, "verbose"))
    try:
        outcome = corpus_sync_from_config(config).sync()
    except CorpusSyncError as exc:
        raise CLIError(f"corpus sync failed: {exc}", exit_code=3) from exc
    finally:
        shutdown_logging()

    if _flag(args, "json"):
        _emit_json(
            {
                "command": "sync",
                "changed": outcome.changed,
                "cloned": outcome.cloned,
                "head": outcome.head_after,
            }
        )
        return 0

    renderer.text("changed" if outcome.changed else "unchanged")
    renderer.kv("HEAD", outcome.head_after)
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)

    if _flag(args, "json"):
        _emit_json({"command": "config", "config": config})
        return 0

    _get_renderer(args).text(dump_effective_config(config, pretty=True))
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _load_effective_config(args: argparse.Namespace) -> dict[str, Any]:
    config_path = _optional_str(getattr(args, "config_path", None))
    try:
        return load_config(config_path)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _start_logging(config: Mapping[str, Any], *, verbose: bool) -> None:
    observability = dict(config.get("observability", {}))
    if verbose:
        observability["log_level"] = "DEBUG"
    try:
        setup_logging(observability, run_id=_new_run_id())
    except (OSError, ValueError) as exc:
        raise CLIError(f"unable to configure logging: {exc}", exit_code=2) from exc


def _new_run_id() -> str:
    return datetime.now(UTC).strftime("%Y%m%d_%H%M%S_%f")


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise CLIError("invalid optional string argument", exit_code=2)
    cleaned = value.strip()
    return cleaned or None


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


__all__ = ["CLIError", "build_parser", "run_cli"]
