"""
xref-indexer — run logging.

Purpose
- Route ``xref_indexer`` records through a queue to a per-run log file
  (``<log_dir>/<run_id>/xref.jsonl``) and, optionally, stdout.
- Tag every record emitted while a source is processed with its spec shortname.

Functional requirements
- Logging never blocks a build: when the queue is full the record is dropped and counted.
- ``json`` lines are canonical objects with sorted keys; ``text`` lines read
  ``(xref) LEVEL message [spec]``.
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.handlers
import queue
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Final, Literal, cast

LogFormat = Literal["json", "text"]

LOGGER_NAME: Final[str] = "xref_indexer"
LOG_FILENAME: Final[str] = "xref.jsonl"
_TEXT_FORMAT: Final[str] = "(xref) %(levelname)s %(message)s"

# Attributes present on every record; anything else arrived through ``extra=``.
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "asctime",
    "correlation",
    "message",
    "taskName",
}

_CORRELATION: contextvars.ContextVar[Mapping[str, str]] = contextvars.ContextVar(
    "xref_correlation", default={}
)

_active: RunLogging | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Settings for one run's logging."""

    run_id: str
    log_dir: Path | str = Path("logs")
    level: str = "INFO"
    log_format: LogFormat = "text"
    log_to_stdout: bool = True
    queue_size: int = 4096
    logger_name: str = LOGGER_NAME


@dataclass(slots=True)
class RunLogging:
    """Active logging for a run; ``shutdown`` drains the queue and closes every sink."""

    logger: logging.Logger
    log_path: Path
    _queue_handler: _DroppingQueueHandler
    _listener: logging.handlers.QueueListener
    _sinks: tuple[logging.Handler, ...]
    _closed: bool = field(default=False)

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._listener.stop()
        self.logger.removeHandler(self._queue_handler)
        self._queue_handler.close()
        for sink in self._sinks:
            sink.close()


class _DroppingQueueHandler(logging.handlers.QueueHandler):
    def __init__(self, log_queue: queue.Queue[object]) -> None:
        super().__init__(log_queue)
        self.dropped = 0

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        # The listener thread runs in its own context.
        context = get_correlation_context()
        if context:
            record.correlation = context
        return cast("logging.LogRecord", super().prepare(record))

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            self.dropped += 1


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }
        event.update(getattr(record, "correlation", {}))
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
        }
        if extras:
            event["fields"] = extras
        if record.exc_info is not None:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(
            event,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=_json_default,
        )


class _TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(_TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        spec = getattr(record, "correlation", {}).get("spec")
        return f"{line} [{spec}]" if spec else line


def setup_logging(
    observability_config: Mapping[str, object] | None = None,
    *,
    run_id: str,
    logger_name: str = LOGGER_NAME,
) -> RunLogging:
    """Start run logging from an ``[observability]`` config section."""

    cfg = dict(observability_config or {})
    return setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            log_dir=str(cfg.get("log_dir", "logs")),
            level=str(cfg.get("log_level", "INFO")),
            log_format="json" if cfg.get("log_format") == "json" else "text",
            log_to_stdout=bool(cfg.get("log_to_stdout", True)),
            logger_name=logger_name,
        )
    )


def setup_structured_logging(config: LoggingConfig) -> RunLogging:
    """Install queue-backed logging for one run, replacing any active setup."""

    global _active
    shutdown_logging()

    run_id = config.run_id.strip()
    if not run_id:
        raise ValueError("run_id must not be empty")
    if config.queue_size <= 0:
        raise ValueError("queue_size must be > 0")
    level = logging.getLevelName(config.level.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unsupported logging level {config.level!r}")

    run_dir = Path(config.log_dir) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    log_path = run_dir / LOG_FILENAME

    formatter: logging.Formatter = (
        _JsonLineFormatter(run_id) if config.log_format == "json" else _TextFormatter()
    )
    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if config.log_to_stdout:
        sinks.append(logging.StreamHandler())
    for sink in sinks:
        sink.setLevel(level)
        sink.setFormatter(formatter)

    logger = logging.getLogger(config.logger_name)
    logger.setLevel(level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    log_queue: queue.Queue[object] = queue.Queue(maxsize=config.queue_size)
    queue_handler = _DroppingQueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, *sinks, respect_handler_level=True)
    listener.start()
    logger.addHandler(queue_handler)

    _active = RunLogging(
        logger=logger,
        log_path=log_path,
        _queue_handler=queue_handler,
        _listener=listener,
        _sinks=tuple(sinks),
    )
    return _active


def shutdown_logging(handle: RunLogging | None = None) -> None:
    """Stop ``handle`` (default: the active setup); calling it twice is harmless."""

    global _active
    resolved = handle if handle is not None else _active
    if resolved is None:
        return
    resolved.shutdown()
    if resolved is _active:
        _active = None


def get_correlation_context() -> dict[str, str]:
    return dict(_CORRELATION.get())


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind fields such as ``spec=...`` to every record logged inside the block.

    ``None`` unbinds a field; blank values are rejected.
    """

    state = get_correlation_context()
    for key, value in fields.items():
        if value is None:
            state.pop(key, None)
        elif value.strip():
            state[key] = value.strip()
        else:
            raise ValueError(f"correlation value for {key!r} must not be empty")
    token = _CORRELATION.set(state)
    try:
        yield
    finally:
        _CORRELATION.reset(token)


def _json_default(value: object) -> object:
    if isinstance(value, Path):
        return value.as_posix()
    if isinstance(value, (set, frozenset)):
        return sorted(str(item) for item in value)
    return repr(value)


__all__ = [
    "LOGGER_NAME",
    "LoggingConfig",
    "RunLogging",
    "correlation_scope",
    "get_correlation_context",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
