"""Observability exports: queue-backed run logging with correlation scopes."""

from xref_indexer.observability.logging import (
    LOGGER_NAME,
    LoggingConfig,
    RunLogging,
    correlation_scope,
    get_correlation_context,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

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
