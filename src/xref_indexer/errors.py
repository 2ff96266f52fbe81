"""Exception hierarchy for the xref indexing pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from xref_indexer.indexing.models import UriFixFailure


class XrefError(Exception):
    """Base error for all pipeline failures."""


class MalformedSourceError(XrefError, ValueError):
    """Raised when a raw definitions file is structurally invalid."""

    def __init__(self, *, spec: str, detail: str, path: Path | None = None) -> None:
        self.spec = spec
        self.path = path
        self.detail = detail
        location = f" ({path})" if path is not None else ""
        super().__init__(f"malformed definitions for {spec!r}{location}: {detail}")


class RegistryError(XrefError, ValueError):
    """Raised when the specification registry cannot be read or parsed."""


class SourceProcessingError(XrefError):
    """Raised by the driver when processing one specification fails."""

    def __init__(self, spec: str, cause: BaseException) -> None:
        self.spec = spec
        super().__init__(f"error while processing {spec}: {cause}")


class UriResolutionError(XrefError):
    """Raised when one or more definition URIs did not match their base URL."""

    def __init__(self, failures: Sequence[UriFixFailure]) -> None:
        self.failures = tuple(failures)
        specs = sorted({failure.spec_shortname for failure in self.failures})
        super().__init__(
            f"[fixURI] failed to resolve base url (x{len(self.failures)}) in: {', '.join(specs)}"
        )


class ArtifactWriteError(XrefError, OSError):
    """Raised when artifacts could not be staged or published."""


__all__ = [
    "ArtifactWriteError",
    "MalformedSourceError",
    "RegistryError",
    "SourceProcessingError",
    "UriResolutionError",
    "XrefError",
]
