"""Module entrypoint for ``python -m xref_indexer``."""

from __future__ import annotations

from xref_indexer.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
