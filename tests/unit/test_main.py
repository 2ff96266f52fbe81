"""Unit tests for process exit-code routing at the CLI boundary."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from xref_indexer.config import ConfigLoadError
from xref_indexer.corpus import GitCommandError
from xref_indexer.errors import MalformedSourceError, SourceProcessingError, UriResolutionError
from xref_indexer.indexing import UriFixFailure
from xref_indexer.main import ExitCode, cli_entrypoint
from xref_indexer.ui import cli

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


def _raising(exc: BaseException) -> Callable[[Sequence[str] | None], int]:
    def _run(argv: Sequence[str] | None = None) -> int:
        raise exc

    return _run


def _wrapped(cause: Exception) -> SourceProcessingError:
    try:
        raise SourceProcessingError("dom", cause) from cause
    except SourceProcessingError as exc:
        return exc


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ConfigLoadError("config file not found: x.toml"), ExitCode.CONFIG_ERROR),
        (
            GitCommandError(command=("git", "pull"), returncode=1, stdout="", stderr="boom"),
            ExitCode.SYNC_ERROR,
        ),
        (
            UriResolutionError([UriFixFailure("dom", "https://x/#a", "https://dom/")]),
            ExitCode.BUILD_ABORTED,
        ),
        (_wrapped(MalformedSourceError(spec="dom", detail="bad")), ExitCode.BUILD_ABORTED),
        (_wrapped(KeyError("href")), ExitCode.INTERNAL_ERROR),
        (RuntimeError("unexpected"), ExitCode.INTERNAL_ERROR),
    ],
)
def test_exceptions_route_to_exit_codes(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    exc: BaseException,
    expected: ExitCode,
) -> None:
    monkeypatch.setattr(cli, "run_cli", _raising(exc))

    assert cli_entrypoint([]) == int(expected)

    err = capsys.readouterr().err
    if expected is ExitCode.INTERNAL_ERROR:
        assert "Traceback" in err
    else:
        assert str(exc).splitlines()[0] in err


def test_argparse_errors_are_normalized(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_entrypoint(["no-such-command"]) == 2
    assert "invalid choice" in capsys.readouterr().err


def test_handler_exit_codes_pass_through(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "run_cli", lambda argv=None: 1)
    assert cli_entrypoint([]) == 1

    monkeypatch.setattr(cli, "run_cli", lambda argv=None: 99)
    assert cli_entrypoint([]) == int(ExitCode.INTERNAL_ERROR)
