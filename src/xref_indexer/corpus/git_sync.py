"""Clone-or-update of the upstream definitions corpus via the git CLI."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from xref_indexer.constants import DEFAULT_CORPUS_BRANCH
from xref_indexer.errors import XrefError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)


class CorpusSyncError(XrefError):
    """Base error for corpus synchronization failures."""


class GitCommandError(CorpusSyncError):
    """Raised when a git subprocess command exits non-zero."""

    def __init__(
        self,
        *,
        command: Sequence[str],
        returncode: int,
        stdout: str,
        stderr: str,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        message = f"git command failed ({returncode}): {' '.join(command)}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Normalized subprocess result."""

    command: tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str
    stderr: str


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of one clone-or-update."""

    changed: bool
    cloned: bool
    head_before: str | None
    head_after: str


class CorpusSync:
    """Keep a local checkout of the corpus repository up to date."""

    def __init__(
        self,
        repository_url: str,
        directory: Path | str,
        *,
        branch: str = DEFAULT_CORPUS_BRANCH,
        env_overrides: Mapping[str, str] | None = None,
    ) -> None:
        self.repository_url = repository_url
        self.directory = Path(directory).resolve()
        self.branch = branch
        self._env_overrides = dict(env_overrides or {})

    @property
    def is_cloned(self) -> bool:
        return (self.directory / ".git").exists()

    def sync(self) -> SyncResult:
        """Clone when no checkout exists, otherwise fast-forward pull the branch."""

        logger.info("Pulling latest changes...", extra={"corpus": self.directory.as_posix()})
        if not self.is_cloned:
            return self._clone()

        head_before = self._head()
        self._run_git(["pull", "--ff-only", "origin", self.branch])
        head_after = self._head()
        changed = head_before != head_after
        if not changed:
            logger.info("Corpus already up to date at %s", head_after[:12])
        return SyncResult(
            changed=changed, cloned=False, head_before=head_before, head_after=head_after
        )

    def has_updated(self) -> bool:
        """Update-check collaborator for the pipeline driver."""

        return self.sync().changed

    def _clone(self) -> SyncResult:
        if self.directory.exists() and any(self.directory.iterdir()):
            raise CorpusSyncError(
                f"corpus directory exists but is not a git checkout: {self.directory}"
            )
        self.directory.parent.mkdir(parents=True, exist_ok=True)
        self._run_git(
            [
                "clone",
                "--branch",
                self.branch,
                self.repository_url,
                str(self.directory),
            ],
            cwd=self.directory.parent,
        )
        return SyncResult(changed=True, cloned=True, head_before=None, head_after=self._head())

    def _head(self) -> str:
        return self._run_git(["rev-parse", "HEAD"]).stdout.strip()

    def _run_git(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
    ) -> CommandResult:
        command = ("git", *args)
        run_cwd = (cwd if cwd is not None else self.directory).resolve()
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"
        env.update(self._env_overrides)

        try:
            completed = subprocess.run(
                command,
                cwd=run_cwd,
                env=env,
                text=True,
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise CorpusSyncError(f"unable to run git: {exc}") from exc

        result = CommandResult(
            command=command,
            cwd=run_cwd.as_posix(),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

        if result.returncode != 0:
            raise GitCommandError(
                command=result.command,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result


__all__ = ["CommandResult", "CorpusSync", "CorpusSyncError", "GitCommandError", "SyncResult"]
