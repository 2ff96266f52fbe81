"""
Unit tests for corpus git sync over local temporary repositories.

No network access: the upstream corpus is a throwaway repository on disk.
"""

from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING

import pytest

from xref_indexer.corpus.git_sync import CorpusSync, CorpusSyncError, GitCommandError

if TYPE_CHECKING:
    from pathlib import Path


def run_git(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
    if completed.returncode != 0:
        msg = f"git {' '.join(args)} failed\nstdout:\n{completed.stdout}\nstderr:\n{completed.stderr}"
        raise AssertionError(msg)
    return completed


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home"
    xdg = tmp_path / "xdg"
    home.mkdir()
    xdg.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")
    for prefix in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{prefix}_NAME", "xref tests")
        monkeypatch.setenv(f"{prefix}_EMAIL", "xref-tests@example.invalid")


def commit_file(worktree: Path, rel_path: str, content: str, message: str) -> str:
    path = worktree / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    run_git(worktree, "add", "--all")
    run_git(worktree, "commit", "--no-gpg-sign", "-m", message)
    return run_git(worktree, "rev-parse", "HEAD").stdout.strip()


@pytest.fixture
def upstream(tmp_path: Path) -> Path:
    repo = tmp_path / "upstream"
    repo.mkdir()
    run_git(repo, "init")
    run_git(repo, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_file(repo, "ed/index.json", '{"results": []}', "seed corpus")
    return repo


def test_first_sync_clones_and_reports_change(tmp_path: Path, upstream: Path) -> None:
    sync = CorpusSync(str(upstream), tmp_path / "corpus")

    result = sync.sync()

    assert result.cloned is True
    assert result.changed is True
    assert result.head_before is None
    assert sync.is_cloned
    assert (tmp_path / "corpus" / "ed" / "index.json").exists()


def test_second_sync_without_upstream_changes_is_unchanged(
    tmp_path: Path, upstream: Path
) -> None:
    sync = CorpusSync(str(upstream), tmp_path / "corpus")
    sync.sync()

    result = sync.sync()

    assert result.cloned is False
    assert result.changed is False
    assert result.head_before == result.head_after
    assert sync.has_updated() is False


def test_upstream_commit_is_pulled(tmp_path: Path, upstream: Path) -> None:
    sync = CorpusSync(str(upstream), tmp_path / "corpus")
    sync.sync()
    new_head = commit_file(upstream, "ed/dfns/dom.json", '{"dfns": []}', "add dom")

    result = sync.sync()

    assert result.changed is True
    assert result.head_after == new_head
    assert (tmp_path / "corpus" / "ed" / "dfns" / "dom.json").exists()


def test_refuses_to_clone_into_foreign_directory(tmp_path: Path, upstream: Path) -> None:
    target = tmp_path / "corpus"
    target.mkdir()
    (target / "notes.txt").write_text("keep me", encoding="utf-8")

    with pytest.raises(CorpusSyncError, match="not a git checkout"):
        CorpusSync(str(upstream), target).sync()

    assert (target / "notes.txt").read_text(encoding="utf-8") == "keep me"


def test_git_failures_carry_command_details(tmp_path: Path) -> None:
    sync = CorpusSync(str(tmp_path / "does-not-exist"), tmp_path / "corpus")

    with pytest.raises(GitCommandError) as exc_info:
        sync.sync()

    assert exc_info.value.command[:2] == ("git", "clone")
    assert exc_info.value.returncode != 0
    assert isinstance(exc_info.value, CorpusSyncError)


def test_unknown_branch_fails_clone(tmp_path: Path, upstream: Path) -> None:
    with pytest.raises(GitCommandError):
        CorpusSync(str(upstream), tmp_path / "corpus", branch="gh-pages").sync()
