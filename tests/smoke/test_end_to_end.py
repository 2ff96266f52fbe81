"""
xref-indexer end-to-end smoke test.

Purpose
- Drive the ``xref`` entrypoint against a throwaway upstream corpus repository:
  first run clones and builds, an unchanged corpus is a no-op, and a new upstream
  commit triggers a rebuild.
"""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Any

import pytest

from xref_indexer.main import cli_entrypoint
from xref_indexer.observability import shutdown_logging

pytestmark = pytest.mark.smoke


def _git(cwd: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=cwd,
        env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
        text=True,
        capture_output=True,
        check=False,
    )
    if completed.returncode != 0:
        raise AssertionError(f"git {' '.join(args)} failed: {completed.stderr}")
    return completed.stdout


def _dfn(fragment: str, term: str, kind: str = "interface") -> dict[str, Any]:
    return {
        "id": fragment,
        "href": f"https://dom.spec.whatwg.org/#{fragment}",
        "linkingText": [term],
        "localLinkingText": [],
        "type": kind,
        "for": [],
        "access": "public",
        "informative": False,
    }


def _publish(repo: Path, dfns: list[dict[str, Any]], message: str) -> None:
    registry = {
        "results": [
            {
                "shortname": "dom",
                "title": "DOM Standard",
                "series": {"shortname": "dom"},
                "nightly": {"url": "https://dom.spec.whatwg.org/"},
                "dfns": "dfns/dom.json",
            }
        ]
    }
    (repo / "ed" / "dfns").mkdir(parents=True, exist_ok=True)
    (repo / "ed" / "index.json").write_text(json.dumps(registry), encoding="utf-8")
    (repo / "ed" / "dfns" / "dom.json").write_text(json.dumps({"dfns": dfns}), encoding="utf-8")
    _git(repo, "add", "--all")
    _git(repo, "commit", "--no-gpg-sign", "-m", message)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Any:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for prefix in ("GIT_AUTHOR", "GIT_COMMITTER"):
        monkeypatch.setenv(f"{prefix}_NAME", "xref smoke")
        monkeypatch.setenv(f"{prefix}_EMAIL", "xref-smoke@example.invalid")
    for name in list(os.environ):
        if name.startswith("XREF_"):
            monkeypatch.delenv(name)
    yield
    shutdown_logging()


def test_sync_build_noop_and_rebuild(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    upstream = tmp_path / "upstream"
    upstream.mkdir()
    _git(upstream, "init")
    _git(upstream, "symbolic-ref", "HEAD", "refs/heads/main")
    _publish(upstream, [_dfn("event", "Event")], "seed corpus")

    config_path = tmp_path / "xref.toml"
    config_path.write_text(
        "\n".join(
            [
                "[corpus]",
                f'repository_url = "{upstream.as_posix()}"',
                'directory = "data/webref"',
                "",
                "[output]",
                'directory = "out"',
                "",
                "[observability]",
                'log_dir = "logs"',
                "log_to_stdout = false",
                "",
            ]
        ),
        encoding="utf-8",
    )
    argv = ["build", "--config", str(config_path)]
    term_index = tmp_path / "out" / "xref.json"

    assert cli_entrypoint(argv) == 0
    assert capsys.readouterr().out.strip() == "updated"
    assert list(json.loads(term_index.read_text(encoding="utf-8"))) == ["Event"]

    assert cli_entrypoint(argv) == 0
    assert capsys.readouterr().out.strip() == "nothing to update"

    _publish(
        upstream,
        [_dfn("event", "Event"), _dfn("dom-event-type", "type", kind="attribute")],
        "add attribute",
    )
    assert cli_entrypoint(argv) == 0
    assert capsys.readouterr().out.strip() == "updated"
    assert sorted(json.loads(term_index.read_text(encoding="utf-8"))) == ["Event", "type"]

    assert cli_entrypoint([*argv, "--force"]) == 0
    assert capsys.readouterr().out.strip() == "updated"

    specs = json.loads((tmp_path / "out" / "specs.json").read_text(encoding="utf-8"))
    assert [entry["term"] for entry in specs["dom"]] == ["Event", "type"]
