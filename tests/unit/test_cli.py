"""
Unit tests for the xref CLI router.

Builds run ``--offline`` against fixture corpora on disk; no git or network.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from xref_indexer.observability import shutdown_logging
from xref_indexer.ui import cli


@pytest.fixture(autouse=True)
def _cleanup_logging() -> Any:
    yield
    shutdown_logging()


def _write_fixture(tmp_path: Path, dom_href: str = "https://dom.spec.whatwg.org/#event") -> Path:
    corpus = tmp_path / "corpus"
    (corpus / "ed" / "dfns").mkdir(parents=True)
    (corpus / "ed" / "index.json").write_text(
        json.dumps(
            {
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
        ),
        encoding="utf-8",
    )
    (corpus / "ed" / "dfns" / "dom.json").write_text(
        json.dumps(
            {
                "dfns": [
                    {
                        "href": dom_href,
                        "linkingText": ["Event"],
                        "type": "interface",
                        "for": [],
                        "access": "public",
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    config_path = tmp_path / "xref.toml"
    config_path.write_text(
        "\n".join(
            [
                "[corpus]",
                f'repository_url = "{(tmp_path / "no-such-upstream").as_posix()}"',
                'directory = "corpus"',
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
    return config_path


def test_build_offline_writes_artifacts(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_fixture(tmp_path)

    exit_code = cli.run_cli(["build", "--offline", "--config", str(config_path)])

    assert exit_code == 0
    assert capsys.readouterr().out.strip() == "updated"
    assert sorted(path.name for path in (tmp_path / "out").iterdir()) == [
        "specmap.json",
        "specs.json",
        "xref.json",
    ]
    log_files = list((tmp_path / "logs").glob("*/xref.jsonl"))
    assert len(log_files) == 1
    assert "Writing processed data files..." in log_files[0].read_text(encoding="utf-8")


def test_build_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_fixture(tmp_path)

    exit_code = cli.run_cli(["build", "--offline", "--json", "--config", str(config_path)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["written"] is True
    assert payload["state"] == "done"
    assert payload["stats"]["records"] == 1
    assert [Path(item).name for item in payload["artifacts"]] == [
        "xref.json",
        "specs.json",
        "specmap.json",
    ]


def test_uri_failure_exits_one_without_artifacts(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_fixture(tmp_path, dom_href="https://mirror.example/#event")

    exit_code = cli.run_cli(["build", "--offline", "--config", str(config_path)])

    assert exit_code == 1
    assert "[fixURI]" in capsys.readouterr().err
    assert not (tmp_path / "out").exists()


def test_malformed_source_exits_one_and_names_spec(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_fixture(tmp_path)
    (tmp_path / "corpus" / "ed" / "dfns" / "dom.json").write_text("{", encoding="utf-8")

    exit_code = cli.run_cli(["build", "--offline", "--config", str(config_path)])

    assert exit_code == 1
    assert "error while processing dom" in capsys.readouterr().err


def test_sync_failure_exits_three(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = _write_fixture(tmp_path)
    (tmp_path / "corpus" / "README").write_text("not a checkout", encoding="utf-8")

    exit_code = cli.run_cli(["sync", "--config", str(config_path)])

    assert exit_code == 3
    assert "corpus sync failed" in capsys.readouterr().err


def test_config_json_shows_normalized_paths(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config_path = _write_fixture(tmp_path)

    exit_code = cli.run_cli(["config", "--json", "--config", str(config_path)])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["config"]["output"]["directory"] == (tmp_path.resolve() / "out").as_posix()


def test_invalid_config_exits_two(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config_path = tmp_path / "xref.toml"
    config_path.write_text('[output]\nindent = "wide"\n', encoding="utf-8")

    exit_code = cli.run_cli(["build", "--config", str(config_path)])

    assert exit_code == 2
    assert "output.indent" in capsys.readouterr().err


def test_no_arguments_means_forced_build(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[tuple[str, bool, bool]] = []

    def _fake_build(args: Any) -> int:
        seen.append((args.command, args.force, args.offline))
        return 0

    monkeypatch.setattr(cli, "_cmd_build", _fake_build)

    assert cli.run_cli([]) == 0
    assert seen == [("build", True, False)]
