"""
xref-indexer — runtime config loader.

Purpose
- Produce the effective configuration for one ``xref`` invocation.

Functional requirements
- Precedence: CLI > env (``XREF_<SECTION>_<KEY>``) > ``xref.toml`` > defaults.
- A missing ``./xref.toml`` is not an error; a missing explicit ``--config`` file is.
- Env values take the type of the setting they override; list settings have no env form.
- ``corpus.directory``, ``output.directory`` and ``observability.log_dir`` resolve
  against the directory holding the config file.
"""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from xref_indexer.config.schema import (
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_CONFIG_FILE: Final[str] = "xref.toml"
ENV_PREFIX: Final[str] = "XREF_"

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoadError(ValueError):
    """Raised when config cannot be loaded or overrides cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    Load the effective configuration.

    ``cli_overrides`` maps dotted ``section.key`` names to values; ``None`` values are
    ignored so unset argparse options can be passed through unchanged.
    """

    if config_path is None:
        path = (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    else:
        path = Path(config_path).expanduser().resolve()

    config = assert_valid_config(
        merge_config(default_config(), _read_toml(path, required=config_path is not None))
    )
    env = os.environ if environ is None else environ
    config = merge_config(config, _env_overrides(config, env))
    config = merge_config(config, _dotted_overrides(cli_overrides or {}))
    config = assert_valid_config(config)

    for section, key in PATH_FIELDS:
        config[section][key] = _resolve_path(config[section][key], path.parent)
    return config


def dump_effective_config(config: Mapping[str, object], *, pretty: bool = False) -> str:
    """Deterministic JSON rendering of ``config``."""

    if pretty:
        return json.dumps(config, sort_keys=True, indent=2, ensure_ascii=False)
    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _read_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_overrides(config: Mapping[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for section, values in config.items():
        for key, current in values.items():
            name = f"{ENV_PREFIX}{section.upper()}_{key.upper()}"
            raw = environ.get(name)
            if raw is None or isinstance(current, list):
                continue
            overrides.setdefault(section, {})[key] = _coerce(raw.strip(), current, name)
    return overrides


def _coerce(raw: str, current: object, name: str) -> object:
    if isinstance(current, bool):
        if raw.lower() in _TRUE_WORDS:
            return True
        if raw.lower() in _FALSE_WORDS:
            return False
        raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError as exc:
            raise ConfigLoadError(f"{name} must be an integer") from exc
    return raw


def _dotted_overrides(overrides: Mapping[str, object]) -> dict[str, Any]:
    payload: dict[str, Any] = {}
    for dotted, value in overrides.items():
        if value is None:
            continue
        section, _, key = dotted.partition(".")
        if not section or not key:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        payload.setdefault(section, {})[key] = value
    return payload


def _resolve_path(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "dump_effective_config",
    "load_config",
]
