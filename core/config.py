"""YAML configuration for the campaign finance report.

``core/defaults.yaml`` (installed with the package) holds every tunable of the report (input columns,
aggregation parameters, chart switches, export size, output location).  Three
override layers are applied on top, lowest precedence first:

1. Short environment aliases, e.g. ``CFR_INPUT=data/summary.csv``.
2. Prefixed environment variables, ``CFR__SECTION__KEY=value``; double
   underscores separate levels and matching is case-insensitive.
3. Command line flags, ``--set section.key=value`` (repeatable).

The file itself can be swapped with ``--config <path>`` or the ``CFR_CONFIG``
/ ``CFR_CONFIG_FILE`` variables.  Override values are read as YAML scalars
and then cast to the type of the default they replace, so ``--set
aggregations.loan_by_state.year=2016`` keeps the year a string.

>>> from core.config import get_config, get_section
>>> cfg = get_config()
>>> get_section(cfg, "aggregations.top_parties.k")
5
"""

from __future__ import annotations

import argparse
import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterable, Mapping, MutableMapping, Sequence

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_FILE = Path(__file__).resolve().with_name("defaults.yaml")
# Present only in a source checkout, absent under site-packages
CHECKOUT_MARKER = "pyproject.toml"

ENV_PREFIX = "CFR__"
CONFIG_FILE_ENV = ("CFR_CONFIG", "CFR_CONFIG_FILE")

# Shorthand variables for the settings changed most often
ENV_SHORTCUTS: dict[str, str] = {
    "CFR_INPUT": "input.path",
    "CFR_OUTPUT_DIR": "output.dir",
    "CFR_TOP_PARTIES": "aggregations.top_parties.k",
    "CFR_LOAN_YEAR": "aggregations.loan_by_state.year",
}

_TRUE_WORDS = {"1", "true", "yes", "on"}
_UNSET = object()

# Result of the last resolution, reused while its inputs do not change
_cache: dict[str, Any] = {"key": None, "config": None, "source": None, "applied": {}}


# ---------------------------------------------------------------------------
# Override sources
# ---------------------------------------------------------------------------

def _split_cli(args: Sequence[str]) -> tuple[str | None, list[str], list[str]]:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config")
    parser.add_argument("--set", action="append", default=[])
    known, rest = parser.parse_known_args(list(args))
    return known.config, known.set, rest


def _config_file(env: Mapping[str, str], cli_path: str | None) -> Path:
    candidates = [cli_path] + [env.get(name) for name in CONFIG_FILE_ENV]
    for candidate in candidates:
        if candidate:
            return Path(candidate).expanduser()
    return DEFAULT_CONFIG_FILE


def _env_overrides(env: Mapping[str, str]) -> list[tuple[str, str]]:
    pairs = [(dotted, env[name]) for name, dotted in ENV_SHORTCUTS.items()
             if env.get(name, "").strip()]
    for name, raw in sorted(env.items()):
        if name.startswith(ENV_PREFIX) and raw.strip():
            pairs.append((name[len(ENV_PREFIX):].replace("__", "."), raw))
    return pairs


def _cli_overrides(items: Iterable[str]) -> list[tuple[str, str]]:
    pairs = []
    for item in items:
        dotted, sep, raw = item.partition("=")
        if not sep or not dotted.strip():
            raise ValueError(f"Invalid --set override '{item}'; expected section.key=value")
        pairs.append((dotted.strip(), raw))
    return pairs


# ---------------------------------------------------------------------------
# Value handling
# ---------------------------------------------------------------------------

def _read_scalar(raw: str) -> Any:
    """Interpret an override string as YAML (``8``, ``false``, ``[CA, TX]``)."""
    if raw.strip() == "":
        return None
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _cast_like(value: Any, default: Any) -> Any:
    """Cast ``value`` to the type of ``default``; leave it alone if that fails."""
    if default is None or value is None:
        return value
    try:
        if isinstance(default, bool):
            if isinstance(value, str):
                return value.strip().lower() in _TRUE_WORDS
            return bool(value)
        if isinstance(default, int):
            return int(float(value)) if isinstance(value, str) else int(value)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, str):
            return str(value)
        if isinstance(default, list):
            return list(value) if isinstance(value, (list, tuple)) else [value]
        if isinstance(default, Mapping):
            return dict(value) if isinstance(value, Mapping) else default
    except (TypeError, ValueError):
        return value
    return value


def _child_key(node: Mapping[str, Any], token: str) -> str:
    wanted = token.lower()
    return next((key for key in node if str(key).lower() == wanted), token)


def _assign(cfg: MutableMapping[str, Any], dotted: str, raw: str) -> tuple[str, Any]:
    tokens = [token for token in dotted.split(".") if token]
    if not tokens:
        raise ValueError(f"Empty config path in override '{dotted}'")

    node = cfg
    path = []
    for token in tokens[:-1]:
        key = _child_key(node, token)
        if not isinstance(node.get(key), MutableMapping):
            node[key] = {}
        node = node[key]
        path.append(key)

    key = _child_key(node, tokens[-1])
    path.append(key)
    value = _cast_like(_read_scalar(raw), node.get(key))
    node[key] = value
    return ".".join(path), value


def _read_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise TypeError(f"Root of config must be a mapping, got {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_config(*, cli_args: Sequence[str] | object = _UNSET,
               env: Mapping[str, str] | None = None,
               reload: bool = False,
               with_cli: bool = False) -> Any:
    """Return the effective configuration as a fresh dict.

    Args:
        cli_args: Arguments scanned for ``--config``/``--set``; defaults to
            ``sys.argv[1:]``.  Pass ``[]`` to ignore the command line.
        env: Environment mapping; defaults to ``os.environ``.
        reload: Re-read the YAML even when nothing changed since the last call.
        with_cli: Return ``(config, unconsumed_args)`` instead of the config.

    Raises:
        FileNotFoundError: If the selected YAML file does not exist
        TypeError: If the YAML root is not a mapping
        ValueError: If a ``--set`` item is malformed
    """
    env = os.environ if env is None else env
    args = sys.argv[1:] if cli_args is _UNSET else cli_args
    cli_path, set_items, rest = _split_cli(args)  # type: ignore[arg-type]

    path = _config_file(env, cli_path).resolve()
    overrides = _env_overrides(env) + _cli_overrides(set_items)
    key = (str(path), tuple((dotted.lower(), raw) for dotted, raw in overrides))

    if reload or _cache["key"] != key:
        cfg = _read_file(path)
        applied: dict[str, Any] = {}
        for dotted, raw in overrides:
            name, value = _assign(cfg, dotted, raw)
            applied[name] = value
        _cache.update(key=key, config=cfg, source=path, applied=applied)

    cfg = deepcopy(_cache["config"])
    return (cfg, rest) if with_cli else cfg


def get_config_source() -> Path | None:
    """Path of the YAML file behind the last :func:`get_config` call."""
    return _cache["source"]


def get_config_overrides() -> dict[str, Any]:
    """Dotted key -> value for every override applied by the last call."""
    return dict(_cache["applied"])


def _base_dir() -> Path:
    if (PROJECT_ROOT / CHECKOUT_MARKER).is_file():
        return PROJECT_ROOT
    return Path.cwd()


def get_project_root(cfg: Mapping[str, Any] | None = None) -> Path:
    """Absolute project root from ``project.root``.

    A relative ``project.root`` hangs off the repository in a source checkout
    and off the current directory for an installed package.
    """
    cfg = get_config() if cfg is None else cfg
    root = Path(get_section(cfg, "project.root", "."))
    return (root if root.is_absolute() else _base_dir() / root).resolve()


def resolve_path(value: str | Path, cfg: Mapping[str, Any] | None = None) -> Path:
    """Resolve a configured path; relative paths hang off the project root."""
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = get_project_root(cfg) / path
    return path.resolve()


def get_section(cfg: Mapping[str, Any], dotted: str, default: Any = None) -> Any:
    """
    Read a nested value by dotted key, e.g. ``aggregations.top_parties.k``.

    Missing keys anywhere along the path return ``default``.
    """
    node: Any = cfg
    for key in dotted.split("."):
        if not isinstance(node, Mapping) or key not in node:
            return default
        node = node[key]
    return node


__all__ = [
    "get_config",
    "get_config_source",
    "get_config_overrides",
    "get_project_root",
    "resolve_path",
    "get_section",
]
