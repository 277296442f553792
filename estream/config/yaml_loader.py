"""Loader for the packaged defaults.yaml.

Reads the YAML mirror of estream.config.defaults once and serves values
by dotted path or by section. Nothing here imports the other config
modules, so the dataclasses are free to depend on it.

Usage:
    from estream.config.yaml_loader import get_default, get_section
    cfl_max = get_default('solver.cfl_max')
    solver_defaults = get_section('solver')
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from estream.exceptions import ConfigurationError

DEFAULTS_ENV_VAR = "ESTREAM_DEFAULTS_PATH"
_PACKAGED_DEFAULTS = Path(__file__).with_name("defaults.yaml")


def defaults_path() -> Path:
    """Location of the active defaults file.

    ESTREAM_DEFAULTS_PATH wins when it names an existing file, otherwise
    the copy installed beside this module is used.

    Raises:
        FileNotFoundError: If neither file exists
    """
    override = os.getenv(DEFAULTS_ENV_VAR)
    if override and Path(override).is_file():
        return Path(override)

    if not _PACKAGED_DEFAULTS.is_file():
        raise FileNotFoundError(
            f"{_PACKAGED_DEFAULTS} is missing; set {DEFAULTS_ENV_VAR} to a defaults file"
        )
    return _PACKAGED_DEFAULTS


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Read a YAML mapping from disk; an empty document gives {}.

    Raises:
        ConfigurationError: If the document is not a mapping
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{path} must hold a YAML mapping, got {type(data).__name__}"
        )
    return data


_defaults_cache: dict[str, Any] | None = None


def _cached_defaults() -> dict[str, Any]:
    global _defaults_cache
    if _defaults_cache is None:
        _defaults_cache = load_yaml(defaults_path())
    return _defaults_cache


def get_defaults() -> dict[str, Any]:
    """Deep copy of the whole defaults document.

    Example:
        >>> get_defaults()['solver']['linear_solver']
        'splu'
    """
    return copy.deepcopy(_cached_defaults())


def get_section(name: str) -> dict[str, Any]:
    """One top-level section as a new dict; a missing section gives {}."""
    return dict(_cached_defaults().get(name) or {})


def get_default(key_path: str, default: Any = None) -> Any:
    """Value at a dotted path such as 'solver.cfl_max'.

    Returns ``default`` when any key along the path is missing or null.

    Example:
        >>> get_default('solver.max_refinements')
        22
        >>> get_default('solver.cfl_limit', 64.0)
        64.0
    """
    node: Any = _cached_defaults()
    for key in key_path.split("."):
        if not isinstance(node, dict) or node.get(key) is None:
            return default
        node = node[key]
    return node


def reload_defaults() -> None:
    """Drop the cached document and read the defaults file again."""
    global _defaults_cache
    _defaults_cache = None
    _cached_defaults()
