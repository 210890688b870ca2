"""Runtime configuration for the V12 command line.

Settings come from, in increasing priority:
    1. Built-in defaults
    2. A YAML config file: the explicit path, else the file named by the
       V12_CONFIG environment variable, else ~/.config/v12/config.yaml
    3. Environment variables V12_DEBUG, V12_TRACE and V12_NO_COLOR
    4. Command line flags (applied by the caller)

Example config.yaml:

    debug: false
    trace: false
    color: true
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

__all__ = [
    "V12_CONFIG",
    "RuntimeConfig",
    "default_config_path",
    "load_config",
]

# Environment variable naming an explicit config file
V12_CONFIG = "V12_CONFIG"

_TRUE_STRINGS = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class RuntimeConfig:
    """Options controlling how the CLI runs a program."""
    debug: bool = False     # engine status messages on stderr
    trace: bool = False     # one stderr line per executed statement
    color: bool = True      # ANSI colors for warn/error output

    def with_overrides(self, **overrides: Optional[bool]) -> "RuntimeConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def default_config_path() -> Path:
    """The per-user config file location."""
    return Path.home() / ".config" / "v12" / "config.yaml"


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in _TRUE_STRINGS


def _read_file(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fp:
        try:
            data = yaml.safe_load(fp) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"cannot parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    known = {f.name for f in fields(RuntimeConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown config option(s) in {path}: {', '.join(unknown)}")
    for key, value in data.items():
        if not isinstance(value, bool):
            raise ValueError(f"config option '{key}' in {path} must be true or false")
    return data


def load_config(path: Optional[Path | str] = None) -> RuntimeConfig:
    """Load the runtime configuration.

    An explicitly given path must exist; the V12_CONFIG and per-user files
    are optional.

    Raises:
        FileNotFoundError: if an explicit path does not exist
        ValueError: if the file is not a mapping of known boolean options
    """
    config = RuntimeConfig()

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"config file not found: {config_path}")
    else:
        env_path = os.environ.get(V12_CONFIG)
        config_path = Path(env_path).expanduser() if env_path else default_config_path()

    if config_path.exists():
        config = replace(config, **_read_file(config_path))

    no_color = _env_flag("V12_NO_COLOR")
    return config.with_overrides(
        debug=_env_flag("V12_DEBUG"),
        trace=_env_flag("V12_TRACE"),
        color=None if no_color is None else not no_color,
    )
