"""Scan configuration: defaults, ``.claude/visualizer/config.yml`` and overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

LOCAL_DIR_NAME = ".claude"
VISUALIZER_DIR = Path(LOCAL_DIR_NAME) / "visualizer"
CONFIG_FILE = VISUALIZER_DIR / "config.yml"
DEFAULT_OUTPUT = VISUALIZER_DIR / "graph-data.json"
GLOBAL_DIR_ENV = "VIEWCC_GLOBAL_DIR"


class ConfigError(ValueError):
    """Raised when the scan options cannot produce a scan."""


def default_global_dir() -> Path:
    """``$VIEWCC_GLOBAL_DIR`` if set, else ``~/.claude``."""
    override = os.environ.get(GLOBAL_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / LOCAL_DIR_NAME


@dataclass(frozen=True)
class ScanConfig:
    """Options for a single scan.

    ``output`` is relative to the project root unless absolute.  Set
    ``global_dir`` to ``None`` to use :func:`default_global_dir`.
    ``$VIEWCC_GLOBAL_DIR`` takes precedence over ``global_dir``.
    """

    include_local: bool = True
    include_global: bool = True
    content_heuristics: bool = True
    output: Path = DEFAULT_OUTPUT
    global_dir: Path | None = None
    prompt_limit: int = 500
    max_triggers: int = 5

    def output_path(self, project_root: Path) -> Path:
        return self.output if self.output.is_absolute() else project_root / self.output

    def global_root(self) -> Path:
        if self.global_dir is None or os.environ.get(GLOBAL_DIR_ENV):
            return default_global_dir()
        return self.global_dir

    def with_overrides(self, **overrides: Any) -> ScanConfig:
        """Copy with every non-``None`` override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def validate(self) -> None:
        if not self.include_local and not self.include_global:
            msg = "Nothing to scan: both local and global scopes are excluded"
            raise ConfigError(msg)


_BOOL_KEYS = frozenset({"include_local", "include_global", "content_heuristics"})
_INT_KEYS = frozenset({"prompt_limit", "max_triggers"})
_PATH_KEYS = frozenset({"output", "global_dir"})


def _coerce(key: str, value: Any) -> Any:
    """Return a typed value for *key*, or ``None`` when *value* is unusable."""
    if key in _BOOL_KEYS:
        return value if isinstance(value, bool) else None
    if key in _INT_KEYS:
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        return None
    if key in _PATH_KEYS:
        return Path(value).expanduser() if isinstance(value, str) and value else None
    return None


def load_config(project_root: Path) -> ScanConfig:
    """Load ``.claude/visualizer/config.yml`` from *project_root*.

    Falls back to defaults for a missing file, unreadable YAML, unknown keys
    and wrongly typed values.  A relative ``global_dir`` is taken relative to
    *project_root*, like ``output``.
    """
    config_path = project_root / CONFIG_FILE
    if not config_path.is_file():
        return ScanConfig()

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError):
        logger.warning("Failed to read %s, using defaults", config_path)
        return ScanConfig()

    if not isinstance(data, dict):
        return ScanConfig()

    known = {f.name for f in fields(ScanConfig)}
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        coerced = _coerce(key, value)
        if coerced is None:
            logger.warning("Invalid value for %r in %s, using default", key, config_path)
            continue
        if key == "global_dir" and not coerced.is_absolute():
            coerced = project_root / coerced
        kwargs[key] = coerced

    return ScanConfig(**kwargs)
