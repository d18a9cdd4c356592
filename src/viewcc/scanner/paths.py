"""Filesystem helpers shared by the scanners."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from viewcc.scanner.models import Scope

logger = logging.getLogger(__name__)

# Display prefix for definitions found in the user's global tree.
GLOBAL_DISPLAY_ROOT = "~/.claude"


def resolve_symlink(path: Path) -> Path:
    """Return the real target of *path* if it is a symlink, else *path*.

    Broken links and permission errors fall back to the original path.
    """
    try:
        if path.is_symlink():
            return Path(os.path.realpath(path, strict=True))
    except OSError as exc:
        logger.debug("Could not resolve symlink %s: %s", path, exc)
    return path


def display_path(
    path: Path, *, scope: Scope, base: Path, section: str, relative: str
) -> str:
    """Format the ``filePath`` shown for a definition.

    Global definitions always render under ``~/.claude/<section>/``; local
    ones are relative to *base* (the project root).
    """
    if scope == "global":
        return f"{GLOBAL_DISPLAY_ROOT}/{section}/{relative}"
    return os.path.relpath(path, base)


def global_relative(file_path: str) -> str | None:
    """Strip the ``~/.claude/`` display prefix; ``None`` if it is absent."""
    prefix = GLOBAL_DISPLAY_ROOT + "/"
    if file_path.startswith(prefix):
        return file_path[len(prefix):]
    return None
