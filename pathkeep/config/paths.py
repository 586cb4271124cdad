"""Default root location for the command line tool."""

from __future__ import annotations

import os
from pathlib import Path


def resolve_default_root() -> Path:
    """Return the configured default root as an absolute path.

    Prefers `PK_ROOT` and falls back to the current working directory. The
    returned path expands `~` for user convenience and is made absolute without
    following symlinks, so a symlinked project root keeps its spelling.
    """
    configured = os.getenv("PK_ROOT") or os.getcwd()
    return Path(os.path.abspath(Path(configured).expanduser()))


__all__ = ["resolve_default_root"]
