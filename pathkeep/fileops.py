"""Host filesystem operations addressed through a resolver.

Every method accepts an absolute path or one relative to the resolver root.
Queries (``exists``, ``is_file``, ``stat`` ...) answer ``False``/``None`` for a
missing path instead of raising. Reads, writes and removals check the root
boundary first when the resolver is strict.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Optional, Union

from pathkeep.errors import BoundaryViolation

if TYPE_CHECKING:
    from pathkeep.resolver import PathResolver

PathArg = Union[str, PurePath]


class FileOps:
    def __init__(self, resolver: "PathResolver") -> None:
        self._resolver = resolver

    def _target(self, path: PathArg) -> str:
        target = self._resolver.absolute(path)
        if self._resolver.strict:
            self._resolver.validate_boundary(target)
        return target

    def _query_target(self, path: PathArg) -> Optional[str]:
        try:
            return self._resolver.absolute(path)
        except BoundaryViolation:
            return None

    # Queries

    def exists(self, path: PathArg) -> bool:
        target = self._query_target(path)
        return target is not None and os.path.lexists(target)

    def is_file(self, path: PathArg) -> bool:
        target = self._query_target(path)
        return target is not None and os.path.isfile(target)

    def is_dir(self, path: PathArg) -> bool:
        target = self._query_target(path)
        return target is not None and os.path.isdir(target)

    def is_symlink(self, path: PathArg) -> bool:
        return self._resolver.is_symlink(path)

    def stat(self, path: PathArg, follow_symlinks: bool = True) -> Optional[os.stat_result]:
        """Return ``os.stat``/``os.lstat`` of ``path``, or None if it cannot be stat'ed."""
        target = self._query_target(path)
        if target is None:
            return None
        try:
            return os.stat(target, follow_symlinks=follow_symlinks)
        except OSError:
            return None

    # Reads and writes

    def read_bytes(self, path: PathArg) -> bytes:
        return Path(self._target(path)).read_bytes()

    def read_text(self, path: PathArg, encoding: str = "utf-8") -> str:
        return Path(self._target(path)).read_text(encoding=encoding)

    def write(
        self,
        path: PathArg,
        data: Union[str, bytes],
        *,
        encoding: str = "utf-8",
        make_parents: bool = False,
    ) -> str:
        """Write ``data`` to ``path`` and return the absolute path written."""
        target = Path(self._target(path))
        if make_parents:
            target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            target.write_bytes(data)
        else:
            target.write_text(data, encoding=encoding)
        return str(target)

    # Directories

    def mkdir(
        self, path: PathArg, *, parents: bool = False, exist_ok: bool = False, mode: int = 0o777
    ) -> str:
        target = self._target(path)
        Path(target).mkdir(mode=mode, parents=parents, exist_ok=exist_ok)
        return target

    def ensure_dir(self, path: PathArg) -> str:
        """Create ``path`` and any missing parents; an existing directory is fine."""
        return self.mkdir(path, parents=True, exist_ok=True)

    def remove(self, path: PathArg, *, recursive: bool = False, missing_ok: bool = False) -> None:
        """Remove a file, symlink or directory. The root itself is never removed."""
        target = self._target(path)
        if self._is_root(target):
            self._resolver.logger.warning("boundary violation", reason="refused to remove root")
            raise BoundaryViolation("Cannot delete the root directory")

        try:
            if os.path.isdir(target) and not os.path.islink(target):
                if recursive:
                    shutil.rmtree(target)
                else:
                    os.rmdir(target)
            else:
                os.remove(target)
        except FileNotFoundError:
            if not missing_ok:
                raise

    def delete_recursive(self, path: PathArg) -> None:
        self.remove(path, recursive=True, missing_ok=True)

    def _is_root(self, target: str) -> bool:
        root = self._resolver.root
        if os.path.normpath(target) == root:
            return True
        try:
            return os.path.samefile(target, root)
        except OSError:
            return False


__all__ = ["FileOps"]
