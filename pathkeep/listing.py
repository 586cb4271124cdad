"""Directory enumeration and glob search under a resolver root."""

from __future__ import annotations

import os
import sys
from pathlib import PurePath
from typing import (
    TYPE_CHECKING,
    Callable,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

from pathkeep.matching import GlobPattern, compile_glob

if TYPE_CHECKING:
    from pathkeep.resolver import PathResolver

PathFilter = Callable[[str], bool]


class DirectoryLister:
    """Walks directories on behalf of a :class:`~pathkeep.resolver.PathResolver`."""

    def __init__(self, resolver: "PathResolver") -> None:
        self._resolver = resolver

    def _base_dir(self, path: Union[str, PurePath]) -> str:
        base = self._resolver.absolute(path) if os.fspath(path) else self._resolver.root
        if self._resolver.strict:
            self._resolver.validate_boundary(base)
        return base

    def _walk(
        self,
        base: str,
        *,
        recursive: bool,
        follow_symlinks: bool,
        max_depth: Optional[int],
    ) -> Iterator[Tuple[str, bool]]:
        """Yield ``(path, is_dir)`` for entries under ``base``."""
        guard = self._resolver.guard
        strict = self._resolver.strict
        visited: Set[str] = {os.path.realpath(base)}

        def visit(current: str, depth: int, top: bool) -> Iterator[Tuple[str, bool]]:
            try:
                with os.scandir(current) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except (FileNotFoundError, NotADirectoryError, PermissionError):
                if top:
                    raise
                return

            for entry in entries:
                if strict and not guard.is_within_root(entry.path):
                    continue
                is_link = entry.is_symlink()
                if is_link and strict and guard.target_escapes(entry.path):
                    continue
                try:
                    is_dir = entry.is_dir(follow_symlinks=follow_symlinks)
                except OSError:
                    is_dir = False

                yield entry.path, is_dir

                if not (is_dir and recursive):
                    continue
                if max_depth is not None and depth + 1 > max_depth:
                    continue
                real = os.path.realpath(entry.path)
                if real in visited:
                    continue
                visited.add(real)
                yield from visit(entry.path, depth + 1, False)

        yield from visit(base, 0, True)

    def list_files(
        self,
        path: Union[str, PurePath] = "",
        *,
        recursive: bool = False,
        absolute: bool = True,
        files_only: bool = True,
        follow_symlinks: bool = True,
        max_depth: Optional[int] = None,
        filter: Optional[PathFilter] = None,
    ) -> List[str]:
        """List entries under ``path`` (absolute, or relative to root).

        Args:
            recursive: Descend into subdirectories
            absolute: Return absolute paths, otherwise paths relative to root
            files_only: Omit directories from the result
            follow_symlinks: Treat links to directories as directories
            max_depth: Deepest subdirectory level to descend into (None = unlimited)
            filter: Predicate applied to each result path

        Returns:
            Sorted list of paths
        """
        base = self._base_dir(path)
        results: List[str] = []
        for entry_path, is_dir in self._walk(
            base, recursive=recursive, follow_symlinks=follow_symlinks, max_depth=max_depth
        ):
            if files_only and is_dir:
                continue
            result = entry_path if absolute else self._resolver.relative_path(entry_path)
            if filter is None or filter(result):
                results.append(result)
        return sorted(results)

    def glob(
        self,
        pattern: str,
        *,
        cwd: Union[str, PurePath, None] = None,
        absolute: bool = True,
        files_only: bool = True,
        match_base: bool = False,
        ignore: Union[str, Sequence[str], None] = None,
        case_sensitive: Optional[bool] = None,
        follow_symlinks: bool = False,
        max_depth: Optional[int] = None,
        dot: bool = False,
    ) -> List[str]:
        """Find entries under ``cwd`` (default: root) whose relative path matches ``pattern``.

        Relative paths are matched with ``/`` separators. Hidden entries (any
        component starting with ``.``) are skipped unless ``dot`` is set. The walk
        descends into subdirectories when the pattern contains ``**`` or ``/``, or
        when ``match_base`` is set. Results are absolute by default, otherwise
        relative to ``cwd`` with ``/`` separators.
        """
        if case_sensitive is None:
            case_sensitive = sys.platform != "win32"

        base = self._base_dir(cwd if cwd is not None else "")
        matcher = compile_glob(pattern, case_sensitive=case_sensitive, match_base=match_base)
        ignore_matchers = _compile_ignores(ignore, case_sensitive)
        recursive = match_base or "**" in pattern or "/" in pattern

        self._resolver.logger.debug(
            "glob search", pattern=pattern, cwd=base, recursive=recursive
        )

        results: List[str] = []
        for entry_path, is_dir in self._walk(
            base, recursive=recursive, follow_symlinks=follow_symlinks, max_depth=max_depth
        ):
            if files_only and is_dir:
                continue
            relative = os.path.relpath(entry_path, base).replace(os.sep, "/")
            if not dot and any(part.startswith(".") for part in relative.split("/")):
                continue
            if not matcher.test(relative):
                continue
            if any(m.test(relative) for m in ignore_matchers):
                continue
            results.append(entry_path if absolute else relative)
        return sorted(results)


def _compile_ignores(
    ignore: Union[str, Iterable[str], None], case_sensitive: bool
) -> List[GlobPattern]:
    if not ignore:
        return []
    patterns = [ignore] if isinstance(ignore, str) else list(ignore)
    return [compile_glob(p, case_sensitive=case_sensitive) for p in patterns if p]


__all__ = ["DirectoryLister"]
