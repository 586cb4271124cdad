"""Root containment checks for resolved paths.

Threat model and protections:
- Directory traversal: in strict mode, segments carrying ``..`` (split on both
  ``/`` and ``\\``) are rejected before joining, and the joined result is checked
  again after normalization.
- Absolute path injection: absolute, drive-prefixed and UNC segments are rejected
  in strict mode instead of silently replacing the root during a join.
- Prefix confusion: containment compares path components, so ``/app-evil`` is
  never considered inside ``/app``.
- Symlink escape: ``resolve_symlink`` verifies the real target of a link stays
  under the root (or under the real path of the root).

Validation is best-effort at call time. A link swapped between the check and a
later use is not detected.
"""

from __future__ import annotations

import os
import re
import stat as _stat
from pathlib import PurePath
from typing import Iterable, Optional

from pathkeep.errors import BoundaryViolation, ConfigurationError
from pathkeep.logging import StructuredLogger

_DRIVE_RE = re.compile(r"^[A-Za-z]:[/\\]")
_SPLIT_RE = re.compile(r"[/\\]")


def _normalize(path: str) -> str:
    # Both separator styles count so a backslash cannot smuggle ".." past the check
    return os.path.normpath(path.replace("\\", "/"))


def _is_absolute_segment(segment: str) -> bool:
    return (
        segment.startswith(("/", "\\"))
        or bool(_DRIVE_RE.match(segment))
        or os.path.isabs(segment)
    )


class RootBoundaryGuard:
    """Containment checks relative to a fixed root.

    ``root`` must already be absolute; :func:`pathkeep.config.normalize_root`
    produces a suitable value.
    """

    def __init__(
        self,
        root: str,
        *,
        strict: bool = False,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        if not os.path.isabs(root):
            raise ConfigurationError("boundary root must be an absolute path")
        self.root = os.path.normpath(root)
        self.strict = strict
        self._root_path = PurePath(_normalize(self.root))
        self._logger = logger

    def _violation(self, message: str, **context: object) -> BoundaryViolation:
        if self._logger is not None:
            self._logger.warning("boundary violation", reason=message, **context)
        return BoundaryViolation(message)

    @staticmethod
    def _contains(base: PurePath, candidate: PurePath) -> bool:
        # Use relative_to without resolving to avoid touching the filesystem
        try:
            candidate.relative_to(base)
            return True
        except ValueError:
            return False

    def is_within_root(self, path: str) -> bool:
        """Return True if ``path`` (absolute, or relative to root) stays inside root."""
        path = os.fspath(path)
        if not os.path.isabs(path) and not _is_absolute_segment(path):
            path = os.path.join(self.root, path)
        return self._contains(self._root_path, PurePath(_normalize(path)))

    def validate(self, path: str) -> str:
        """Return the normalized ``path`` or raise :class:`BoundaryViolation`."""
        if not self.is_within_root(path):
            raise self._violation("path resolves outside the root", path=os.fspath(path))
        return os.path.normpath(os.fspath(path))

    def validate_segments(self, segments: Iterable[str]) -> None:
        """Reject traversal components and absolute segments before joining."""
        for segment in segments:
            if ".." in _SPLIT_RE.split(segment):
                raise self._violation("path traversal detected", segment=segment)
            if _is_absolute_segment(segment):
                raise self._violation("absolute path segment not allowed", segment=segment)

    def _within_real_root(self, resolved: str) -> bool:
        if self.is_within_root(resolved):
            return True
        real_root = PurePath(_normalize(os.path.realpath(self.root)))
        return self._contains(real_root, PurePath(_normalize(resolved)))

    def resolve_symlink(self, path: str) -> str:
        """Return the real path of ``path``.

        A path that does not exist is returned unchanged. In strict mode a real
        target outside the root raises :class:`BoundaryViolation`.
        """
        try:
            resolved = os.path.realpath(path, strict=True)
        except (FileNotFoundError, NotADirectoryError):
            return path
        if self.strict and not self._within_real_root(resolved):
            raise self._violation("symlink target outside the root", path=path, target=resolved)
        return resolved

    def target_escapes(self, path: str) -> bool:
        """Return True if the real target of ``path`` lies outside the root."""
        try:
            resolved = os.path.realpath(path, strict=True)
        except OSError:
            return False
        return not self._within_real_root(resolved)

    @staticmethod
    def is_symlink(path: str) -> bool:
        try:
            st = os.lstat(path)
        except (OSError, ValueError):
            return False
        return _stat.S_ISLNK(st.st_mode)


__all__ = ["RootBoundaryGuard"]
