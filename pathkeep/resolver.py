"""Path resolution beneath a fixed project root.

``PathResolver`` composes the bounded cache, the template registry and the root
boundary guard:

1. With caching on, the raw segments joined by ``/`` form the cache key; a hit
   is returned without re-validation.
2. Segments containing ``${`` are expanded through the template registry.
3. In strict mode each expanded segment is checked for traversal and absolute
   forms.
4. Segments are joined against the root and normalized.
5. In strict mode the joined result must still be inside the root.
6. The result is cached and returned.

A failure at any step raises and nothing is cached.

Example:
    >>> resolver = PathResolver("/srv/app", directories={"config": "config"}, strict=True)
    >>> resolver.path_for("config", "database.json")
    '/srv/app/config/database.json'
"""

from __future__ import annotations

import ntpath
import os
import posixpath
import sys
from pathlib import Path, PurePath
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from pathkeep.cache import BoundedPathCache, CacheStats
from pathkeep.config import CacheConfig, Settings, normalize_root, resolve_default_root
from pathkeep.errors import BoundaryViolation, ConfigurationError
from pathkeep.fileops import FileOps
from pathkeep.listing import DirectoryLister
from pathkeep.logging import StructuredLogger, create_logger
from pathkeep.matching import compile_glob
from pathkeep.security import RootBoundaryGuard, SanitizeOptions, sanitize_filename, sanitize_path
from pathkeep.templates import PatternFunction, TemplateFunction, TemplateRegistry, has_tokens
from pathkeep.temp import TempResolver, create_temp

RootLike = Union[str, PurePath]


class ResolverSnapshot(BaseModel):
    """Serializable view of a resolver's configuration."""

    root: str = Field(..., description="Absolute root path")
    directories: Dict[str, str] = Field(default_factory=dict, description="Directory table")
    strict: bool = Field(False, description="Strict boundary enforcement")


def _check_directory_keys(directories: Mapping[str, str]) -> Dict[str, str]:
    checked: Dict[str, str] = {}
    for key, base in directories.items():
        if not isinstance(key, str) or not key.isidentifier():
            raise ConfigurationError(f"Invalid directory key {key!r}: must be a valid identifier")
        if key.startswith("__") and key.endswith("__"):
            raise ConfigurationError(f"Invalid directory key {key!r}: dunder names are reserved")
        if not isinstance(base, str):
            raise ConfigurationError(f"Directory {key!r} must map to a path string")
        checked[key] = base
    return checked


class PathResolver:
    """Resolve path segments to absolute paths under ``root``.

    Args:
        root: Absolute or relative path, ``pathlib`` path, or ``file://`` URL
        strict: Reject traversal and any result outside the root
        cache: ``True``/``False`` or a :class:`CacheConfig`
        directories: Mapping of directory key to a base path relative to root
        templates: Initial template functions for ``${name}`` tokens
        patterns: Initial pattern functions
        builtin_patterns: Register date/time patterns (default True)
        logger: Structured logger; defaults to one built from ``PK_LOG_*`` settings
    """

    def __init__(
        self,
        root: RootLike,
        *,
        strict: Optional[bool] = None,
        cache: Union[bool, CacheConfig, None] = True,
        directories: Optional[Mapping[str, str]] = None,
        templates: Optional[Mapping[str, TemplateFunction]] = None,
        patterns: Optional[Mapping[str, PatternFunction]] = None,
        builtin_patterns: bool = True,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._root = normalize_root(root)
        self._strict = Settings().strict if strict is None else bool(strict)
        self._directories = _check_directory_keys(directories or {})

        self._owns_logger = logger is None
        self.logger = logger or create_logger("resolver")
        self.logger.redactor.add_root(self._root)

        self.cache_config = CacheConfig.coerce(cache)
        self._cache: Optional[BoundedPathCache] = None
        if self.cache_config.enabled:
            self._cache = BoundedPathCache(
                self.cache_config.max_size, self.cache_config.ttl, logger=self.logger
            )

        self.guard = RootBoundaryGuard(self._root, strict=self._strict, logger=self.logger)
        self.templates = TemplateRegistry(
            templates, patterns, builtin_patterns=builtin_patterns, logger=self.logger
        )

        self.files = FileOps(self)
        self._lister = DirectoryLister(self)

    def __repr__(self) -> str:
        return f"PathResolver(root={self._root!r}, strict={self._strict})"

    def close(self) -> None:
        """Close the log file opened for this resolver. A logger passed in is left open."""
        if self._owns_logger:
            self.logger.close()

    @property
    def root(self) -> str:
        return self._root

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def platform(self) -> str:
        return "win32" if sys.platform == "win32" else "posix"

    # Resolution

    def resolve(self, *segments: str) -> str:
        """Join ``segments`` against the root, expanding ``${name}`` tokens."""
        key = "/".join(segments)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        templated = any(has_tokens(segment) for segment in segments)
        expanded = [
            self.templates.render(segment) if has_tokens(segment) else segment
            for segment in segments
        ]

        if self._strict:
            self.guard.validate_segments(expanded)

        if expanded:
            result = os.path.normpath(os.path.join(self._root, *expanded))
        else:
            result = self._root

        if self._strict:
            self.guard.validate(result)

        if self._cache is not None and (self.cache_config.cache_templates or not templated):
            self._cache.set(key, result)
        return result

    def _base(self, directory: str) -> str:
        try:
            return self._directories[directory]
        except KeyError:
            raise ConfigurationError(f'Directory "{directory}" not found in configuration') from None

    def path_for(self, directory: str, *segments: str) -> str:
        """Resolve ``segments`` under the base path of a configured directory."""
        return self.resolve(self._base(directory), *segments)

    def directories(self) -> List[str]:
        return list(self._directories)

    def directory_map(self) -> Dict[str, str]:
        return dict(self._directories)

    def absolute(self, path: Union[str, PurePath]) -> str:
        """Return ``path`` unchanged when absolute, otherwise resolve it against the root."""
        path = os.fspath(path)
        if os.path.isabs(path):
            return os.path.normpath(path)
        return self.resolve(path)

    def url_for(self, *segments: str) -> str:
        """Return the ``file://`` URL of the resolved path."""
        return Path(self.resolve(*segments)).as_uri()

    def relative_path(self, path: Union[str, PurePath]) -> str:
        return os.path.relpath(os.fspath(path), self._root)

    def normalize_path(self, path: str) -> str:
        """Collapse ``.``/``..`` and duplicate separators, returning ``/`` separators.

        In strict mode a result that still climbs (``..``) raises
        :class:`BoundaryViolation`.
        """
        normalized = posixpath.normpath(path.replace("\\", "/"))
        if self._strict and ".." in normalized.split("/"):
            self.logger.warning("boundary violation", reason="normalized path climbs", path=path)
            raise BoundaryViolation(
                f'Path traversal detected: normalized path "{normalized}" contains ".."'
            )
        return normalized

    @staticmethod
    def to_posix_path(path: str) -> str:
        return path.replace(ntpath.sep, posixpath.sep)

    @staticmethod
    def to_windows_path(path: str) -> str:
        return path.replace(posixpath.sep, ntpath.sep)

    def to_platform_path(self, path: str, platform: Optional[str] = None) -> str:
        target = platform or self.platform
        if target == "win32":
            return self.to_windows_path(path)
        if target == "posix":
            return self.to_posix_path(path)
        raise ConfigurationError(f"Unknown platform {target!r}: expected 'win32' or 'posix'")

    # Boundary

    def is_within_root(self, path: Union[str, PurePath]) -> bool:
        return self.guard.is_within_root(os.fspath(path))

    def validate_boundary(self, path: Union[str, PurePath]) -> str:
        """Raise :class:`BoundaryViolation` if ``path`` lies outside the root."""
        return self.guard.validate(os.fspath(path))

    def resolve_symlink(self, path: Union[str, PurePath]) -> str:
        return self.guard.resolve_symlink(self.absolute(path))

    def is_symlink(self, path: Union[str, PurePath]) -> bool:
        try:
            target = self.absolute(path)
        except BoundaryViolation:
            return False
        return self.guard.is_symlink(target)

    # Sanitization and matching

    @staticmethod
    def sanitize_filename(name: str, options: Optional[SanitizeOptions] = None) -> str:
        return sanitize_filename(name, options)

    @staticmethod
    def sanitize_path(path: str, options: Optional[SanitizeOptions] = None) -> str:
        return sanitize_path(path, options)

    @staticmethod
    def match_glob(
        pattern: str, candidate: str, *, case_sensitive: bool = True, match_base: bool = False
    ) -> bool:
        return compile_glob(pattern, case_sensitive=case_sensitive, match_base=match_base).test(
            candidate
        )

    # Listing

    def list_files(self, path: Union[str, PurePath] = "", **options: Any) -> List[str]:
        """See :meth:`pathkeep.listing.DirectoryLister.list_files`."""
        return self._lister.list_files(path, **options)

    def glob(self, pattern: str, **options: Any) -> List[str]:
        """See :meth:`pathkeep.listing.DirectoryLister.glob`."""
        return self._lister.glob(pattern, **options)

    def list_dir(self, directory: str, *segments: str, **options: Any) -> List[str]:
        return self.list_files(self.path_for(directory, *segments), **options)

    def glob_dir(self, directory: str, pattern: str, **options: Any) -> List[str]:
        return self.glob(pattern, cwd=self.path_for(directory), **options)

    def exists_in(self, directory: str, *segments: str) -> bool:
        return self.files.exists(self.path_for(directory, *segments))

    # Cache introspection

    def cache_stats(self) -> CacheStats:
        if self._cache is None:
            return CacheStats(
                hits=0,
                misses=0,
                size=0,
                max_size=self.cache_config.max_size,
                hit_rate=0.0,
                evictions=0,
            )
        return self._cache.stats()

    def cache_size(self) -> int:
        return len(self._cache) if self._cache is not None else 0

    def is_cached(self, directory: str, *segments: str) -> bool:
        if self._cache is None:
            return False
        base = self._directories.get(directory)
        if base is None:
            return False
        return self._cache.has("/".join([base, *segments]))

    def clear_cache(self, directory: Optional[str] = None) -> None:
        """Drop cached paths, either all of them or those under one directory key."""
        if self._cache is None:
            return
        if directory is None:
            self._cache.clear()
            return
        base = self._directories.get(directory)
        if base is None:
            return
        prefix = base.rstrip("/") + "/"
        for key in self._cache.keys():
            if key == base or key.startswith(prefix):
                self._cache.delete(key)

    # Composition helpers

    def snapshot(self) -> ResolverSnapshot:
        return ResolverSnapshot(root=self._root, directories=dict(self._directories), strict=self._strict)

    def with_root(self, root: RootLike) -> "PathResolver":
        """Return a resolver with the same configuration rooted at ``root``."""
        return PathResolver(
            root,
            strict=self._strict,
            cache=self.cache_config,
            directories=self._directories,
            logger=self.logger,
        )

    def create_temp(self, **options: Any) -> TempResolver:
        """See :func:`pathkeep.temp.create_temp`."""
        return create_temp(self, **options)


def resolver_from_settings(
    root: Optional[RootLike] = None, **kwargs: Any
) -> PathResolver:
    """Build a resolver from ``PK_*`` settings, using ``PK_ROOT`` when ``root`` is omitted."""
    return PathResolver(root if root is not None else resolve_default_root(), **kwargs)


__all__ = ["PathResolver", "ResolverSnapshot", "resolver_from_settings"]
