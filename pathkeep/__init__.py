"""pathkeep: safe, cached path resolution beneath a project root.

Example:
    >>> from pathkeep import PathResolver
    >>> resolver = PathResolver("/srv/app", strict=True, directories={"logs": "var/log"})
    >>> resolver.path_for("logs", "app.log")
    '/srv/app/var/log/app.log'
"""

from __future__ import annotations

from pathkeep.cache import BoundedPathCache, CacheEntry, CacheStats
from pathkeep.config import CacheConfig, Settings, normalize_root, settings
from pathkeep.errors import (
    BoundaryViolation,
    ConfigurationError,
    PathKeepError,
    TemplateResolutionError,
)
from pathkeep.matching import GlobPattern, compile_glob, match_glob
from pathkeep.resolver import PathResolver, ResolverSnapshot, resolver_from_settings
from pathkeep.security import RootBoundaryGuard, SanitizeOptions, sanitize_filename, sanitize_path
from pathkeep.temp import TempResolver, create_temp
from pathkeep.templates import TemplateRegistry

__version__ = "0.1.0"

__all__ = [
    "BoundedPathCache",
    "CacheEntry",
    "CacheStats",
    "CacheConfig",
    "Settings",
    "settings",
    "normalize_root",
    "PathKeepError",
    "ConfigurationError",
    "BoundaryViolation",
    "TemplateResolutionError",
    "GlobPattern",
    "compile_glob",
    "match_glob",
    "PathResolver",
    "ResolverSnapshot",
    "resolver_from_settings",
    "RootBoundaryGuard",
    "SanitizeOptions",
    "sanitize_filename",
    "sanitize_path",
    "TempResolver",
    "create_temp",
    "TemplateRegistry",
]
