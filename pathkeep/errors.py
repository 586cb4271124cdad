"""Error taxonomy for pathkeep.

Data-shaped inputs (filenames, glob patterns, cache keys) degrade gracefully and
never raise. Root containment is a security boundary and fails loudly.
"""

from __future__ import annotations


class PathKeepError(Exception):
    """Base class for all pathkeep errors."""


class ConfigurationError(PathKeepError, ValueError):
    """Raised when a resolver is constructed or configured with invalid values."""


class BoundaryViolation(PathKeepError, ValueError):
    """Raised when a path would resolve outside the configured root."""


class TemplateResolutionError(PathKeepError, LookupError):
    """Raised when a template or pattern is unknown or returns a non-string."""


__all__ = [
    "PathKeepError",
    "ConfigurationError",
    "BoundaryViolation",
    "TemplateResolutionError",
]
