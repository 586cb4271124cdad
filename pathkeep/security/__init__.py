"""Security utilities for pathkeep: name sanitization and root containment."""

from .boundary import RootBoundaryGuard
from .sanitizer import (
    DEFAULT_OPTIONS,
    SanitizeOptions,
    is_reserved_device_name,
    sanitize_filename,
    sanitize_path,
    split_extension,
)

__all__ = [
    "RootBoundaryGuard",
    "SanitizeOptions",
    "DEFAULT_OPTIONS",
    "sanitize_filename",
    "sanitize_path",
    "split_extension",
    "is_reserved_device_name",
]
