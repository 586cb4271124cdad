"""Pure filename and path sanitization for pathkeep.

This module turns arbitrary user-supplied names into strings that are safe to use
as a single path segment on both POSIX and Windows filesystems. No filesystem
I/O is performed by any function in this module, and no function raises: every
input maps to a usable, non-empty result.

Key functions:
- sanitize_filename: Sanitize a single filename component
- sanitize_path: Sanitize each segment of a multi-segment path
- split_extension: Split a filename into name portion and final extension
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional, Tuple

FALLBACK_NAME = "unnamed"

# Zero-width joiners/spaces, bidi embeddings and isolates, word joiner, BOM
_ZERO_WIDTH_RE = re.compile(r"[\u200B-\u200F\u202A-\u202E\u2060-\u2064\u2066-\u2069\uFEFF]")
_CONTROL_RE = re.compile(r"[\x00-\x1F\x7F]")
_UNSAFE_RE = re.compile(r'[<>:"|?*\\/\x00]')
_EDGE_DOTS_SPACES_RE = re.compile(r"^[.\s]+|[.\s]+$")
_SEPARATOR_RE = re.compile(r"[/\\]")

_RESERVED_DEVICE_NAMES = frozenset(
    {
        "CON",
        "PRN",
        "AUX",
        "NUL",
        *(f"COM{i}" for i in range(1, 10)),
        *(f"LPT{i}" for i in range(1, 10)),
    }
)


@dataclass(frozen=True)
class SanitizeOptions:
    """Options controlling :func:`sanitize_filename`.

    Args:
        replacement: String substituted for unsafe characters (default ``_``)
        max_length: Maximum length of the result (default 255)
        preserve_extension: Keep the final extension when truncating (default True)
        allow_dots: Keep dots in the name portion (default True)
        allow_spaces: Keep spaces (default True)
        remove_zero_width: Strip zero-width and bidi-control code points (default True)
        remove_control_chars: Strip C0 controls and DEL (default True)
        normalize_unicode: Apply NFC normalization first (default True)
    """

    replacement: str = "_"
    max_length: int = 255
    preserve_extension: bool = True
    allow_dots: bool = True
    allow_spaces: bool = True
    remove_zero_width: bool = True
    remove_control_chars: bool = True
    normalize_unicode: bool = True


DEFAULT_OPTIONS = SanitizeOptions()


def split_extension(filename: str) -> Tuple[str, str]:
    """Split ``filename`` into ``(name, ext)`` at the final dot.

    A leading dot is not an extension marker, so ``.gitignore`` has no extension.
    """
    idx = filename.rfind(".")
    if idx <= 0:
        return filename, ""
    return filename[:idx], filename[idx:]


def is_reserved_device_name(filename: str) -> bool:
    """Return True if the name portion of ``filename`` is a Windows device name."""
    name, _ = split_extension(filename)
    return name.upper() in _RESERVED_DEVICE_NAMES


def _clean(name: str, options: SanitizeOptions, replacement: str) -> str:
    cleaned = name

    # Step 1: NFC normalization
    if options.normalize_unicode:
        cleaned = unicodedata.normalize("NFC", cleaned)

    # Step 2: Invisible characters
    if options.remove_zero_width:
        cleaned = _ZERO_WIDTH_RE.sub("", cleaned)

    # Step 3: C0 controls + DEL
    if options.remove_control_chars:
        cleaned = _CONTROL_RE.sub("", cleaned)

    # Step 4: Separators and Windows-forbidden characters
    cleaned = _UNSAFE_RE.sub(replacement, cleaned)

    # Step 5: Spaces
    if not options.allow_spaces:
        cleaned = cleaned.replace(" ", replacement)

    # Step 6: Dots in the name portion only
    if not options.allow_dots:
        stem, ext = split_extension(cleaned)
        cleaned = stem.replace(".", replacement) + ext

    # Step 7: Leading/trailing dots and whitespace
    return _EDGE_DOTS_SPACES_RE.sub("", cleaned)


def _truncate(filename: str, max_length: int, preserve_extension: bool) -> str:
    if len(filename) <= max_length:
        return filename
    stem, ext = split_extension(filename)
    if preserve_extension and ext:
        max_stem = max_length - len(ext)
        if max_stem > 0:
            return stem[:max_stem] + ext
    return filename[:max_length]


def _mark_within(filename: str, max_length: int, marker: str) -> str:
    stem, ext = split_extension(filename)
    keep = max_length - len(marker) - len(ext)
    if keep < 1:
        ext = ""
        keep = max(0, max_length - len(marker))
    return (stem[:keep] + marker + ext)[:max_length]


def sanitize_filename(name: str, options: Optional[SanitizeOptions] = None) -> str:
    """Return a version of ``name`` that is safe as a single path segment.

    Total function: never raises, never returns an empty string. Non-string input
    is converted with ``str()``.

    Examples:
        >>> sanitize_filename("CON.txt")
        'CON_.txt'
        >>> sanitize_filename("...x...")
        'x'
        >>> sanitize_filename("")
        'unnamed'
    """
    opts = options or DEFAULT_OPTIONS
    if not isinstance(name, str):
        name = str(name)

    # A replacement that itself contains unsafe characters would defeat step 4
    replacement = _CONTROL_RE.sub("", _UNSAFE_RE.sub("", opts.replacement))
    max_length = max(1, opts.max_length)

    sanitized = _clean(name, opts, replacement) or FALLBACK_NAME

    # Step 8: Reserved device names
    if is_reserved_device_name(sanitized):
        stem, ext = split_extension(sanitized)
        sanitized = stem + (replacement or "_") + ext

    # Step 9: Length. A cut can leave a trailing dot or spell a device name again
    truncated = _truncate(sanitized, max_length, opts.preserve_extension)
    if truncated == sanitized:
        return truncated
    truncated = _EDGE_DOTS_SPACES_RE.sub("", truncated) or FALLBACK_NAME[:max_length]
    if is_reserved_device_name(truncated):
        truncated = _mark_within(truncated, max_length, "_")
    return truncated


def sanitize_path(path: str, options: Optional[SanitizeOptions] = None) -> str:
    """Sanitize every segment of ``path`` and rejoin with ``/``.

    Traversal segments (``..``) are dropped rather than resolved, so
    ``uploads/../../etc/passwd`` becomes ``uploads/etc/passwd``. Empty and ``.``
    segments are dropped too, which collapses repeated separators.
    """
    if not isinstance(path, str):
        path = str(path)
    segments = [seg for seg in _SEPARATOR_RE.split(path) if seg and seg not in (".", "..")]
    return "/".join(sanitize_filename(seg, options) for seg in segments)


__all__ = [
    "FALLBACK_NAME",
    "SanitizeOptions",
    "DEFAULT_OPTIONS",
    "split_extension",
    "is_reserved_device_name",
    "sanitize_filename",
    "sanitize_path",
]
