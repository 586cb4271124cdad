"""Glob pattern matching."""

from .glob import GlobPattern, GlobSegment, SegmentKind, compile_glob, match_glob, parse_glob

__all__ = [
    "GlobPattern",
    "GlobSegment",
    "SegmentKind",
    "compile_glob",
    "match_glob",
    "parse_glob",
]
