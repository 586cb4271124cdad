"""Glob pattern compiler.

Patterns are parsed once into an immutable tuple of typed segments and lowered to
an anchored regular expression on first use. Supported syntax:

- ``*``: any run of characters within one path component
- ``**``: zero or more whole path components (a following ``/`` is consumed)
- ``?``: one character other than ``/``
- ``[abc]`` / ``[a-z]`` / ``[!abc]`` / ``[^abc]``: character class
- ``{a,b,c}``: alternation between literal alternatives
- ``\\x``: literal ``x``

Malformed constructs (unterminated or invalid class, unterminated brace) are read
as literal text, so compiling never raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Pattern, Tuple, Union


class SegmentKind(Enum):
    LITERAL = "literal"
    WILDCARD = "wildcard"
    GLOBSTAR = "globstar"
    RANGE = "range"
    BRACE = "brace"


@dataclass(frozen=True)
class GlobSegment:
    """One parsed piece of a glob pattern.

    ``value`` is the literal text, ``*``/``?`` for wildcards, the class body for
    ranges, and a tuple of alternatives for braces.
    """

    kind: SegmentKind
    value: Union[str, Tuple[str, ...]]
    negated: bool = False

    def to_regex(self) -> str:
        if self.kind is SegmentKind.LITERAL:
            return re.escape(self.value)
        if self.kind is SegmentKind.WILDCARD:
            return "[^/]*" if self.value == "*" else "[^/]"
        if self.kind is SegmentKind.GLOBSTAR:
            return r"(?:[^/]*(?:/|\Z))*"
        if self.kind is SegmentKind.RANGE:
            body = _escape_class_body(self.value)
            return f"[^/{body}]" if self.negated else f"[{body}]"
        alternatives = "|".join(re.escape(alt) for alt in self.value)
        return f"(?:{alternatives})"


_GLOBSTAR = GlobSegment(SegmentKind.GLOBSTAR, "**")
_STAR = GlobSegment(SegmentKind.WILDCARD, "*")
_QUESTION = GlobSegment(SegmentKind.WILDCARD, "?")


def _escape_class_body(body: str) -> str:
    # "-" is left alone so a-z stays a range
    return "".join("\\" + ch if ch in "\\][^" else ch for ch in body)


def _find_closing_brace(pattern: str, start: int) -> int:
    depth = 1
    i = start + 1
    while i < len(pattern) and depth > 0:
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        i += 1
    return i - 1 if depth == 0 else -1


def _parse_range(pattern: str, start: int) -> Tuple[Optional[GlobSegment], int]:
    end = pattern.find("]", start + 1)
    if end == -1:
        return None, start
    body = pattern[start + 1 : end]
    negated = body[:1] in ("!", "^")
    if negated:
        body = body[1:]
    if not body:
        return None, start
    segment = GlobSegment(SegmentKind.RANGE, body, negated)
    try:
        re.compile(segment.to_regex())
    except re.error:
        return None, start
    return segment, end + 1


def parse_glob(pattern: str) -> Tuple[GlobSegment, ...]:
    """Split ``pattern`` into typed segments in a single left-to-right scan."""
    segments: List[GlobSegment] = []
    literal: List[str] = []

    def flush() -> None:
        if literal:
            segments.append(GlobSegment(SegmentKind.LITERAL, "".join(literal)))
            literal.clear()

    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]

        if ch == "*":
            flush()
            if i + 1 < n and pattern[i + 1] == "*":
                i += 2
                while i < n and pattern[i] == "*":
                    i += 1
                if i < n and pattern[i] == "/":
                    i += 1
                segments.append(_GLOBSTAR)
            else:
                segments.append(_STAR)
                i += 1
            continue

        if ch == "?":
            flush()
            segments.append(_QUESTION)
            i += 1
            continue

        if ch == "[":
            segment, next_i = _parse_range(pattern, i)
            if segment is not None:
                flush()
                segments.append(segment)
                i = next_i
                continue

        if ch == "{":
            end = _find_closing_brace(pattern, i)
            if end != -1:
                flush()
                segments.append(
                    GlobSegment(SegmentKind.BRACE, tuple(pattern[i + 1 : end].split(",")))
                )
                i = end + 1
                continue

        if ch == "\\" and i + 1 < n:
            literal.append(pattern[i + 1])
            i += 2
            continue

        literal.append(ch)
        i += 1

    flush()
    return tuple(segments)


@dataclass
class GlobPattern:
    """A compiled glob pattern.

    Example:
        >>> compile_glob("**/*.ts").test("src/utils/helper.ts")
        True
        >>> compile_glob("*.{js,ts}").test("file.json")
        False
    """

    source: str
    segments: Tuple[GlobSegment, ...]
    case_sensitive: bool = True
    match_base: bool = False
    _regex: Optional[Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    @property
    def regex(self) -> Pattern[str]:
        if self._regex is None:
            body = "".join(segment.to_regex() for segment in self.segments)
            flags = 0 if self.case_sensitive else re.IGNORECASE
            self._regex = re.compile(f"^{body}\\Z", flags)
        return self._regex

    @property
    def has_magic(self) -> bool:
        return any(segment.kind is not SegmentKind.LITERAL for segment in self.segments)

    def test(self, candidate: str) -> bool:
        """Return True if ``candidate`` matches. Backslashes count as separators."""
        normalized = str(candidate).replace("\\", "/")
        if self.match_base:
            normalized = normalized.rsplit("/", 1)[-1]
        return self.regex.match(normalized) is not None


def compile_glob(
    pattern: str, *, case_sensitive: bool = True, match_base: bool = False
) -> GlobPattern:
    return GlobPattern(
        source=pattern,
        segments=parse_glob(pattern),
        case_sensitive=case_sensitive,
        match_base=match_base,
    )


def match_glob(
    pattern: str, candidate: str, *, case_sensitive: bool = True, match_base: bool = False
) -> bool:
    """One-shot convenience for ``compile_glob(pattern, ...).test(candidate)``."""
    return compile_glob(pattern, case_sensitive=case_sensitive, match_base=match_base).test(
        candidate
    )


__all__ = [
    "SegmentKind",
    "GlobSegment",
    "GlobPattern",
    "parse_glob",
    "compile_glob",
    "match_glob",
]
