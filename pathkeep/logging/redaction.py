"""Path and secret redaction for structured logging."""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePath
from typing import Any, Dict, Iterable, List, Optional, Pattern, Union


class DataRedactor:
    """Hide host-specific path prefixes and secrets from log data.

    Paths under a registered root are rendered relative to it (``<root>/a/b``),
    home directories collapse to ``~``, and credential-looking values are
    replaced with ``[REDACTED]``.
    """

    def __init__(
        self,
        roots: Optional[Iterable[Union[str, Path]]] = None,
        custom_patterns: Optional[List[Pattern[str]]] = None,
    ) -> None:
        self.roots: List[str] = []
        for root in roots or ():
            self.add_root(root)

        self.patterns: List[Pattern[str]] = [
            re.compile(
                r"(token|key|secret|password|api_key|credential)[\"']?\s*[=:]\s*[\"']?[A-Za-z0-9_-]{8,}[\"']?",
                re.IGNORECASE,
            ),
        ]
        if custom_patterns:
            self.patterns.extend(custom_patterns)

        self._home_patterns = [
            re.compile(r"/home/[^/\s]+"),
            re.compile(r"/Users/[^/\s]+"),
            re.compile(r"[A-Za-z]:\\Users\\[^\\\s]+"),
        ]

        self.sensitive_fields = {
            "password",
            "token",
            "secret",
            "key",
            "auth",
            "credential",
            "api_key",
            "access_token",
        }

    def add_root(self, root: Union[str, Path]) -> None:
        """Register a root whose paths are logged relative to it."""
        normalized = os.path.normpath(str(root))
        if normalized not in self.roots:
            self.roots.append(normalized)
            # Longest first so nested roots win
            self.roots.sort(key=len, reverse=True)

    def remove_root(self, root: Union[str, Path]) -> None:
        normalized = os.path.normpath(str(root))
        if normalized in self.roots:
            self.roots.remove(normalized)

    def redact_string(self, text: str) -> str:
        result = text
        for root in self.roots:
            if result == root:
                return "<root>"
            if result.startswith(root.rstrip(os.sep) + os.sep):
                result = "<root>/" + result[len(root.rstrip(os.sep)) + 1 :].replace(os.sep, "/")
                break
        for pattern in self._home_patterns:
            result = pattern.sub("~", result)
        for pattern in self.patterns:
            result = pattern.sub("[REDACTED]", result)
        return result

    def redact_path(self, path: Union[str, PurePath]) -> str:
        return self.redact_string(str(path))

    def redact_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively redact sensitive data from a dictionary."""
        result: Dict[str, Any] = {}

        for key, value in data.items():
            if key.lower() in self.sensitive_fields:
                result[key] = "[REDACTED]"
                continue

            if isinstance(value, dict):
                result[key] = self.redact_dict(value)
            elif isinstance(value, (list, tuple)):
                result[key] = [
                    self.redact_dict(item)
                    if isinstance(item, dict)
                    else self.redact_string(item)
                    if isinstance(item, str)
                    else item
                    for item in value
                ]
            elif isinstance(value, str):
                result[key] = self.redact_string(value)
            elif isinstance(value, PurePath):
                result[key] = self.redact_path(value)
            else:
                result[key] = value

        return result

    def add_pattern(self, pattern: Union[str, Pattern[str]]) -> None:
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        self.patterns.append(pattern)

    def add_sensitive_field(self, field_name: str) -> None:
        self.sensitive_fields.add(field_name.lower())
