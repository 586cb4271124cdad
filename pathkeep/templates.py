"""Template and pattern registries for ``${name}`` path tokens.

Templates are looked up first, then patterns. A template receives the variable
of the same name when one is supplied to :meth:`TemplateRegistry.render`; a
pattern used from a token is called without arguments.
"""

from __future__ import annotations

import re
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from pathkeep.errors import ConfigurationError, TemplateResolutionError
from pathkeep.logging import StructuredLogger

TemplateFunction = Callable[..., str]
PatternFunction = Callable[..., str]

_TOKEN_RE = re.compile(r"\$\{([^}]+)\}")


def _date() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def _time() -> str:
    return datetime.now().strftime("%H-%M-%S")


def _datetime() -> str:
    return datetime.now().strftime("%Y-%m-%d-%H-%M-%S")


def _timestamp() -> str:
    return str(int(time.time() * 1000))


BUILTIN_PATTERNS: Dict[str, PatternFunction] = {
    "date": _date,
    "time": _time,
    "datetime": _datetime,
    "timestamp": _timestamp,
    "year": lambda: datetime.now().strftime("%Y"),
    "month": lambda: datetime.now().strftime("%m"),
    "day": lambda: datetime.now().strftime("%d"),
}


def _check_name(kind: str, name: str) -> None:
    if not isinstance(name, str) or not name.isidentifier():
        raise ConfigurationError(f"Invalid {kind} name {name!r}: must be a valid identifier")


class TemplateRegistry:
    """Per-resolver registry of template and pattern functions."""

    def __init__(
        self,
        templates: Optional[Mapping[str, TemplateFunction]] = None,
        patterns: Optional[Mapping[str, PatternFunction]] = None,
        *,
        builtin_patterns: bool = True,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self._templates: Dict[str, TemplateFunction] = {}
        self._patterns: Dict[str, PatternFunction] = {}
        self._logger = logger
        if builtin_patterns:
            self._patterns.update(BUILTIN_PATTERNS)
        for name, fn in (templates or {}).items():
            self.register_template(name, fn)
        for name, fn in (patterns or {}).items():
            self.register_pattern(name, fn)

    def _fail(self, message: str, **context: Any) -> TemplateResolutionError:
        if self._logger is not None:
            self._logger.warning("template resolution failed", reason=message, **context)
        return TemplateResolutionError(message)

    # Templates

    def register_template(self, name: str, fn: TemplateFunction) -> None:
        _check_name("template", name)
        self._templates[name] = fn

    def unregister_template(self, name: str) -> bool:
        return self._templates.pop(name, None) is not None

    def template_names(self) -> List[str]:
        return list(self._templates)

    def render(self, template: str, variables: Optional[Mapping[str, Any]] = None) -> str:
        """Replace every ``${name}`` token in ``template``.

        Raises:
            TemplateResolutionError: unknown name or a function returning a non-string
        """
        variables = variables or {}

        def substitute(match: "re.Match[str]") -> str:
            name = match.group(1).strip()
            fn = self._templates.get(name)
            if fn is not None:
                result = fn(variables[name]) if name in variables else fn()
            elif name in self._patterns:
                result = self._patterns[name]()
            else:
                raise self._fail(f'Template "{name}" not found', template=template)
            if not isinstance(result, str):
                raise self._fail(f'Template "{name}" returned non-string value', template=template)
            return result

        return _TOKEN_RE.sub(substitute, template)

    # Patterns

    def register_pattern(self, name: str, fn: PatternFunction) -> None:
        _check_name("pattern", name)
        self._patterns[name] = fn

    def unregister_pattern(self, name: str) -> bool:
        return self._patterns.pop(name, None) is not None

    def pattern_names(self) -> List[str]:
        return list(self._patterns)

    def has_pattern(self, name: str) -> bool:
        return name in self._patterns

    def pattern(self, name: str, *args: Any) -> str:
        fn = self._patterns.get(name)
        if fn is None:
            raise self._fail(f'Pattern "{name}" not found')
        result = fn(*args)
        if not isinstance(result, str):
            raise self._fail(f'Pattern "{name}" returned non-string value')
        return result


def has_tokens(segment: str) -> bool:
    return "${" in segment


__all__ = [
    "TemplateFunction",
    "PatternFunction",
    "BUILTIN_PATTERNS",
    "TemplateRegistry",
    "has_tokens",
]
