"""Resolvers rooted in a throwaway temporary directory.

Example:
    >>> with resolver.create_temp(fixtures={"config/db.json": "{}"}) as temp:
    ...     temp.files.read_text(temp.path_for("config", "db.json"))
    '{}'
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from pathkeep.config import Settings
from pathkeep.security import RootBoundaryGuard

if TYPE_CHECKING:
    from pathkeep.resolver import PathResolver


class TempResolver:
    """A resolver bound to a fresh temporary root, plus cleanup.

    Attribute access falls through to the wrapped resolver, so a ``TempResolver``
    can be used anywhere a ``PathResolver`` is expected.
    """

    def __init__(self, resolver: "PathResolver") -> None:
        self.resolver = resolver
        self.temp_root = resolver.root
        self._cleaned_up = False

    def __getattr__(self, name: str) -> Any:
        return getattr(self.resolver, name)

    def __repr__(self) -> str:
        return f"TempResolver(temp_root={self.temp_root!r}, cleaned_up={self._cleaned_up})"

    @property
    def is_cleaned_up(self) -> bool:
        return self._cleaned_up

    def cleanup(self) -> None:
        """Remove the temporary root and everything in it. Safe to call repeatedly."""
        if self._cleaned_up:
            return
        shutil.rmtree(self.temp_root, ignore_errors=True)
        self._cleaned_up = True
        self.resolver.logger.info("temp root removed", temp_root=self.temp_root)
        self.resolver.logger.redactor.remove_root(self.temp_root)

    def __enter__(self) -> "TempResolver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


def create_temp(
    resolver: "PathResolver",
    *,
    prefix: Optional[str] = None,
    create_dirs: bool = True,
    fixtures: Optional[Mapping[str, Union[str, bytes]]] = None,
) -> TempResolver:
    """Create a resolver with ``resolver``'s directories and strictness in a new temp root.

    Args:
        resolver: Resolver whose configuration is copied
        prefix: Temp directory name prefix (default: ``PK_TEMP_PREFIX``)
        create_dirs: Create every configured directory inside the temp root
        fixtures: Files to create, keyed by path relative to the temp root
    """
    if prefix is None:
        prefix = Settings().temp_prefix
    temp_root = tempfile.mkdtemp(prefix=prefix)

    try:
        temp = TempResolver(resolver.with_root(temp_root))
        guard = RootBoundaryGuard(temp.temp_root, strict=True)

        if create_dirs:
            for base in resolver.directory_map().values():
                target = os.path.join(temp.temp_root, base)
                guard.validate(target)
                os.makedirs(target, exist_ok=True)

        for relative, content in (fixtures or {}).items():
            target = Path(guard.validate(os.path.join(temp.temp_root, relative)))
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
    except BaseException:
        shutil.rmtree(temp_root, ignore_errors=True)
        raise

    resolver.logger.info("temp root created", temp_root=temp.temp_root)
    return temp


__all__ = ["TempResolver", "create_temp"]
