"""pathkeep runtime configuration.

Provides typed settings for resolver defaults, caching and logging. All settings
are backed by environment variables following the PK_* naming convention.

Example:
    >>> from pathkeep.config import settings
    >>> settings.cache_max_size
    1000

Environment Variables:
    PK_ROOT: Default root for the command line tool (default: current directory)
    PK_STRICT: Enable strict boundary checks by default (default: off)
    PK_CACHE_MAX_SIZE: Path cache capacity (default: 1000)
    PK_CACHE_TTL: Path cache entry lifetime, accepts ms/s/m/h suffixes (default: 0, never)
    PK_LOG_LEVEL: Minimum structured log level (default: warning)
    PK_LOG_CONSOLE: Also write structured logs to stdout (default: off)
    PK_LOG_DIR: Directory for JSON-lines log files (default: unset)
    PK_LOG_MAX_SIZE_MB: Rotate log files above this size, 0 disables (default: 0)
    PK_TEMP_PREFIX: Directory name prefix for temporary roots (default: pathkeep-)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Optional, Union
from urllib.parse import urlparse
from urllib.request import url2pathname

from pathkeep.errors import ConfigurationError


def _env(name: str, default: str) -> str:
    """Get environment variable with PK_* prefix validation."""
    if not name.startswith("PK_"):
        raise ValueError(f"Only PK_* env vars are allowed, got: {name}")
    return os.getenv(name, default)


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name, str(default))
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Get environment variable as integer."""
    raw = _env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _env_time_seconds(name: str, default_seconds: float) -> float:
    """Parse time value with unit suffixes (s, ms, m, h) and return seconds."""
    raw = _env(name, str(default_seconds)).strip().lower()
    try:
        if raw.endswith("ms"):
            return float(raw[:-2]) / 1000.0
        if raw.endswith("s"):
            return float(raw[:-1])
        if raw.endswith("m"):
            return float(raw[:-1]) * 60.0
        if raw.endswith("h"):
            return float(raw[:-1]) * 3600.0
        return float(raw)
    except ValueError:
        return default_seconds


@dataclass(frozen=True)
class Settings:
    """Runtime defaults for pathkeep.

    Values are read from the environment each time a ``Settings`` is created, so
    tests can ``monkeypatch.setenv`` and build a fresh instance. The module-level
    ``settings`` reflects the environment at import time.
    """

    strict: bool = field(default_factory=lambda: _env_bool("PK_STRICT", False))
    cache_max_size: int = field(default_factory=lambda: _env_int("PK_CACHE_MAX_SIZE", 1000))
    cache_ttl: float = field(default_factory=lambda: _env_time_seconds("PK_CACHE_TTL", 0.0))
    log_level: str = field(default_factory=lambda: _env("PK_LOG_LEVEL", "warning"))
    log_console: bool = field(default_factory=lambda: _env_bool("PK_LOG_CONSOLE", False))
    log_dir: str = field(default_factory=lambda: _env("PK_LOG_DIR", ""))
    log_max_size_mb: int = field(default_factory=lambda: _env_int("PK_LOG_MAX_SIZE_MB", 0))
    temp_prefix: str = field(default_factory=lambda: _env("PK_TEMP_PREFIX", "pathkeep-"))


# Module-level instance for convenient access
settings = Settings()


@dataclass(frozen=True)
class CacheConfig:
    """Path cache configuration.

    Args:
        enabled: Cache resolved paths (default True)
        max_size: Maximum number of entries, must be positive
        ttl: Entry lifetime in seconds, 0 disables expiry
        cache_templates: Also cache resolutions that expanded ``${...}`` tokens
    """

    enabled: bool = True
    max_size: int = 1000
    ttl: float = 0.0
    cache_templates: bool = True

    @classmethod
    def from_settings(cls, current: Optional[Settings] = None) -> "CacheConfig":
        current = current or Settings()
        return cls(max_size=current.cache_max_size, ttl=current.cache_ttl)

    @classmethod
    def coerce(cls, value: Union[bool, "CacheConfig", None]) -> "CacheConfig":
        """Accept ``True``/``False``/``None`` or a ``CacheConfig``."""
        if value is None or value is True:
            return cls.from_settings()
        if value is False:
            return cls(enabled=False)
        if isinstance(value, CacheConfig):
            return value
        raise ConfigurationError(
            f"cache must be a bool or CacheConfig, got {type(value).__name__}"
        )


def normalize_root(root: Union[str, PurePath]) -> str:
    """Return ``root`` as an absolute, normalized path string.

    Accepts a filesystem path (absolute or relative to the current directory),
    a ``pathlib`` path, or a ``file://`` URL. Any other URL scheme is rejected.
    """
    if isinstance(root, PurePath):
        raw = str(root)
    elif isinstance(root, str):
        raw = root
    else:
        raise ConfigurationError(
            f"root must be a path string, pathlib path or file:// URL, got {type(root).__name__}"
        )

    if not raw:
        raise ConfigurationError("root must not be empty")

    if "://" in raw:
        parsed = urlparse(raw)
        if parsed.scheme != "file":
            raise ConfigurationError(f"unsupported root URL scheme: {parsed.scheme!r}")
        if parsed.netloc and parsed.netloc != "localhost":
            raw = url2pathname(f"//{parsed.netloc}{parsed.path}")
        else:
            raw = url2pathname(parsed.path)

    return os.path.normpath(os.path.abspath(os.path.expanduser(raw)))


from pathkeep.config.paths import resolve_default_root  # noqa: E402

__all__ = [
    "settings",
    "Settings",
    "CacheConfig",
    "normalize_root",
    "resolve_default_root",
]
