"""Structured JSON-lines logging with redaction and a level threshold."""

from __future__ import annotations

import json
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO, Union

from .redaction import DataRedactor


class LogLevel(Enum):
    """Standard log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    @classmethod
    def parse(cls, value: Union[str, "LogLevel", None], default: "LogLevel") -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        if not value:
            return default
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default


_LEVEL_RANK = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.WARNING: 30,
    LogLevel.ERROR: 40,
    LogLevel.CRITICAL: 50,
}


class StructuredLogger:
    """Structured logger emitting one JSON object per line."""

    def __init__(
        self,
        component: str,
        instance_id: Optional[str] = None,
        output_file: Optional[Union[str, Path, TextIO]] = None,
        enable_console: bool = False,
        redactor: Optional[DataRedactor] = None,
        min_level: Union[str, LogLevel] = LogLevel.DEBUG,
        max_log_size_mb: Optional[int] = None,
        max_log_files: int = 5,
    ) -> None:
        """Initialize structured logger.

        Args:
            component: Component identifier (e.g., 'resolver', 'cache', 'glob')
            instance_id: Optional id correlating entries from one resolver
            output_file: Optional file path or handle for log output
            enable_console: Whether to also write to stdout (default: False)
            redactor: Optional data redactor for paths and secrets
            min_level: Entries below this level are dropped
            max_log_size_mb: Maximum log file size in MB before rotation (None = no limit)
            max_log_files: Maximum number of rotated log files to keep (default: 5)
        """
        self.component = component
        self.instance_id = instance_id or uuid.uuid4().hex[:8]
        self.start_time = time.time()
        self.redactor = redactor or DataRedactor()
        self.min_level = LogLevel.parse(min_level, LogLevel.DEBUG)

        self.max_log_size_bytes = (max_log_size_mb * 1024 * 1024) if max_log_size_mb else None
        self.max_log_files = max_log_files
        self.log_file_path: Optional[Path] = None

        self.console_enabled = enable_console
        self.log_file: Optional[TextIO] = None

        if output_file:
            if isinstance(output_file, (str, Path)):
                self.log_file_path = Path(output_file)
                self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
                self._open_log_file()
            else:
                self.log_file = output_file

    def enabled_for(self, level: LogLevel) -> bool:
        """Return True if an entry at ``level`` would be written anywhere."""
        if not self.console_enabled and self.log_file is None:
            return False
        return level.rank >= self.min_level.rank

    def _format_log_entry(self, level: LogLevel, message: str, **context: Any) -> Dict[str, Any]:
        safe_context = self.redactor.redact_dict(context)
        now = time.time()
        return {
            "timestamp": now,
            "iso_timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": level.value,
            "component": self.component,
            "instance_id": self.instance_id,
            "uptime": now - self.start_time,
            "message": message,
            **safe_context,
        }

    def _open_log_file(self) -> None:
        if self.log_file_path:
            self.log_file = open(self.log_file_path, "a", encoding="utf-8")

    def _rotate_log_if_needed(self) -> None:
        """Rotate log file if size limit is exceeded."""
        if not self.log_file_path or not self.max_log_size_bytes:
            return

        try:
            if (
                self.log_file_path.exists()
                and self.log_file_path.stat().st_size > self.max_log_size_bytes
            ):
                if self.log_file:
                    self.log_file.close()

                suffix = self.log_file_path.suffix
                for i in range(self.max_log_files - 1, 0, -1):
                    old_file = self.log_file_path.with_suffix(f".{i}{suffix}")
                    new_file = self.log_file_path.with_suffix(f".{i + 1}{suffix}")
                    if old_file.exists():
                        os.replace(old_file, new_file)

                os.replace(self.log_file_path, self.log_file_path.with_suffix(f".1{suffix}"))
                self._open_log_file()
        except OSError:
            # Keep logging to the current file if rotation fails
            if self.log_file is None or self.log_file.closed:
                self._open_log_file()

    def _write_log(self, entry: Dict[str, Any]) -> None:
        json_line = json.dumps(entry, default=str, separators=(",", ":"))

        if self.console_enabled:
            print(json_line, file=sys.stdout, flush=True)

        if self.log_file:
            self._rotate_log_if_needed()
            self.log_file.write(json_line + "\n")
            self.log_file.flush()

    def log(self, level: LogLevel, message: str, **context: Any) -> None:
        if not self.enabled_for(level):
            return
        self._write_log(self._format_log_entry(level, message, **context))

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, **context)

    def error(self, message: str, **context: Any) -> None:
        self.log(LogLevel.ERROR, message, **context)

    def critical(self, message: str, **context: Any) -> None:
        self.log(LogLevel.CRITICAL, message, **context)

    def close(self) -> None:
        """Close log file handle if open."""
        if self.log_file and hasattr(self.log_file, "close"):
            self.log_file.close()
            self.log_file = None


def create_logger(
    component: str,
    instance_id: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
    **kwargs: Any,
) -> StructuredLogger:
    """Factory function to create a structured logger from ``PK_LOG_*`` settings.

    Args:
        component: Component identifier
        instance_id: Optional id for correlation
        log_dir: Optional directory for log files (uses PK_LOG_DIR if not provided)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        Configured StructuredLogger instance
    """
    from pathkeep.config import Settings

    current = Settings()

    if log_dir is None:
        log_dir = current.log_dir or None
    kwargs.setdefault("enable_console", current.log_console)
    kwargs.setdefault("min_level", current.log_level)

    if "max_log_size_mb" not in kwargs and current.log_max_size_mb > 0:
        kwargs["max_log_size_mb"] = current.log_max_size_mb

    output_file = None
    if log_dir:
        output_file = Path(log_dir) / f"{component}_{instance_id or 'default'}.jsonl"

    return StructuredLogger(
        component=component, instance_id=instance_id, output_file=output_file, **kwargs
    )
