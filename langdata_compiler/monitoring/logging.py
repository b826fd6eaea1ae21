"""
Build Log - Structured event records for compile sessions.

Every record is one line: a JSON object by default, or a short text line
for terminals. Records carry an event name, a message and flat key/value
fields; ``bind`` returns a logger whose records all carry extra fields,
which is how a build session tags everything with its language.

Events:
    module_compiled    info     module, size, duration_ms
    module_failed      error    module, must_fix, warnings
    raw_data_loaded    debug    name, path
    container_written  info     path, module_count, size
    tool_invoked       debug / error on a non-zero exit
    compile_error      one per collected Error (see log_error_set)

Usage:
    log = configure_logging("debug", json_format=False)
    session = log.bind(language="en-US")
    session.module_compiled("PhoneSet", size=112, duration_ms=3.1)
"""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TextIO

from langdata_compiler.errors import ErrorSet, Severity


class LogLevel(Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        """Matching ``logging`` module level."""
        return getattr(logging, self.name)

    @classmethod
    def parse(cls, value: LogLevel | str) -> LogLevel:
        """Level from a name such as ``"info"`` or ``"WARNING"``.

        Raises:
            ValueError: If the name is not a level.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# ErrorSet severity -> level of its compile_error record.
SEVERITY_LEVELS: dict[Severity, LogLevel] = {
    Severity.MUST_FIX: LogLevel.ERROR,
    Severity.WARNING: LogLevel.WARNING,
    Severity.INFO: LogLevel.DEBUG,
}


@dataclass
class LogRecord:
    """One emitted event.

    ``data`` holds the event fields; they are written at the top level
    of the JSON object next to the fixed keys.
    """

    level: str
    event: str
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    logger_name: str = ""
    thread_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        fixed = {
            "timestamp": self.timestamp,
            "level": self.level,
            "logger_name": self.logger_name,
            "thread_name": self.thread_name,
            "event": self.event,
            "message": self.message,
        }
        return {**fixed, **self.data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def to_text(self) -> str:
        stamp = time.strftime("%H:%M:%S", time.localtime(self.timestamp))
        line = f"{stamp} {self.level.upper():<8} {self.event}"
        if self.message:
            line += f": {self.message}"
        if self.data:
            line += "  " + " ".join(f"{key}={value}" for key, value in self.data.items())
        return line


@dataclass
class _Sink:
    """Output shared by a logger and every logger bound from it."""

    output: TextIO | None
    json_format: bool
    lock: threading.Lock = field(default_factory=threading.Lock)

    def write(self, record: LogRecord) -> None:
        line = record.to_json() if self.json_format else record.to_text()
        with self.lock:
            print(line, file=self.output or sys.stderr)


class StructuredLogger:
    """
    Event logger for build sessions.

    Args:
        name: Logger name written into every record.
        level: Records below this level are dropped.
        output: Stream to write to; stderr when None.
        json_format: JSON lines, or short text lines.
    """

    def __init__(
        self,
        name: str = "langdata_compiler",
        level: LogLevel = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ):
        self.name = name
        self._level = level
        self._sink = _Sink(output, json_format)
        self._context: dict[str, Any] = {}

    @property
    def level(self) -> LogLevel:
        return self._level

    def enabled(self, level: LogLevel) -> bool:
        return level.numeric >= self._level.numeric

    def bind(self, **context: Any) -> StructuredLogger:
        """Logger writing to the same output with ``context`` added to every record."""
        bound = StructuredLogger.__new__(StructuredLogger)
        bound.name = self.name
        bound._level = self._level
        bound._sink = self._sink
        bound._context = {**self._context, **context}
        return bound

    def log(self, level: LogLevel, event: str, message: str = "", **fields: Any) -> None:
        if not self.enabled(level):
            return
        self._sink.write(LogRecord(
            level=level.value,
            event=event,
            message=message,
            data={**self._context, **fields},
            logger_name=self.name,
            thread_name=threading.current_thread().name,
        ))

    def debug(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(LogLevel.DEBUG, event, message, **fields)

    def info(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(LogLevel.INFO, event, message, **fields)

    def warning(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(LogLevel.WARNING, event, message, **fields)

    def error(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(LogLevel.ERROR, event, message, **fields)

    def critical(self, event: str, message: str = "", **fields: Any) -> None:
        self.log(LogLevel.CRITICAL, event, message, **fields)

    # =========================================================================
    # Build events
    # =========================================================================

    def module_compiled(self, module: str, size: int, duration_ms: float = 0, **fields: Any) -> None:
        self.info("module_compiled", f"{module}: {size} bytes in {duration_ms:.1f}ms",
                  module=module, size=size, duration_ms=duration_ms, **fields)

    def module_failed(self, module: str, errors: ErrorSet, **fields: Any) -> None:
        self.error("module_failed", f"{module} was not compiled",
                   module=module,
                   must_fix=errors.count(Severity.MUST_FIX),
                   warnings=errors.count(Severity.WARNING),
                   **fields)

    def raw_data_loaded(self, name: str, path: str = "", **fields: Any) -> None:
        self.debug("raw_data_loaded", name=name, path=path, **fields)

    def container_written(self, path: str, module_count: int, size: int, **fields: Any) -> None:
        self.info("container_written", f"{module_count} modules, {size} bytes",
                  path=path, module_count=module_count, size=size, **fields)

    def tool_invoked(self, tool: str, exit_code: int, **fields: Any) -> None:
        level = LogLevel.DEBUG if exit_code == 0 else LogLevel.ERROR
        self.log(level, "tool_invoked", f"{tool} exit code {exit_code}",
                 tool=tool, exit_code=exit_code, **fields)


def log_error_set(logger: StructuredLogger, errors: ErrorSet, **context: Any) -> None:
    """One ``compile_error`` record per error, at the level of its severity."""
    for error in errors:
        logger.log(SEVERITY_LEVELS[error.severity], "compile_error", error.message,
                   kind=error.kind.name, **context)


_global_logger: StructuredLogger | None = None


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> StructuredLogger:
    """Replace the process-wide logger.

    The standard ``langdata_compiler`` logger used for debug traces is set
    to the same level.

    Raises:
        ValueError: If ``level`` is not a level name.
    """
    global _global_logger

    level = LogLevel.parse(level)
    _global_logger = StructuredLogger(level=level, output=output, json_format=json_format)
    logging.getLogger("langdata_compiler").setLevel(level.numeric)
    return _global_logger


def get_logger() -> StructuredLogger:
    """Process-wide logger; an INFO-level JSON logger until configured."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger()
    return _global_logger
