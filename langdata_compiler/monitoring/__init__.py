"""
Monitoring for the language data compiler.

Components:
    StructuredLogger - JSON or human-readable event logging
    log_error_set    - One log record per collected error

Example:
    from langdata_compiler.monitoring import configure_logging, log_error_set

    logger = configure_logging("info", json_format=False)
    log_error_set(logger, result.errors, module="PhoneSet")
"""

from langdata_compiler.monitoring.logging import (
    LogLevel,
    LogRecord,
    StructuredLogger,
    configure_logging,
    get_logger,
    log_error_set,
)

__all__ = [
    "LogLevel",
    "LogRecord",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "log_error_set",
]
