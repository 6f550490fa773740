"""
Utils Package for SPELLOTRON.

- logger: session log and logging setup
"""

from .logger import (
    SessionLogger,
    LogLevel,
    LogCategory,
    LogEntry,
    create_session_logger,
    configure_logging,
)

__all__ = [
    "SessionLogger",
    "LogLevel",
    "LogCategory",
    "LogEntry",
    "create_session_logger",
    "configure_logging",
]
