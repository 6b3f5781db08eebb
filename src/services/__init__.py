"""
Services package - Supporting services for the stealth wallet.

Contains:
- Logging: console setup and daily log file persistence
"""

from .logging import (
    configure_logging,
    append_log,
    load_recent_logs,
    cleanup_old_logs,
    format_log_for_display,
    PersistentLogHandler,
)

__all__ = [
    "configure_logging",
    "append_log",
    "load_recent_logs",
    "cleanup_old_logs",
    "format_log_for_display",
    "PersistentLogHandler",
]
