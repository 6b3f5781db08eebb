"""
Logging - Wallet logging configuration and disk persistence.

Provides:
- Root logger setup with console output
- Optional persistence of log records to daily files: stealth-YYYY-MM-DD.log
- Retention cleanup of old log files

Log messages carry indices and public addresses only, never seeds or
private keys, so the files need no encryption.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from utils import get_logs_dir

LOG_FILE_PREFIX = "stealth-"
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class PersistentLogHandler(logging.Handler):
    """Writes formatted records to today's log file via append_log()."""

    def __init__(self, retention_days: int, level: int = logging.NOTSET):
        super().__init__(level)
        self.retention_days = retention_days
        self.setFormatter(logging.Formatter('[%(asctime)s] %(name)s: %(message)s', datefmt='%H:%M:%S'))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            append_log(self.format(record), self.retention_days)
        except Exception:
            self.handleError(record)


def configure_logging(level: int = logging.INFO, retention_days: int = 0) -> None:
    """
    Configure Python logging for the wallet.

    Sets up a root logger with console output and, when retention_days is
    positive, a handler persisting records to the daily log file.
    Calling it again is a no-op.

    Args:
        level: Logging level (default: INFO)
        retention_days: Days of log files to keep (0 = don't write to disk)
    """
    root_logger = logging.getLogger()

    if root_logger.handlers:
        return

    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    if retention_days > 0:
        root_logger.addHandler(PersistentLogHandler(retention_days, level))


def get_log_file_path(date: Optional[datetime] = None) -> Path:
    """Log file path for a date (defaults to today)."""
    if date is None:
        date = datetime.now()
    return get_logs_dir() / f"{LOG_FILE_PREFIX}{date.strftime('%Y-%m-%d')}.log"


def append_log(message: str, retention_days: int = 0) -> None:
    """
    Append a line to today's log file.

    Args:
        message: The log line, "[HH:MM:SS] ..." lines get the date added
        retention_days: If 0, nothing is written
    """
    if retention_days <= 0:
        return

    if message.startswith('[') and len(message) > 10 and message[9] == ']':
        message = f"[{datetime.now().strftime('%Y-%m-%d')} {message[1:]}"

    try:
        with open(get_log_file_path(), 'a', encoding='utf-8') as f:
            f.write(message + '\n')
    except OSError:
        # A full disk must not break address issuance
        pass


def load_recent_logs(max_lines: int = 500) -> list[str]:
    """
    Load up to max_lines recent log lines, oldest first.

    Reads today's file and, if that is not enough, yesterday's.
    """
    if max_lines <= 0:
        return []

    lines = []
    today_path = get_log_file_path()
    if today_path.exists():
        lines = _read_last_n_lines(today_path, max_lines)

    if len(lines) < max_lines:
        yesterday_path = get_log_file_path(datetime.now() - timedelta(days=1))
        if yesterday_path.exists():
            lines = _read_last_n_lines(yesterday_path, max_lines - len(lines)) + lines

    return lines


def _read_last_n_lines(file_path: Path, n: int) -> list[str]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return [line.rstrip('\n') for line in f.readlines()[-n:]]
    except (OSError, UnicodeDecodeError):
        return []


def cleanup_old_logs(retention_days: int) -> int:
    """
    Delete log files dated more than retention_days ago.

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in get_logs_dir().glob(f"{LOG_FILE_PREFIX}*.log"):
        try:
            file_date = datetime.strptime(file_path.stem[len(LOG_FILE_PREFIX):], "%Y-%m-%d")
            if file_date < cutoff_date:
                file_path.unlink()
                deleted_count += 1
        except (ValueError, OSError):
            # Not one of ours, or already gone
            continue

    return deleted_count


def format_log_for_display(log_line: str) -> str:
    """
    Convert a stored log line back to display format.

    Stored: [2026-02-08 14:32:15] wallet.ledger: Issued stealth address #0
    Display: [14:32:15] wallet.ledger: Issued stealth address #0
    """
    if log_line.startswith('[') and len(log_line) > 20 and log_line[11] == ' ':
        return f"[{log_line[12:20]}]{log_line[21:]}"
    return log_line
