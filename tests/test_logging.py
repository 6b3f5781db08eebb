import logging
from datetime import datetime, timedelta

from services.logging import (
    PersistentLogHandler,
    append_log,
    cleanup_old_logs,
    format_log_for_display,
    get_log_file_path,
    load_recent_logs,
)
from utils import get_logs_dir


def test_log_file_name(app_home):
    path = get_log_file_path(datetime(2026, 2, 8))
    assert path == app_home / "logs" / "stealth-2026-02-08.log"


def test_append_disabled_without_retention(app_home):
    append_log("[14:32:15] hello", retention_days=0)
    assert not get_log_file_path().exists()


def test_append_and_load(app_home):
    append_log("[14:32:15] first", retention_days=7)
    append_log("plain line", retention_days=7)
    lines = load_recent_logs()
    today = datetime.now().strftime('%Y-%m-%d')
    assert lines == [f"[{today} 14:32:15] first", "plain line"]
    assert load_recent_logs(1) == ["plain line"]
    assert load_recent_logs(0) == []


def test_load_includes_yesterday(app_home):
    yesterday = get_log_file_path(datetime.now() - timedelta(days=1))
    yesterday.write_text("old 1\nold 2\n", encoding="utf-8")
    append_log("new", retention_days=1)
    assert load_recent_logs(2) == ["old 2", "new"]


def test_cleanup_old_logs(app_home):
    logs = get_logs_dir()
    old = get_log_file_path(datetime.now() - timedelta(days=10))
    old.write_text("x")
    recent = get_log_file_path()
    recent.write_text("y")
    other = logs / "stealth-notadate.log"
    other.write_text("z")

    assert cleanup_old_logs(7) == 1
    assert not old.exists()
    assert recent.exists()
    assert other.exists()
    assert cleanup_old_logs(-1) == 0


def test_format_for_display():
    assert format_log_for_display("[2026-02-08 14:32:15] wallet.ledger: hi") == "[14:32:15] wallet.ledger: hi"
    assert format_log_for_display("no timestamp") == "no timestamp"


def test_persistent_handler(app_home):
    logger = logging.getLogger("test.persistent")
    handler = PersistentLogHandler(retention_days=3)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        logger.info("Issued stealth address #0")
    finally:
        logger.removeHandler(handler)

    lines = load_recent_logs()
    assert len(lines) == 1
    assert lines[0].endswith("test.persistent: Issued stealth address #0")
    assert lines[0].startswith(f"[{datetime.now().strftime('%Y-%m-%d')} ")
