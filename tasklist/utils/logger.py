"""
Logging utilities with size-based file rotation and secret masking.

Key Features:
    - One log file per process run, grouped in date directories
    - Rotation that survives permission errors on locked files
    - Masking of password/token/secret values before records are written
    - Automatic cleanup of old date directories
"""

import datetime
import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_DIR = Path(os.getenv("LOG_DIR", "logs"))
LOG_FILE_BASENAME = "tasklist"
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() not in ("0", "false", "no")

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

MAX_LOG_SIZE_MB = 5
MAX_LOG_SIZE_BYTES = MAX_LOG_SIZE_MB * 1024 * 1024
MAX_BACKUP_COUNT = 10
KEEP_LOG_DAYS = 7

# Matches `password=...`, `"token": "..."` and similar pairs.
_SENSITIVE_PATTERN = re.compile(
    r"""(?P<key>["']?(?:password|passwd|token|jwt|secret(?:_key)?)["']?\s*[:=]\s*)"""
    r"""(?P<value>"[^"]*"|'[^']*'|[^\s,;}&]+)""",
    re.IGNORECASE,
)

_run_log_file: Path | None = None


def _get_run_log_file() -> Path:
    """Return the log file shared by every logger of this process."""
    global _run_log_file
    if _run_log_file is None:
        now = datetime.datetime.now()
        date_dir = LOG_DIR / now.strftime("%Y-%m-%d")
        date_dir.mkdir(parents=True, exist_ok=True)
        run_timestamp = now.strftime("%Y-%m-%d_%H-%M-%S")
        _run_log_file = date_dir / f"{LOG_FILE_BASENAME}_{run_timestamp}.log"
    return _run_log_file


def mask_sensitive(message: str) -> str:
    """Replace the value part of sensitive key/value pairs with ***."""
    return _SENSITIVE_PATTERN.sub(lambda m: f"{m.group('key')}***", message)


class SensitiveDataFilter(logging.Filter):
    """Masks credentials that slip into formatted log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = mask_sensitive(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class SafeRotatingFileHandler(RotatingFileHandler):
    """Size-based rotation handler that keeps logging when rollover fails."""

    def doRollover(self):
        try:
            super().doRollover()
        except (OSError, PermissionError) as e:
            # The logger itself cannot be used here.
            sys.stderr.write(
                f"Log rotation failed: {e}. Continuing with current log file.\n"
            )
            sys.stderr.flush()


def _get_log_level(level_str: str) -> int:
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(level_str.upper(), logging.INFO)


def setup_logger(name: str, level: str = None) -> logging.Logger:
    """Set up a named logger with console and (optionally) file handlers."""
    logger = logging.getLogger(name)
    log_level = _get_log_level(level or DEFAULT_LOG_LEVEL)
    logger.setLevel(log_level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    sensitive_filter = SensitiveDataFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    console_handler.addFilter(sensitive_filter)
    logger.addHandler(console_handler)

    if LOG_TO_FILE:
        file_handler = SafeRotatingFileHandler(
            _get_run_log_file(),
            maxBytes=MAX_LOG_SIZE_BYTES,
            backupCount=MAX_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        file_handler.addFilter(sensitive_filter)
        logger.addHandler(file_handler)
        cleanup_old_logs(keep_days=KEEP_LOG_DAYS)

    return logger


def cleanup_old_logs(keep_days: int = KEEP_LOG_DAYS) -> int:
    """Delete date directories older than `keep_days`. Returns files removed."""
    if not LOG_DIR.exists():
        return 0

    cutoff = datetime.datetime.now() - datetime.timedelta(days=keep_days)
    deleted_count = 0

    for date_dir in LOG_DIR.iterdir():
        if not date_dir.is_dir():
            continue
        try:
            dir_date = datetime.datetime.strptime(date_dir.name, "%Y-%m-%d")
        except ValueError:
            # Not one of ours
            continue
        if dir_date >= cutoff:
            continue

        for log_file in date_dir.iterdir():
            try:
                log_file.unlink()
                deleted_count += 1
            except (PermissionError, FileNotFoundError):
                continue
        try:
            date_dir.rmdir()
        except OSError:
            pass  # still holds a locked file

    return deleted_count
