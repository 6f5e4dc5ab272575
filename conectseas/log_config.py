"""Application logging setup.

Log files live in `LOG_DIR` (relative paths resolve against CWD) and rotate
daily through TimedRotatingFileHandler.

- Rotation: at midnight (UTC).
- Retention: `retention_days` rotated files (default 30).
- Level: `level` (default INFO).
"""
from __future__ import annotations

import glob
import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler

_LOG_FORMAT = "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Our handlers, so that reconfiguration replaces them instead of stacking.
_file_handler: logging.Handler | None = None
_console_handler: logging.Handler | None = None


def setup_logging(level: str = "INFO", retention_days: int = 30, log_dir: str = "data/logs") -> None:
    global _file_handler, _console_handler

    level_str = (level or "INFO").strip().upper()
    if level_str not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level_str = "INFO"
    log_level = getattr(logging, level_str, logging.INFO)

    retention_days = max(1, min(365, int(retention_days or 30)))

    root = logging.getLogger()

    if _file_handler and _file_handler in root.handlers:
        root.removeHandler(_file_handler)
        _file_handler.close()
    if _console_handler and _console_handler in root.handlers:
        root.removeHandler(_console_handler)

    log_dir = os.path.abspath(log_dir or "data/logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_LOG_DATE_FORMAT)

    fh = TimedRotatingFileHandler(
        log_file,
        when="midnight",
        interval=1,
        backupCount=retention_days,
        encoding="utf-8",
        utc=True,
    )
    fh.suffix = "%Y-%m-%d"
    fh.setLevel(log_level)
    fh.setFormatter(formatter)
    _file_handler = fh

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    _console_handler = ch

    root.setLevel(log_level)
    root.addHandler(fh)
    root.addHandler(ch)

    _cleanup_old_logs(log_dir, retention_days)

    # ldap3 and uvicorn access logs are too chatty below WARNING.
    logging.getLogger("uvicorn.access").setLevel(max(log_level, logging.WARNING))
    logging.getLogger("ldap3").setLevel(max(log_level, logging.WARNING))

    logging.getLogger("conectseas").info(
        "Logging configured: level=%s, retention=%d days, dir=%s", level_str, retention_days, log_dir
    )


def _cleanup_old_logs(log_dir: str, retention_days: int) -> None:
    """Remove rotated files older than retention_days (left over from a longer retention)."""
    cutoff = time.time() - (retention_days * 86400)
    for f in glob.glob(os.path.join(log_dir, "app.log.*")):
        try:
            if os.path.getmtime(f) < cutoff:
                os.remove(f)
        except OSError:
            pass
