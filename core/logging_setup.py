"""
Daily logs via TimedRotatingFileHandler (midnight).
Log: cycle completions, status transitions, probe results, notification and config errors.
"""
import logging
import os
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.config import get_config_dir

LOG_FILENAME = "pinger.log"
LOG_LEVEL_ENV = "PINGER_LOG_LEVEL"


def console_level() -> int:
    """Console level from PINGER_LOG_LEVEL (DEBUG, INFO, WARNING, ...); INFO when unset or unknown."""
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_dir: str | Path | None = None) -> logging.Logger:
    """
    Configure root logger with daily rotating file and console.
    Returns the app logger ('pinger').
    """
    log_dir = Path(log_dir) if log_dir else get_config_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    fh = TimedRotatingFileHandler(log_file, when="midnight", backupCount=30, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(fmt)
    root.addHandler(fh)

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(console_level())
    ch.setFormatter(fmt)
    root.addHandler(ch)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger("pinger")
    logger.setLevel(logging.DEBUG)
    return logger
