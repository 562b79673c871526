"""
Load/save the monitored target list (JSON) in the user config directory.
Monitoring tunables live in MonitorSettings; the file only holds targets.
"""
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger("pinger.config")

APP_NAME = "Cosmic Pinger"
APP_VERSION = "1.0.0"

CONFIG_FILENAME = "sites.json"
DEFAULT_TARGETS = ("google.com", "1.1.1.1")

# Monitoring defaults
MONITOR_INTERVAL_SECS = 180
PING_ATTEMPTS = 3
PING_RETRY_DELAY_MS = 500
PING_TIMEOUT_MS = 1000
HTTP_TIMEOUT_SECS = 5.0
FAIL_STREAK_THRESHOLD = 2
DEFAULT_CONCURRENCY = 5
NOTIFICATION_TIMEOUT_MS = 5000


@dataclass(frozen=True)
class MonitorSettings:
    interval_s: float = MONITOR_INTERVAL_SECS
    ping_attempts: int = PING_ATTEMPTS
    ping_retry_delay_ms: int = PING_RETRY_DELAY_MS
    ping_timeout_ms: int = PING_TIMEOUT_MS
    http_timeout_s: float = HTTP_TIMEOUT_SECS
    fail_threshold: int = FAIL_STREAK_THRESHOLD
    concurrency: int = DEFAULT_CONCURRENCY
    notification_timeout_ms: int = NOTIFICATION_TIMEOUT_MS

    def __post_init__(self) -> None:
        if self.interval_s < 0:
            raise ValueError("interval_s must not be negative")
        if self.ping_attempts < 1:
            raise ValueError("ping_attempts must be at least 1")
        if self.ping_timeout_ms <= 0 or self.http_timeout_s <= 0:
            raise ValueError("timeouts must be positive")
        if self.fail_threshold < 1:
            raise ValueError("fail_threshold must be at least 1")
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")


def get_config_dir() -> Path:
    """Per-user config directory for the target list, logs and lock file."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", os.path.expanduser("~")))
        return base / "CosmicPinger"
    if sys.platform == "darwin":
        return Path(os.path.expanduser("~")) / "Library" / "Application Support" / "CosmicPinger"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path(os.path.expanduser("~")) / ".config"
    return base / "cosmic_pinger"


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILENAME


def ensure_config_dir() -> None:
    get_config_dir().mkdir(parents=True, exist_ok=True)


def default_targets() -> list[str]:
    return list(DEFAULT_TARGETS)


def load_targets(path: Path | None = None) -> list[str]:
    """
    Read the configured target list. Never raises: a missing, unreadable or
    malformed file yields the default list.
    """
    path = path or get_config_path()
    if not path.exists():
        logger.info("No config at %s, using default targets", path)
        return default_targets()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data: Any = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Could not read config %s (%s), using default targets", path, e)
        return default_targets()
    targets = data.get("targets") if isinstance(data, dict) else None
    if not isinstance(targets, list):
        logger.warning("Config %s has no 'targets' list, using default targets", path)
        return default_targets()
    return [t for t in targets if isinstance(t, str)]


def save_targets(targets: list[str], path: Path | None = None) -> Path:
    """Write the target list as pretty JSON. OSError propagates to the caller."""
    if path is None:
        ensure_config_dir()
        path = get_config_path()
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"targets": list(targets)}, f, indent=2, ensure_ascii=False)
    logger.info("Config saved to %s (%d targets)", path, len(targets))
    return path
