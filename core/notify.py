"""
Desktop notifications for status transitions.
DOWN: critical urgency. Recovered: normal urgency. Delivery is delegated to a
callback registered by the GUI (tray balloon); without one, notifications are logged.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from core.config import APP_NAME, NOTIFICATION_TIMEOUT_MS

logger = logging.getLogger("pinger.notify")

ICON_UP = "network-transmit-receive"
ICON_DOWN = "network-error"


class Urgency(Enum):
    LOW = "low"
    NORMAL = "normal"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Notification:
    summary: str
    body: str
    icon_hint: str
    urgency: Urgency
    timeout_ms: int = NOTIFICATION_TIMEOUT_MS


NotifyCallback = Callable[[str, str, str, Urgency, int], None]

# Callback for "show notification" - set by GUI
_notify_callback: Optional[NotifyCallback] = None


def set_notify_callback(cb: Optional[NotifyCallback]) -> None:
    """cb(summary, body, icon_hint, urgency, timeout_ms). None restores logging-only."""
    global _notify_callback
    _notify_callback = cb


def notify(
    summary: str,
    body: str,
    icon_hint: str,
    urgency: Urgency = Urgency.NORMAL,
    timeout_ms: int = NOTIFICATION_TIMEOUT_MS,
) -> None:
    """Deliver one notification. Exceptions from the callback propagate."""
    if _notify_callback:
        _notify_callback(summary, body, icon_hint, urgency, timeout_ms)
    else:
        logger.info("Notify [%s]: %s - %s", urgency.value, summary, body)


def status_notification(target: str, now_up: bool, timeout_ms: int = NOTIFICATION_TIMEOUT_MS) -> Notification:
    if now_up:
        return Notification(APP_NAME, f"✅ {target} is responding again.", ICON_UP, Urgency.NORMAL, timeout_ms)
    return Notification(APP_NAME, f"❌ {target} went OFFLINE!", ICON_DOWN, Urgency.CRITICAL, timeout_ms)


def dispatch_event(event, timeout_ms: int = NOTIFICATION_TIMEOUT_MS) -> bool:
    """Send the canned notification for a NotificationEvent. Returns False if delivery failed."""
    n = status_notification(event.target, event.now_up, timeout_ms)
    logger.info("%s %s", "DOWN->UP" if event.now_up else "UP->DOWN", event.target)
    try:
        notify(n.summary, n.body, n.icon_hint, n.urgency, n.timeout_ms)
    except Exception as e:
        logger.exception("Notification failed for %s: %s", event.target, e)
        return False
    return True
