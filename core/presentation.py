"""Text and colors shown by the tray, derived from a CycleSnapshot (no Qt here)."""
from datetime import datetime
from typing import Optional

from core.config import APP_NAME, APP_VERSION
from core.cycle import CycleSnapshot

YELLOW = (255, 255, 0)
GREEN = (0, 255, 0)
RED = (255, 0, 0)

UP_MARK = "🟢"
DOWN_MARK = "🔴"


def status_color(snap: CycleSnapshot) -> tuple[int, int, int]:
    if snap.is_first_cycle:
        return YELLOW
    return GREEN if snap.aggregate_up else RED


def _elapsed_seconds(snap: CycleSnapshot, now: Optional[datetime]) -> Optional[int]:
    if snap.timestamp is None:
        return None
    now = now or datetime.now()
    return max(0, int((now - snap.timestamp).total_seconds()))


def tray_title(snap: CycleSnapshot, now: Optional[datetime] = None) -> str:
    elapsed = _elapsed_seconds(snap, now)
    if elapsed is None:
        return f"{APP_NAME} ..."
    mark = "✓" if snap.aggregate_up else "⚠"
    return f"{APP_NAME} {mark} ({elapsed // 60}m)"


def tooltip(snap: CycleSnapshot) -> tuple[str, str]:
    """(title, description)"""
    if snap.is_first_cycle:
        status = "Starting..."
    elif snap.aggregate_up:
        status = f"Online - {len(snap.results)} sites monitored"
    else:
        status = "⚠️ OFFLINE DETECTED"
    return f"{APP_NAME} v{APP_VERSION}", status


def last_check_label(snap: CycleSnapshot, now: Optional[datetime] = None) -> str:
    elapsed = _elapsed_seconds(snap, now)
    if elapsed is None:
        return "Waiting for first check..."
    mins, secs = divmod(elapsed, 60)
    if mins > 0:
        return f"Last check: {mins} min {secs} sec ago"
    return f"Last check: {secs} sec ago"


def menu_lines(snap: CycleSnapshot) -> list[str]:
    return [
        f"{UP_MARK if s.effective_reachable else DOWN_MARK} {s.target} ({s.display_label})"
        for s in snap.results
    ]
