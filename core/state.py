"""
Flap suppression per target.
States: UP (streak 0), FLAPPING (1..threshold-1), DOWN (streak >= threshold).
A success resets to UP immediately. Only UP <-> DOWN crossings are visible:
below the threshold a failure is still reported reachable, with the streak
progress appended to its label.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from core.probe import ProbeOutcome

MAX_FAIL_STREAK = 255

FailStreaks = Mapping[str, int]


class TargetState(Enum):
    UP = "up"
    FLAPPING = "flapping"
    DOWN = "down"


@dataclass(frozen=True)
class EffectiveStatus:
    target: str
    effective_reachable: bool
    display_label: str
    placeholder: bool = False


def _check_threshold(threshold: int) -> None:
    if threshold < 1:
        raise ValueError("threshold must be at least 1")


def state_for_streak(streak: int, threshold: int) -> TargetState:
    _check_threshold(threshold)
    if streak <= 0:
        return TargetState.UP
    if streak < threshold:
        return TargetState.FLAPPING
    return TargetState.DOWN


def next_streak(current: int, reachable: bool) -> int:
    if reachable:
        return 0
    return min(current + 1, MAX_FAIL_STREAK)


def apply_outcome(
    streaks: FailStreaks,
    outcome: ProbeOutcome,
    threshold: int,
) -> tuple[EffectiveStatus, dict[str, int]]:
    """
    Fold one probe outcome into the streak map. Returns the effective status
    and a new map; the input mapping is left untouched.
    """
    _check_threshold(threshold)
    streak = next_streak(streaks.get(outcome.target, 0), outcome.reachable)
    updated = dict(streaks)
    updated[outcome.target] = streak

    if outcome.reachable or streak >= threshold:
        status = EffectiveStatus(outcome.target, outcome.reachable, outcome.label)
    else:
        label = f"{outcome.label} (fail {streak}/{threshold})"
        status = EffectiveStatus(outcome.target, True, label)
    return status, updated
