"""
One monitoring cycle: probe every target (bounded fan-out), debounce the raw
outcomes, compute aggregate health and diff against the previous snapshot to
find the transitions worth a notification.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from core.config import DEFAULT_CONCURRENCY, FAIL_STREAK_THRESHOLD
from core.probe import ProbeOutcome, Prober
from core.state import EffectiveStatus, FailStreaks, apply_outcome
from core.targets import Target

logger = logging.getLogger("pinger.cycle")

NO_TARGETS_LABEL = "No targets configured"


@dataclass(frozen=True)
class NotificationEvent:
    target: str
    now_up: bool


@dataclass(frozen=True)
class CycleSnapshot:
    results: tuple[EffectiveStatus, ...] = ()
    timestamp: Optional[datetime] = None
    aggregate_up: bool = True
    cycle_number: int = 0
    is_first_cycle: bool = True

    @classmethod
    def initial(cls) -> "CycleSnapshot":
        """State before any cycle has run."""
        return cls()

    def status_of(self, target: str) -> Optional[bool]:
        for status in self.results:
            if status.target == target and not status.placeholder:
                return status.effective_reachable
        return None


@dataclass(frozen=True)
class CycleResult:
    snapshot: CycleSnapshot
    streaks: dict[str, int]
    events: list[NotificationEvent] = field(default_factory=list)


def placeholder_status() -> EffectiveStatus:
    return EffectiveStatus(NO_TARGETS_LABEL, True, "-", placeholder=True)


async def probe_all(
    targets: Sequence[Target],
    prober: Prober,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> list[ProbeOutcome]:
    """Probe concurrently (at most `concurrency` at once); results keep target order."""
    sem = asyncio.Semaphore(concurrency)

    async def _one(target: Target) -> ProbeOutcome:
        async with sem:
            return await prober(target)

    return list(await asyncio.gather(*(_one(t) for t in targets)))


def diff_snapshots(
    prior: CycleSnapshot,
    results: Sequence[EffectiveStatus],
) -> list[NotificationEvent]:
    """Targets that are new or whose effective status flipped since `prior`."""
    if prior.is_first_cycle:
        return []
    events: list[NotificationEvent] = []
    for status in results:
        if status.placeholder:
            continue
        previous = prior.status_of(status.target)
        if previous is None or previous != status.effective_reachable:
            events.append(NotificationEvent(status.target, status.effective_reachable))
    return events


def evaluate_cycle(
    targets: Sequence[Target],
    outcomes: Sequence[ProbeOutcome],
    prior: CycleSnapshot,
    streaks: FailStreaks,
    threshold: int = FAIL_STREAK_THRESHOLD,
    now: Optional[datetime] = None,
) -> CycleResult:
    """Pure decision step of a cycle; `outcomes` line up with `targets`."""
    if len(outcomes) != len(targets):
        raise ValueError("one outcome per target is required")

    working: dict[str, int] = dict(streaks)
    results: list[EffectiveStatus] = []
    if not targets:
        results.append(placeholder_status())
    for outcome in outcomes:
        status, working = apply_outcome(working, outcome, threshold)
        results.append(status)

    aggregate_up = all(s.effective_reachable for s in results)
    events = diff_snapshots(prior, results)

    current = {t.name for t in targets}
    pruned = {name: n for name, n in working.items() if name in current}

    snapshot = CycleSnapshot(
        results=tuple(results),
        timestamp=now or datetime.now(),
        aggregate_up=aggregate_up,
        cycle_number=prior.cycle_number + 1,
        is_first_cycle=False,
    )
    return CycleResult(snapshot=snapshot, streaks=pruned, events=events)


async def run_cycle(
    targets: Sequence[Target],
    prior: CycleSnapshot,
    streaks: FailStreaks,
    prober: Prober,
    threshold: int = FAIL_STREAK_THRESHOLD,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> CycleResult:
    outcomes = await probe_all(targets, prober, concurrency) if targets else []
    return evaluate_cycle(targets, outcomes, prior, streaks, threshold)
