"""
Monitor loop: runs one cycle every `interval_s`, publishes the snapshot into
MonitorState and hands transitions to the notification sink.
The loop thread is the only writer; the tray reads snapshots from the GUI thread.
"""
import asyncio
import functools
import logging
import threading
from datetime import datetime
from time import monotonic
from typing import Callable, Optional, Sequence

from core.config import MonitorSettings, default_targets, load_targets
from core.cycle import CycleResult, CycleSnapshot, NotificationEvent, evaluate_cycle, probe_all
from core.http_check import make_client
from core.notify import dispatch_event
from core.probe import ProbeOutcome, Prober, make_prober
from core.targets import Target, classify_targets

logger = logging.getLogger("pinger.monitor")

TargetLoader = Callable[[], list[str]]
EventSink = Callable[[NotificationEvent], object]


class MonitorState:
    """Latest snapshot and fail streaks behind one lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = CycleSnapshot.initial()
        self._streaks: dict[str, int] = {}

    def snapshot(self) -> CycleSnapshot:
        with self._lock:
            return self._snapshot

    def streaks(self) -> dict[str, int]:
        with self._lock:
            return dict(self._streaks)

    def commit(
        self,
        targets: Sequence[Target],
        outcomes: Sequence[ProbeOutcome],
        threshold: int,
        now: Optional[datetime] = None,
    ) -> CycleResult:
        """Evaluate a cycle against the current state and publish it atomically."""
        with self._lock:
            result = evaluate_cycle(targets, outcomes, self._snapshot, self._streaks, threshold, now)
            self._snapshot = result.snapshot
            self._streaks = result.streaks
            return result


def read_targets(load: TargetLoader) -> list[Target]:
    try:
        raw = load()
    except Exception:
        logger.exception("Loading targets failed, using defaults")
        raw = default_targets()
    return classify_targets(raw)


def dispatch_events(events: Sequence[NotificationEvent], sink: EventSink) -> int:
    """Deliver every event; a failing one is logged and skipped. Returns the failure count."""
    failures = 0
    for event in events:
        try:
            if sink(event) is False:
                failures += 1
        except Exception:
            failures += 1
            logger.exception("Notification sink failed for %s", event.target)
    return failures


async def run_once(
    state: MonitorState,
    prober: Prober,
    settings: MonitorSettings,
    load: TargetLoader = load_targets,
    sink: Optional[EventSink] = None,
) -> list[NotificationEvent]:
    """One iteration of the loop, without the sleep."""
    if sink is None:
        sink = functools.partial(dispatch_event, timeout_ms=settings.notification_timeout_ms)
    targets = read_targets(load)
    outcomes = await probe_all(targets, prober, settings.concurrency) if targets else []
    result = state.commit(targets, outcomes, settings.fail_threshold)
    snap = result.snapshot
    logger.info(
        "Cycle #%d finished at %s (all up: %s, %d events)",
        snap.cycle_number,
        snap.timestamp.strftime("%H:%M:%S") if snap.timestamp else "-",
        snap.aggregate_up,
        len(result.events),
    )
    dispatch_events(result.events, sink)
    return result.events


async def run_monitor(
    state: MonitorState,
    settings: Optional[MonitorSettings] = None,
    load: TargetLoader = load_targets,
    sink: Optional[EventSink] = None,
) -> None:
    """Run cycles forever; sleeps max(0, interval - elapsed) between them."""
    settings = settings or MonitorSettings()
    logger.info("Monitor started (interval %ss, threshold %d)", settings.interval_s, settings.fail_threshold)
    async with make_client(settings.http_timeout_s) as client:
        prober = make_prober(client, settings)
        while True:
            start = monotonic()
            try:
                await run_once(state, prober, settings, load, sink)
            except Exception:
                logger.exception("Monitor cycle failed")
            elapsed = monotonic() - start
            sleep_for = max(0.0, settings.interval_s - elapsed)
            logger.debug("Cycle took %.1fs, sleeping %.1fs", elapsed, sleep_for)
            await asyncio.sleep(sleep_for)


def start_monitor_thread(
    state: MonitorState,
    settings: Optional[MonitorSettings] = None,
    load: TargetLoader = load_targets,
    sink: Optional[EventSink] = None,
) -> threading.Thread:
    """Run the monitor on its own event loop in a daemon thread."""

    def _run_loop() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.run_until_complete(run_monitor(state, settings, load, sink))
        finally:
            loop.close()

    thread = threading.Thread(target=_run_loop, name="pinger-monitor", daemon=True)
    thread.start()
    return thread
