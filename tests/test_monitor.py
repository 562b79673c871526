"""Unit tests for the monitor loop and shared state (core.monitor)."""
import time

import pytest
from unittest.mock import AsyncMock, patch

from core.config import DEFAULT_TARGETS, MonitorSettings
from core.cycle import NotificationEvent
from core.monitor import MonitorState, dispatch_events, read_targets, run_monitor, run_once, start_monitor_thread
from core.probe import ProbeOutcome

SETTINGS = MonitorSettings(interval_s=60, fail_threshold=2)


class FakeProber:
    """Scripted reachability per target name; unknown targets are up."""

    def __init__(self, down=()):
        self.down = set(down)
        self.calls = []

    async def __call__(self, target):
        self.calls.append(target.name)
        up = target.name not in self.down
        return ProbeOutcome(target.name, up, "5 ms" if up else "OFFLINE")


class StopLoop(Exception):
    pass


@pytest.fixture
def state():
    return MonitorState()


def test_initial_snapshot(state):
    snap = state.snapshot()
    assert snap.is_first_cycle is True
    assert snap.cycle_number == 0
    assert snap.results == ()
    assert state.streaks() == {}


def test_read_targets_falls_back_when_loader_raises():
    def broken():
        raise OSError("disk gone")

    assert [t.name for t in read_targets(broken)] == list(DEFAULT_TARGETS)


@pytest.mark.asyncio
async def test_run_once_publishes_and_notifies_on_confirmed_down(state):
    prober = FakeProber()
    events = []
    load = lambda: ["a.example", "b.example"]

    assert await run_once(state, prober, SETTINGS, load, events.append) == []
    prober.down.add("b.example")
    assert await run_once(state, prober, SETTINGS, load, events.append) == []  # flapping
    assert state.streaks() == {"a.example": 0, "b.example": 1}
    await run_once(state, prober, SETTINGS, load, events.append)
    assert events == [NotificationEvent("b.example", False)]

    snap = state.snapshot()
    assert snap.cycle_number == 3
    assert snap.aggregate_up is False
    assert [s.target for s in snap.results] == ["a.example", "b.example"]

    prober.down.clear()
    await run_once(state, prober, SETTINGS, load, events.append)
    assert events[-1] == NotificationEvent("b.example", True)
    assert state.snapshot().aggregate_up is True


@pytest.mark.asyncio
async def test_removed_target_is_pruned_without_event(state):
    prober = FakeProber(down={"gone.example"})
    events = []
    targets = ["keep.example", "gone.example"]
    await run_once(state, prober, SETTINGS, lambda: list(targets), events.append)
    targets.remove("gone.example")
    await run_once(state, prober, SETTINGS, lambda: list(targets), events.append)
    assert "gone.example" not in state.streaks()
    assert events == []


@pytest.mark.asyncio
async def test_empty_config_does_not_probe(state):
    prober = FakeProber()
    events = []
    await run_once(state, prober, SETTINGS, lambda: [], events.append)
    await run_once(state, prober, SETTINGS, lambda: [], events.append)
    assert prober.calls == []
    assert events == []
    assert state.snapshot().aggregate_up is True


def test_dispatch_events_isolates_failures():
    delivered = []

    def sink(event):
        if event.target == "bad":
            raise RuntimeError("notification daemon gone")
        delivered.append(event.target)

    events = [NotificationEvent("ok1", True), NotificationEvent("bad", False), NotificationEvent("ok2", False)]
    assert dispatch_events(events, sink) == 1
    assert delivered == ["ok1", "ok2"]


def test_dispatch_events_counts_false_as_failure():
    assert dispatch_events([NotificationEvent("x", True)], lambda e: False) == 1


@pytest.mark.asyncio
async def test_run_monitor_sleeps_remaining_interval(state):
    settings = MonitorSettings(interval_s=30)
    with patch("core.monitor.run_once", new_callable=AsyncMock) as mock_once, \
         patch("core.monitor.monotonic", side_effect=[100.0, 104.0]), \
         patch("core.monitor.asyncio.sleep", new_callable=AsyncMock, side_effect=StopLoop) as mock_sleep:
        with pytest.raises(StopLoop):
            await run_monitor(state, settings, load=lambda: [])
    mock_once.assert_awaited_once()
    mock_sleep.assert_awaited_once_with(26.0)


@pytest.mark.asyncio
async def test_run_monitor_survives_failed_cycle_and_never_sleeps_negative(state):
    settings = MonitorSettings(interval_s=5)
    with patch("core.monitor.run_once", new_callable=AsyncMock, side_effect=RuntimeError("boom")), \
         patch("core.monitor.monotonic", side_effect=[0.0, 9.0]), \
         patch("core.monitor.asyncio.sleep", new_callable=AsyncMock, side_effect=StopLoop) as mock_sleep:
        with pytest.raises(StopLoop):
            await run_monitor(state, settings, load=lambda: [])
    mock_sleep.assert_awaited_once_with(0.0)


def test_start_monitor_thread_publishes_snapshot(state):
    prober = FakeProber()
    with patch("core.monitor.make_prober", return_value=prober):
        thread = start_monitor_thread(state, MonitorSettings(interval_s=3600), load=lambda: ["t.example"], sink=lambda e: None)
        deadline = time.monotonic() + 5
        while state.snapshot().cycle_number == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
    assert thread.daemon is True
    assert state.snapshot().cycle_number == 1
    assert state.snapshot().results[0].target == "t.example"
