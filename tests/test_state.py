"""Unit tests for flap suppression (core.state)."""
import pytest
from core.probe import ProbeOutcome
from core.state import MAX_FAIL_STREAK, TargetState, apply_outcome, state_for_streak


def ok(target="a.example", label="10 ms"):
    return ProbeOutcome(target, True, label)


def fail(target="a.example", label="OFFLINE"):
    return ProbeOutcome(target, False, label)


def run(outcomes, threshold=2):
    streaks = {}
    statuses = []
    history = []
    for outcome in outcomes:
        status, streaks = apply_outcome(streaks, outcome, threshold)
        statuses.append(status)
        history.append(streaks[outcome.target])
    return statuses, streaks, history


def test_success_keeps_label_and_zero_streak():
    status, streaks = apply_outcome({}, ok(), 2)
    assert status.effective_reachable is True
    assert status.display_label == "10 ms"
    assert streaks == {"a.example": 0}


def test_single_failure_is_suppressed():
    status, streaks = apply_outcome({}, fail(), 2)
    assert status.effective_reachable is True
    assert status.display_label == "OFFLINE (fail 1/2)"
    assert streaks["a.example"] == 1


def test_two_failures_go_down():
    statuses, _, _ = run([fail(), fail()])
    assert statuses[-1].effective_reachable is False
    assert statuses[-1].display_label == "OFFLINE"


def test_fail_then_success_resets():
    statuses, streaks, _ = run([fail(), ok()])
    assert statuses[-1].effective_reachable is True
    assert streaks["a.example"] == 0


def test_streak_monotonic_while_failing_and_reset_on_success():
    _, _, history = run([fail(), fail(), fail(), ok(), fail(), ok()])
    assert history == [1, 2, 3, 0, 1, 0]


def test_threshold_boundary():
    for streak, expected in [(0, True), (1, True), (2, False), (5, False)]:
        status, _ = apply_outcome({"a.example": max(0, streak - 1)}, fail() if streak else ok(), 2)
        assert status.effective_reachable is expected, streak


def test_threshold_one_has_no_suppression():
    status, _ = apply_outcome({}, fail(), 1)
    assert status.effective_reachable is False


def test_streak_saturates():
    status, streaks = apply_outcome({"a.example": MAX_FAIL_STREAK}, fail(), 2)
    assert streaks["a.example"] == MAX_FAIL_STREAK
    assert status.effective_reachable is False


def test_input_mapping_not_mutated():
    original = {"a.example": 1}
    apply_outcome(original, fail(), 3)
    assert original == {"a.example": 1}


def test_other_targets_untouched():
    _, streaks = apply_outcome({"b.example": 4}, ok(), 2)
    assert streaks == {"a.example": 0, "b.example": 4}


def test_invalid_threshold():
    with pytest.raises(ValueError):
        apply_outcome({}, fail(), 0)


def test_state_for_streak():
    assert state_for_streak(0, 3) == TargetState.UP
    assert state_for_streak(1, 3) == TargetState.FLAPPING
    assert state_for_streak(2, 3) == TargetState.FLAPPING
    assert state_for_streak(3, 3) == TargetState.DOWN
