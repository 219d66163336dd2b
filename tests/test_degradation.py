from kinstats.bus.messages import DegradationEvent
from kinstats.stats.degradation import DegradationTracker


def test_starts_not_degraded():
    assert not DegradationTracker().degraded


def test_events_only_on_change():
    tracker = DegradationTracker()
    events = [tracker.update(flag) for flag in [False, False, True, True, False]]
    assert events == [
        None,
        None,
        DegradationEvent.ENTERED_DEGRADED,
        None,
        DegradationEvent.EXITED_DEGRADED,
    ]
    assert not tracker.degraded


def test_state_follows_latest_flag():
    tracker = DegradationTracker()
    tracker.update(True)
    assert tracker.degraded
    assert tracker.update(True) is None
    assert tracker.degraded


def test_reset():
    tracker = DegradationTracker()
    tracker.update(True)
    tracker.reset()
    assert not tracker.degraded
    assert tracker.update(True) is DegradationEvent.ENTERED_DEGRADED
