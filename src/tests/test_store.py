import pytest

from music_remote.core.store import PlaybackStore
from music_remote.utils.exceptions import ProtocolError
from fakes import statistics_payload


def test_snapshot_then_tick():
    store = PlaybackStore()
    store.apply_snapshot(statistics_payload())
    assert store.state.progress.current_ms == 12000

    store.tick()
    assert store.state.progress.current_ms == 13000
    assert store.state.progress.total_ms == 200000
    assert store.state.current_track.title == "A"


def test_tick_clamps_to_total():
    store = PlaybackStore()
    store.apply_snapshot(statistics_payload(current=199500, total=200000))
    store.tick()
    assert store.state.progress.current_ms == 200000
    store.tick()
    assert store.state.progress.current_ms == 200000


def test_tick_without_duration_stays_at_zero():
    store = PlaybackStore()
    store.tick()
    assert store.state.progress.current_ms == 0


def test_progress_never_exceeds_total_over_a_sequence():
    store = PlaybackStore()
    snapshots = [
        statistics_payload(current=0, total=2500),
        statistics_payload(current=4000, total=3000),
        statistics_payload(current=100, total=0),
        statistics_payload(current=1000, total=1000),
    ]
    for payload in snapshots:
        store.apply_snapshot(payload)
        assert store.state.progress.current_ms <= store.state.progress.total_ms
        for _ in range(4):
            store.tick()
            assert store.state.progress.current_ms <= store.state.progress.total_ms


def test_same_snapshot_twice_is_idempotent():
    store = PlaybackStore()
    payload = statistics_payload(queue=[{"title": "B", "url": "u"}])
    first = store.apply_snapshot(payload)
    second = store.apply_snapshot(payload)
    assert first == second


def test_snapshot_replaces_ticked_progress():
    store = PlaybackStore()
    store.apply_snapshot(statistics_payload(current=1000))
    store.tick()
    store.tick()
    store.apply_snapshot(statistics_payload(current=1500))
    assert store.state.progress.current_ms == 1500


def test_malformed_snapshot_leaves_state_unchanged():
    store = PlaybackStore()
    store.apply_snapshot(statistics_payload())
    before = store.state
    with pytest.raises(ProtocolError):
        store.apply_snapshot("garbage")
    assert store.state is before


def test_listeners_see_previous_and_current():
    store = PlaybackStore()
    seen = []
    store.subscribe(lambda previous, current: seen.append((previous.is_playing, current.is_playing)))
    store.apply_snapshot(statistics_payload(paused=False))
    store.apply_snapshot(statistics_payload(paused=True))
    assert seen == [(False, True), (True, False)]


def test_failing_listener_does_not_block_commit():
    store = PlaybackStore()

    def broken(previous, current):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.apply_snapshot(statistics_payload())
    assert store.state.volume == 40

    store.unsubscribe(broken)
    store.tick()
    assert store.state.progress.current_ms == 13000
