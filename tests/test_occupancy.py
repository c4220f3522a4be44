"""
Tests for the OccupancyTracker debounce state machine.

Times are driven by a manual clock (seconds); the timer thread is only
started in TestTimerThread.
"""

import socket
import threading
import time

import pytest

from marquee_osc import ZoneBroadcaster
from marquee_zone import ConfigurationError, OccupancyTracker

from conftest import RecordingBroadcaster


@pytest.fixture
def tracker(sent, clock, logger):
    return OccupancyTracker(
        broadcast=sent,
        timeout_ms=8000,
        qualifying_label="person",
        clock=clock,
        logger=logger,
    )


class TestDebounce:
    """Edge-triggered broadcasts with the idle timeout."""

    def test_initial_state_is_idle(self, tracker):
        assert tracker.state.is_idle
        assert tracker.state.zone_id == -1
        assert tracker.current_zone is None

    def test_no_flicker_within_timeout(self, tracker, sent, clock):
        """One (0) at t=0, nothing at t=4, one (-1) exactly at t=12."""
        tracker.update([("person", 0)])
        assert sent.sent == [0]

        clock.advance_to(4.0)
        tracker.update([("person", 0)])
        assert sent.sent == [0]

        for t in (8.0, 11.0, 11.999):
            clock.advance_to(t)
            assert tracker.check_timeout() is False
        assert sent.sent == [0]

        clock.advance_to(12.0)
        assert tracker.check_timeout() is True
        assert sent.sent == [0, -1]
        assert tracker.state.is_idle

    def test_idle_expiry_is_idempotent(self, tracker, sent, clock):
        """Two expiries in a row broadcast -1 once."""
        tracker.update([("person", 1)])

        clock.advance_to(8.0)
        assert tracker.check_timeout() is True
        clock.advance_to(16.0)
        assert tracker.check_timeout() is False

        assert sent.sent == [1, -1]
        assert tracker.get_stats()['expiries'] == 2

    def test_expiry_while_never_occupied_sends_nothing(self, tracker, sent, clock):
        clock.advance_to(8.0)
        tracker.check_timeout()
        tracker.expire()

        assert sent.sent == []

    def test_zone_change_mid_dwell(self, tracker, sent, clock):
        """0 then 2 within the timeout; the timer resets on each."""
        tracker.update([("person", 0)])
        clock.advance_to(3.0)
        tracker.update([("person", 2)])

        assert sent.sent == [0, 2]
        assert tracker.deadline == pytest.approx(11.0)

        clock.advance_to(10.0)
        tracker.check_timeout()
        assert sent.sent == [0, 2]

    def test_same_zone_refresh_extends_deadline(self, tracker, clock):
        tracker.observe(0)
        clock.advance_to(5.0)
        tracker.observe(0)

        assert tracker.deadline == pytest.approx(13.0)
        assert tracker.state.last_refresh == 5.0

    def test_reentering_after_idle_broadcasts_again(self, tracker, sent, clock):
        tracker.observe(0)
        clock.advance_to(8.0)
        tracker.check_timeout()
        clock.advance_to(9.0)
        tracker.observe(0)

        assert sent.sent == [0, -1, 0]

    def test_timer_is_periodic_after_expiry(self, tracker, clock):
        clock.advance_to(8.0)
        tracker.check_timeout()

        assert tracker.deadline == pytest.approx(16.0)


class TestQualifyingLabel:
    """Only the configured label drives the tracker."""

    def test_non_qualifying_label_is_ignored(self, tracker, sent):
        tracker.update([("car", 0), ("dog", 1)])

        assert sent.sent == []
        assert tracker.state.last_refresh is None
        assert tracker.get_stats()['refreshes'] == 0

    def test_non_qualifying_label_does_not_refresh_timer(self, tracker, sent, clock):
        tracker.update([("person", 0)])
        clock.advance_to(6.0)
        tracker.update([("car", 0)])

        clock.advance_to(8.0)
        assert tracker.check_timeout() is True
        assert sent.sent == [0, -1]

    def test_qualifying_detection_outside_zones_does_not_refresh(self, tracker, sent, clock):
        tracker.update([("person", 1)])
        clock.advance_to(6.0)
        tracker.update([("person", None)])

        assert tracker.deadline == pytest.approx(8.0)
        assert sent.sent == [1]

    def test_custom_label(self, sent, clock, logger):
        tracker = OccupancyTracker(sent, qualifying_label="dancer", clock=clock, logger=logger)

        tracker.update([("person", 0), ("dancer", 3)])

        assert sent.sent == [3]

    @pytest.mark.parametrize("frame", [None, [], ()])
    def test_empty_frame_is_not_an_error(self, tracker, sent, frame):
        assert tracker.update(frame) == 0
        assert sent.sent == []

    def test_detections_processed_in_order(self, tracker, sent):
        """Two people in different zones in one frame: both transitions happen."""
        transitions = tracker.update([("person", 0), ("car", 1), ("person", 2)])

        assert transitions == 2
        assert sent.sent == [0, 2]
        assert tracker.current_zone == 2


class TestBroadcastFailures:
    """Failed sends never roll back state."""

    def test_false_return_keeps_transition(self, clock, logger):
        failing = RecordingBroadcaster(result=False)
        tracker = OccupancyTracker(failing, clock=clock, logger=logger)

        assert tracker.observe(1) is True

        assert tracker.current_zone == 1
        assert tracker.get_stats()['broadcast_failures'] == 1

    def test_exception_is_swallowed(self, clock, logger):
        def explode(zone_id):
            raise OSError("network unreachable")

        tracker = OccupancyTracker(explode, clock=clock, logger=logger)

        assert tracker.observe(0) is True
        clock.advance_to(8.0)
        assert tracker.check_timeout() is True

        stats = tracker.get_stats()
        assert stats['broadcasts'] == 2
        assert stats['broadcast_failures'] == 2
        assert tracker.state.is_idle


class TestConfiguration:

    @pytest.mark.parametrize("timeout_ms", [0, -5])
    def test_invalid_timeout(self, sent, timeout_ms):
        with pytest.raises(ConfigurationError):
            OccupancyTracker(sent, timeout_ms=timeout_ms)

    def test_empty_label(self, sent):
        with pytest.raises(ConfigurationError):
            OccupancyTracker(sent, qualifying_label="")

    def test_independent_trackers_do_not_share_state(self, clock, logger):
        a, b = RecordingBroadcaster(), RecordingBroadcaster()
        tracker_a = OccupancyTracker(a, clock=clock, logger=logger)
        tracker_b = OccupancyTracker(b, clock=clock, logger=logger)

        tracker_a.observe(0)

        assert tracker_b.current_zone is None
        assert b.sent == []


class TestLifecycle:

    def test_close_is_idempotent(self, tracker):
        tracker.close()
        tracker.close()

        assert tracker.closed

    def test_no_broadcast_after_close(self, tracker, sent, clock):
        tracker.observe(0)
        tracker.close()

        assert tracker.observe(1) is False
        clock.advance_to(20.0)
        assert tracker.check_timeout() is False
        assert sent.sent == [0]

    def test_start_after_close_raises(self, tracker):
        tracker.close()

        with pytest.raises(RuntimeError):
            tracker.start()


    def test_close_during_in_flight_broadcast_sends_nothing_more(self, logger):
        """An expiry queued behind an in-flight send is dropped by close()."""
        sent = []
        in_flight = threading.Event()
        release = threading.Event()

        def slow_broadcast(zone_id):
            sent.append(zone_id)
            if zone_id == 1:
                in_flight.set()
                release.wait(timeout=2.0)
            return True

        tracker = OccupancyTracker(slow_broadcast, timeout_ms=50, logger=logger)
        tracker.start()
        frame = threading.Thread(target=tracker.observe, args=(1,))
        frame.start()
        assert in_flight.wait(timeout=2.0)

        # Deadline passes while the send still holds the lock
        time.sleep(0.1)
        closer = threading.Thread(target=tracker.close)
        closer.start()
        time.sleep(0.05)
        release.set()

        frame.join(timeout=2.0)
        closer.join(timeout=2.0)

        assert sent == [1]
        assert tracker.closed
        assert tracker.current_zone == 1


class TestTimerThread:
    """Real clock, short timeout."""

    def test_timer_thread_sends_idle(self, logger):
        idle = threading.Event()
        sent = []

        def broadcast(zone_id):
            sent.append(zone_id)
            if zone_id == -1:
                idle.set()
            return True

        with OccupancyTracker(broadcast, timeout_ms=50, logger=logger) as tracker:
            tracker.observe(3)
            assert idle.wait(timeout=2.0)

        assert sent == [3, -1]

    def test_refreshes_keep_zone_occupied(self, logger):
        sent = []
        tracker = OccupancyTracker(sent.append, timeout_ms=300, logger=logger)
        tracker.start()
        try:
            for _ in range(5):
                tracker.update([("person", 1)])
                time.sleep(0.05)
            assert sent == [1]
        finally:
            tracker.close()

    def test_close_stops_timer_thread(self, logger):
        tracker = OccupancyTracker(lambda z: True, timeout_ms=10_000, logger=logger)
        tracker.start()

        started = time.monotonic()
        tracker.close()

        assert time.monotonic() - started < 1.0
        assert tracker.closed

    def test_frame_and_timer_threads_stay_edge_triggered(self, logger):
        """Refreshes racing a 5 ms timer never produce the same id twice in a row."""
        sent = []
        tracker = OccupancyTracker(sent.append, timeout_ms=5, logger=logger)
        tracker.start()
        try:
            stop_at = time.monotonic() + 0.5
            i = 0
            while time.monotonic() < stop_at:
                tracker.update([("person", 1)])
                time.sleep(0.001 * (i % 10))
                i += 1
        finally:
            tracker.close()

        assert sent[0] == 1
        assert set(sent) <= {1, -1}
        assert all(a != b for a, b in zip(sent, sent[1:]))

    def test_unreachable_endpoint_does_not_stall_observe(self, logger):
        """A send to a dead port returns within the socket timeout."""
        spare_sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        spare_sock.bind(("127.0.0.1", 0))
        dead_port = spare_sock.getsockname()[1]
        spare_sock.close()

        broadcaster = ZoneBroadcaster(
            host="127.0.0.1", port=dead_port, send_timeout=0.05, logger=logger
        )
        tracker = OccupancyTracker(broadcaster.broadcast, logger=logger)

        started = time.monotonic()
        for zone in (0, 1, 2):
            tracker.observe(zone)
        elapsed = time.monotonic() - started

        assert elapsed < 1.0
        assert tracker.current_zone == 2
