"""
Occupancy Tracker Module
========================

Debounced "occupied zone" state machine.

States:
    Idle          current_zone is None   (broadcast as -1)
    Occupied(z)   current_zone == z

Events:
    observe(z)    a qualifying detection classified into zone z
                  -> timer deadline = now + T (always)
                  -> if z != current_zone: current_zone = z, broadcast z
    expire()      no qualifying detection for T
                  -> timer re-armed (periodic)
                  -> if not Idle: current_zone = None, broadcast -1

Two contexts drive the tracker: the frame thread (observe/update) and the
idle timer thread (expire). Every event runs inside one critical section of a
single Condition, broadcast included, so broadcasts always leave in state
order and a refresh can never interleave with an expiry.

Shutdown is signalled through an Event set before close() waits for the
lock: a broadcast already in flight completes, nothing queued behind it is
sent.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from marquee_osc.logging import StructuredLogger, LogEvent, create_logger
from marquee_osc.schemas import NO_ZONE
from marquee_zone.geometry.mapper import ConfigurationError

DEFAULT_TIMEOUT_MS = 8000
DEFAULT_QUALIFYING_LABEL = "person"


@dataclass(frozen=True)
class OccupancyState:
    """
    Immutable snapshot of the tracker state.

    Attributes:
        current_zone: Occupied zone index, None when idle
        last_refresh: Clock value of the last qualifying detection
    """

    current_zone: Optional[int] = None
    last_refresh: Optional[float] = None

    @property
    def is_idle(self) -> bool:
        return self.current_zone is None

    @property
    def zone_id(self) -> int:
        """Wire value of current_zone (-1 when idle)."""
        return NO_ZONE if self.current_zone is None else self.current_zone


class OccupancyTracker:
    """
    Edge-triggered occupancy signal with an idle timeout.

    Usage:
        tracker = OccupancyTracker(broadcast=broadcaster.broadcast, timeout_ms=8000)
        tracker.start()                       # idle timer thread

        tracker.update([("person", 0), ("car", 1)])   # per frame

        tracker.close()                       # at shutdown

    For deterministic use (tests, replays) skip start() and drive the timer
    with check_timeout(now) using the same clock values passed to update().
    """

    def __init__(
        self,
        broadcast: Callable[[int], Any],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        qualifying_label: str = DEFAULT_QUALIFYING_LABEL,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Args:
            broadcast: Called with the new zone id (-1 for idle) on every
                transition. A False return or an exception counts as a failed
                send; state is never rolled back.
            timeout_ms: Idle timeout T in milliseconds
            qualifying_label: Only detections with this label refresh the tracker
            clock: Monotonic clock in seconds
            logger: Structured logger (default: component "tracker")

        Raises:
            ConfigurationError: If timeout_ms is not positive
        """
        if timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be > 0, got {timeout_ms}")
        if not qualifying_label:
            raise ConfigurationError("qualifying_label cannot be empty")

        self.timeout_ms = timeout_ms
        self.qualifying_label = qualifying_label
        self.logger = logger or create_logger("tracker")

        self._broadcast = broadcast
        self._timeout = timeout_ms / 1000.0
        self._clock = clock

        self._cond = threading.Condition()
        self._current_zone: Optional[int] = None
        self._last_refresh: Optional[float] = None
        self._deadline = clock() + self._timeout
        self._shutdown = threading.Event()
        self._closed = False
        self._thread: Optional[threading.Thread] = None

        self._stats = {
            'refreshes': 0,
            'transitions': 0,
            'expiries': 0,
            'broadcasts': 0,
            'broadcast_failures': 0,
        }

    # ===== State =====

    @property
    def state(self) -> OccupancyState:
        with self._cond:
            return OccupancyState(
                current_zone=self._current_zone,
                last_refresh=self._last_refresh
            )

    @property
    def current_zone(self) -> Optional[int]:
        with self._cond:
            return self._current_zone

    @property
    def deadline(self) -> float:
        """Clock value at which the idle timer fires next."""
        with self._cond:
            return self._deadline

    @property
    def closed(self) -> bool:
        return self._shutdown.is_set()

    # ===== Frame events =====

    def update(
        self,
        classifications: Optional[Iterable[Tuple[str, Optional[int]]]],
        now: Optional[float] = None
    ) -> int:
        """
        Feed one frame worth of (label, zone) classifications, in order.

        Non-qualifying labels are ignored entirely. None or an empty frame
        means "no qualifying detection this frame".

        Returns:
            Number of transitions (broadcasts) triggered by this frame
        """
        if not classifications:
            return 0

        transitions = 0
        for label, zone in classifications:
            if label != self.qualifying_label:
                continue
            if self.observe(zone, now=now):
                transitions += 1
        return transitions

    def observe(self, zone: Optional[int], now: Optional[float] = None) -> bool:
        """
        Apply one qualifying classification.

        A None zone (point outside every zone) neither refreshes the timer
        nor changes state.

        Returns:
            True if current_zone changed (and a broadcast was issued)
        """
        if zone is None:
            return False

        with self._cond:
            if self._shutdown.is_set():
                return False

            now = self._clock() if now is None else now
            self._last_refresh = now
            self._deadline = now + self._timeout
            self._stats['refreshes'] += 1
            self._cond.notify_all()

            if zone == self._current_zone:
                self.logger.debug(
                    event=LogEvent.ZONE_REFRESHED,
                    message=f"Zone {zone} refreshed",
                    metadata={'zone_id': zone, 'deadline': self._deadline}
                )
                return False

            previous = self._current_zone
            self._current_zone = zone
            self._stats['transitions'] += 1
            self.logger.info(
                event=LogEvent.ZONE_ENTERED,
                message=f"Entered zone {zone}",
                metadata={
                    'zone_id': zone,
                    'previous_zone': NO_ZONE if previous is None else previous
                }
            )
            self._send_locked(zone)
            return True

    # ===== Timer events =====

    def expire(self, now: Optional[float] = None) -> bool:
        """
        Fire the idle timer now, regardless of the deadline.

        Returns:
            True if the tracker went from Occupied to Idle
        """
        with self._cond:
            now = self._clock() if now is None else now
            return self._expire_locked(now)

    def check_timeout(self, now: Optional[float] = None) -> bool:
        """
        Fire the idle timer if its deadline has passed.

        Returns:
            True if the tracker went from Occupied to Idle
        """
        with self._cond:
            now = self._clock() if now is None else now
            if now < self._deadline:
                return False
            return self._expire_locked(now)

    def _expire_locked(self, now: float) -> bool:
        if self._shutdown.is_set():
            return False

        self._deadline = now + self._timeout
        self._stats['expiries'] += 1
        self.logger.debug(
            event=LogEvent.TIMER_EXPIRED,
            message="Idle timer expired",
            metadata={'zone_id': self._zone_id_locked()}
        )

        if self._current_zone is None:
            return False

        previous = self._current_zone
        self._current_zone = None
        self._stats['transitions'] += 1
        self.logger.info(
            event=LogEvent.ZONE_IDLE,
            message=f"No qualifying detection for {self.timeout_ms} ms, going idle",
            metadata={'previous_zone': previous, 'timeout_ms': self.timeout_ms}
        )
        self._send_locked(NO_ZONE)
        return True

    def _zone_id_locked(self) -> int:
        return NO_ZONE if self._current_zone is None else self._current_zone

    def _send_locked(self, zone_id: int) -> None:
        self._stats['broadcasts'] += 1
        try:
            delivered = self._broadcast(zone_id)
        except Exception as e:
            delivered = False
            self.logger.error(
                event=LogEvent.BROADCAST_ERROR,
                message=f"Broadcast of zone {zone_id} raised",
                exc_info=e,
                metadata={'zone_id': zone_id}
            )
        if delivered is False:
            self._stats['broadcast_failures'] += 1

    def _run_timer(self) -> None:
        with self._cond:
            while not self._shutdown.is_set():
                remaining = self._deadline - self._clock()
                if remaining > 0:
                    self._cond.wait(timeout=remaining)
                    continue
                self._expire_locked(self._clock())

    # ===== Lifecycle =====

    def start(self) -> None:
        """
        Start the idle timer thread.

        Raises:
            RuntimeError: If the tracker was already closed
        """
        with self._cond:
            if self._shutdown.is_set():
                raise RuntimeError("Tracker already closed")
            if self._thread is not None:
                return
            if self._last_refresh is None:
                self._deadline = self._clock() + self._timeout
            self._thread = threading.Thread(
                target=self._run_timer,
                name="occupancy-timer",
                daemon=True
            )
            self._thread.start()

        self.logger.info(
            event=LogEvent.TRACKER_STARTED,
            message="Idle timer started",
            metadata={
                'timeout_ms': self.timeout_ms,
                'qualifying_label': self.qualifying_label
            }
        )

    def close(self, timeout: float = 2.0) -> None:
        """
        Stop the timer and refuse further broadcasts. Idempotent.

        An in-flight broadcast holds the lock, so close() returns only after
        it has completed. The shutdown flag is raised first so the timer
        thread, if it gets the lock before close() does, sends nothing.
        """
        self._shutdown.set()
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()
            thread, self._thread = self._thread, None

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

        self.logger.info(
            event=LogEvent.TRACKER_STOPPED,
            message="Tracker closed",
            metadata=self.get_stats()
        )

    def __enter__(self) -> "OccupancyTracker":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_stats(self) -> Dict[str, Any]:
        """Counters plus the current zone id."""
        with self._cond:
            stats = dict(self._stats)
            stats['zone_id'] = self._zone_id_locked()
            stats['closed'] = self._shutdown.is_set()
            return stats
