"""
Detection recordings.

A recording is a JSON-lines file, one frame per line:

    {"t": 0.0, "canvas": [1280, 720], "detections": [{"label": "person", "box": [120, 40, 60, 300]}]}

`t` is seconds since the start of the recording; boxes are in model space.
Recordings let a venue tune zones and the stationary timeout offline, either
in real time (idle timer thread running) or accelerated on a manual clock.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Tuple

from marquee_zone import Detection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedFrame:
    """One frame of a recording."""

    t: float
    canvas_wh: Tuple[float, float]
    detections: List[Detection]

    @classmethod
    def from_dict(cls, data: dict) -> "RecordedFrame":
        """
        Raises:
            ValueError: If the record is malformed
        """
        try:
            canvas = data["canvas"]
            t = float(data.get("t", 0.0))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid frame record: {e}")
        if len(canvas) != 2:
            raise ValueError(f"canvas must be [width, height], got {canvas!r}")

        return cls(
            t=t,
            canvas_wh=(float(canvas[0]), float(canvas[1])),
            detections=[Detection.from_dict(d) for d in data.get("detections", [])],
        )


class ManualClock:
    """Clock that only moves when told to (accelerated replays, tests)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_to(self, t: float) -> None:
        if t < self.now:
            raise ValueError(f"Clock cannot go backwards ({t} < {self.now})")
        self.now = t


def read_recording(path: Path) -> Iterator[RecordedFrame]:
    """
    Iterate frames of a JSON-lines recording.

    Blank lines are skipped.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On a malformed line (line number included)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Recording not found: {path}")

    with open(path) as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield RecordedFrame.from_dict(json.loads(line))
            except (json.JSONDecodeError, ValueError) as e:
                raise ValueError(f"{path}:{line_no}: {e}")


def replay_realtime(
    on_frame: Callable,
    frames: Iterable[RecordedFrame],
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """
    Feed frames at their recorded pace; the tracker's own timer thread
    handles expiries.

    Returns:
        Number of frames fed
    """
    count = 0
    start = clock()
    for frame in frames:
        delay = frame.t - (clock() - start)
        if delay > 0:
            sleep(delay)
        on_frame(frame.detections, frame.canvas_wh)
        count += 1
    return count


def wait_for_idle(
    tracker,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """
    Block until the running idle timer has released the current zone.

    Ends a real-time replay the way drain=True ends an accelerated one: the
    trailing -1 goes out before the service is stopped.
    """
    while tracker.current_zone is not None and not tracker.closed:
        sleep(max(tracker.deadline - clock(), 0.01))


def replay_accelerated(
    service,
    frames: Iterable[RecordedFrame],
    clock: ManualClock,
    drain: bool = True,
) -> int:
    """
    Feed frames as fast as possible on a manual clock.

    The service must have been built with `clock` and not started; the idle
    timer is checked before every frame. With drain=True the recording is
    followed by one full timeout of silence.

    Returns:
        Number of frames fed
    """
    tracker = service.tracker
    count = 0
    for frame in frames:
        clock.advance_to(frame.t)
        tracker.check_timeout()
        service.on_frame(frame.detections, frame.canvas_wh)
        count += 1

    if drain:
        clock.advance_to(tracker.deadline)
        tracker.check_timeout()

    logger.info(f"Replayed {count} frames ({tracker.get_stats()})")
    return count
