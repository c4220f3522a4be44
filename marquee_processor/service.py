"""
Occupancy Service - wires the occupancy core for one pipeline run.

This module provides the OccupancyService class which builds the
CoordinateMapper, ZoneClassifier, OccupancyTracker and ZoneBroadcaster from a
PresenceConfig and exposes the per-frame entry point to the external capture
loop.

Threading Model:
- Frame thread (external capture loop, calls on_frame)
- Idle timer thread (OccupancyTracker internal)

Both threads go through the tracker's single critical section; the service
itself holds no shared mutable state besides the lifecycle flag.
"""

import logging
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import supervision as sv

from marquee_osc import ZoneBroadcaster, create_logger
from marquee_zone import (
    CoordinateMapper,
    Detection,
    OccupancyPipeline,
    OccupancyTracker,
    ZoneClassifier,
    ZoneHit,
)
from marquee_processor.config import PresenceConfig

logger = logging.getLogger(__name__)


class OccupancyService:
    """
    Occupancy service for a single camera / stage.

    Lifecycle:
        service = OccupancyService(PresenceConfig.from_yaml("presence.yaml"))
        service.start()
        ...
        service.on_frame(detections, canvas_wh=(1280, 720))   # per frame
        ...
        service.stop()

    Shutdown closes the tracker first (timer stopped, in-flight broadcast
    finished, no new ones), then the broadcaster. stop() is idempotent.
    """

    def __init__(
        self,
        config: PresenceConfig,
        broadcaster: Optional[ZoneBroadcaster] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize occupancy service.

        Args:
            config: Presence configuration
            broadcaster: Override the configured broadcaster (tests, dry runs)
            clock: Monotonic clock in seconds for the tracker
        """
        self.config = config
        level = config.log_level_value

        osc = config.osc_config
        self.broadcaster = broadcaster or ZoneBroadcaster(
            host=osc.ip,
            port=osc.port,
            address=osc.address,
            send_timeout=osc.send_timeout,
            logger=create_logger("broadcaster", level=level, service_id=config.service_id),
        )

        self.tracker = OccupancyTracker(
            broadcast=self.broadcaster.broadcast,
            timeout_ms=config.time_to_stationary_ms,
            qualifying_label=config.qualifying_label,
            clock=clock,
            logger=create_logger("tracker", level=level, service_id=config.service_id),
        )

        self.pipeline = OccupancyPipeline(
            mapper=CoordinateMapper(config.model_resolution_wh),
            classifier=ZoneClassifier(config.zone_rects),
            tracker=self.tracker,
            logger=create_logger("pipeline", level=level, service_id=config.service_id),
        )

        self._lifecycle_lock = threading.Lock()
        self._running = False
        self._stopped = False

        if not config.zones:
            logger.warning(
                f"No zones configured for service_id={config.service_id}; "
                f"every detection will classify as no zone"
            )

        logger.info(
            f"OccupancyService initialized for service_id={config.service_id} "
            f"({len(config.zones)} zones, timeout={config.time_to_stationary_ms} ms, "
            f"osc={osc.ip}:{osc.port}{osc.address})"
        )

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the idle timer (non-blocking)."""
        with self._lifecycle_lock:
            if self._running:
                logger.warning("Service already running")
                return
            if self._stopped:
                raise RuntimeError("Service already stopped; build a new one")
            self.tracker.start()
            self._running = True
        logger.info("Occupancy service started")

    def stop(self) -> None:
        """Stop the timer and release the broadcaster. Safe to call twice."""
        with self._lifecycle_lock:
            if self._stopped:
                return
            self._stopped = True
            self._running = False

        self.tracker.close()
        self.broadcaster.close()
        logger.info(f"Occupancy service stopped ({self.tracker.get_stats()})")

    def on_frame(
        self,
        detections: Optional[Iterable[Detection]],
        canvas_wh: Tuple[float, float],
        now: Optional[float] = None,
    ) -> List[ZoneHit]:
        """
        Per-frame entry point for the capture loop.

        Args:
            detections: Filtered detections in model space
            canvas_wh: Display canvas (width, height)
            now: Clock override (replays)

        Returns:
            ZoneHits for overlay rendering
        """
        if self._stopped:
            return []
        return self.pipeline.process_frame(detections, canvas_wh, now=now)

    def on_supervision_frame(
        self,
        detections: sv.Detections,
        canvas_wh: Tuple[float, float],
        class_names: Optional[Dict[int, str]] = None,
    ) -> List[ZoneHit]:
        """on_frame() for supervision Detections."""
        if self._stopped:
            return []
        return self.pipeline.process_supervision(detections, canvas_wh, class_names)

    def __enter__(self) -> "OccupancyService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
