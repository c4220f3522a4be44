"""
Marquee Zone Occupancy
======================

Bounded Context: Zone occupancy for stage/lighting automation.

Turns per-frame person detections into a debounced "occupied zone" signal.

Architecture:

    marquee_zone/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # Rect, Zone
    │   ├── mapper.py      # CoordinateMapper (model -> display space)
    │   └── classifier.py  # ZoneClassifier (first match wins)
    │
    ├── analytics/         # Stateful
    │   └── occupancy.py   # OccupancyTracker (debounce + idle timer)
    │
    ├── detections.py      # Detection input + supervision adapter
    └── pipeline.py        # Per-frame orchestration

Usage:

    from marquee_zone import (
        Rect, CoordinateMapper, ZoneClassifier, OccupancyTracker, OccupancyPipeline,
    )
    from marquee_osc import ZoneBroadcaster, create_logger

    broadcaster = ZoneBroadcaster("127.0.0.1", create_logger("broadcaster"), port=5005)
    tracker = OccupancyTracker(broadcast=broadcaster.broadcast, timeout_ms=8000)
    pipeline = OccupancyPipeline(
        CoordinateMapper((416, 416)),
        ZoneClassifier([Rect(0, 0, 250, 1000), Rect(0, 0, 1000, 1000)]),
        tracker,
    )

    tracker.start()
    for detections, canvas_wh in frames:
        pipeline.process_frame(detections, canvas_wh)
    tracker.close()
"""

from marquee_zone.geometry.shapes import Rect, Zone
from marquee_zone.geometry.mapper import CoordinateMapper, ConfigurationError
from marquee_zone.geometry.classifier import ZoneClassifier, anchor_point

from marquee_zone.analytics.occupancy import OccupancyTracker, OccupancyState

from marquee_zone.detections import Detection, detections_from_supervision

from marquee_zone.pipeline import OccupancyPipeline, ZoneHit

__all__ = [
    # Geometry
    "Rect",
    "Zone",
    "CoordinateMapper",
    "ConfigurationError",
    "ZoneClassifier",
    "anchor_point",
    # Analytics
    "OccupancyTracker",
    "OccupancyState",
    # Input
    "Detection",
    "detections_from_supervision",
    # Pipeline
    "OccupancyPipeline",
    "ZoneHit",
]

__version__ = "1.0.0"
