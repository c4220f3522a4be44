"""
marquee_processor - Occupancy service for stage automation

This package wires the zone occupancy core to its configuration and exposes
the per-frame entry point used by the capture/inference loop.

Architecture:
- OccupancyService: builds mapper, classifier, tracker and broadcaster
- PresenceConfig: YAML configuration (zones, OSC endpoint, timeout)
- recording: JSON-lines detection recordings and replays

Threading Model:
- Frame thread (external capture loop, calls on_frame)
- Idle timer thread (OccupancyTracker internal)
"""

from marquee_processor.config import PresenceConfig, ZoneConfig, OSCConfig
from marquee_processor.recording import (
    RecordedFrame,
    ManualClock,
    read_recording,
    replay_realtime,
    replay_accelerated,
    wait_for_idle,
)
from marquee_processor.service import OccupancyService

__all__ = [
    "PresenceConfig",
    "ZoneConfig",
    "OSCConfig",
    "RecordedFrame",
    "ManualClock",
    "read_recording",
    "replay_realtime",
    "replay_accelerated",
    "wait_for_idle",
    "OccupancyService",
]
