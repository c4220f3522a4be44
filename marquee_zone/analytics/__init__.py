"""
Analytics Layer
===============

Bounded Context: Stateful occupancy over time.

Responsibilities:
- Debounce state machine (OccupancyTracker)
- Idle timer ownership
- Edge-triggered broadcast calls
"""

from marquee_zone.analytics.occupancy import (
    OccupancyTracker,
    OccupancyState,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_QUALIFYING_LABEL,
)

__all__ = [
    "OccupancyTracker",
    "OccupancyState",
    "DEFAULT_TIMEOUT_MS",
    "DEFAULT_QUALIFYING_LABEL",
]
