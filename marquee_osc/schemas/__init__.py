"""
Marquee OSC Schemas
===================

Bounded Context: Data Structures

Immutable, typed wire messages.

Public API
----------
    OccupancyMessage: zone id broadcast (-1 = idle)
    DEFAULT_ADDRESS: "/test"
    NO_ZONE: -1
"""

from .occupancy import OccupancyMessage, DEFAULT_ADDRESS, NO_ZONE

__all__ = [
    'OccupancyMessage',
    'DEFAULT_ADDRESS',
    'NO_ZONE',
]
