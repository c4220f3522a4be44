"""
Marquee OSC Communication Package
=================================

Bounded Context: Occupancy signal transport

This package sends the debounced occupied-zone signal to external controllers
(stage/lighting automation) as OSC messages over UDP, and can listen for them.

Architecture:
- schemas/: Immutable wire messages (OccupancyMessage)
- publishers/: Message producers (ZoneBroadcaster)
- subscriber.py: OccupancyListener (python-osc server)
- logging/: Structured JSON logging for observability

Public API
----------
Schemas:
    OccupancyMessage, DEFAULT_ADDRESS, NO_ZONE

Publishers:
    BasePublisher, ZoneBroadcaster

Listener:
    OccupancyListener

Logging:
    LogEvent, StructuredLogger, create_logger

Example:
    >>> from marquee_osc import ZoneBroadcaster, create_logger
    >>> broadcaster = ZoneBroadcaster(
    ...     host="127.0.0.1",
    ...     port=5005,
    ...     logger=create_logger("broadcaster")
    ... )
    >>> broadcaster.broadcast(0)
    True
"""

__version__ = "1.0.0"

from .schemas import (
    OccupancyMessage,
    DEFAULT_ADDRESS,
    NO_ZONE,
)

from .publishers import (
    BasePublisher,
    ZoneBroadcaster,
)

from .subscriber import OccupancyListener

from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
)

__all__ = [
    '__version__',
    # Schemas
    'OccupancyMessage',
    'DEFAULT_ADDRESS',
    'NO_ZONE',
    # Publishers
    'BasePublisher',
    'ZoneBroadcaster',
    # Listener
    'OccupancyListener',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
