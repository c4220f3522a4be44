"""
Structured Logging for Marquee
==============================

Bounded Context: Observability

JSON-structured logging shared by the tracker, the broadcaster and the
listener.

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function

Example:
    >>> from marquee_osc.logging import StructuredLogger, LogEvent
    >>> logger = StructuredLogger(component="broadcaster")
    >>> logger.info(
    ...     event=LogEvent.OSC_SEND_SUCCESS,
    ...     message="Sent /test 2",
    ...     metadata={'endpoint': '127.0.0.1:5005', 'zone_id': 2}
    ... )
"""

from .events import LogEvent
from .structured import StructuredLogger, create_logger

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
]
