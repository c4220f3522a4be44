"""
Publishers
==========

Bounded Context: Message Production

    BasePublisher: connectionless UDP send with bounded timeout
    ZoneBroadcaster: occupancy signal ("/test" <zone id>)
"""

from .base import BasePublisher
from .zone import ZoneBroadcaster

__all__ = [
    'BasePublisher',
    'ZoneBroadcaster',
]
