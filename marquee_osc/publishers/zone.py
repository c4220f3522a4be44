"""
Zone Broadcaster
================

Bounded Context: Occupancy Signal Production

Publishes the occupied zone id as an OSC message over UDP.

Message Flow:
    OccupancyTracker → zone id → ZoneBroadcaster → UDP datagram → controller

Example:
    >>> from marquee_osc.publishers import ZoneBroadcaster
    >>> from marquee_osc.logging import create_logger
    >>>
    >>> broadcaster = ZoneBroadcaster(
    ...     host="127.0.0.1",
    ...     port=5005,
    ...     logger=create_logger("broadcaster")
    ... )
    >>> broadcaster.broadcast(2)     # "/test" 2
    >>> broadcaster.broadcast(None)  # "/test" -1
"""

from typing import Optional

from .base import BasePublisher
from ..schemas import OccupancyMessage, DEFAULT_ADDRESS
from ..logging import StructuredLogger, LogEvent


class ZoneBroadcaster(BasePublisher):
    """
    Publisher for occupancy messages.

    Attributes:
        Same as BasePublisher, plus:
        address: OSC address pattern (default: "/test")
    """

    def __init__(
        self,
        host: str,
        logger: StructuredLogger,
        port: int = 5005,
        address: str = DEFAULT_ADDRESS,
        send_timeout: float = 0.25
    ):
        super().__init__(
            host=host,
            port=port,
            logger=logger,
            send_timeout=send_timeout
        )
        self.address = address

    def format_message(self, zone: Optional[int]) -> bytes:
        """
        Encode a zone id as an OSC datagram.

        Args:
            zone: Zone index, -1 or None for idle

        Returns:
            Datagram bytes

        Raises:
            ValueError: If zone is not representable on the wire
        """
        try:
            return OccupancyMessage.for_zone(zone, address=self.address).to_dgram()
        except ValueError as e:
            self.logger.error(
                event=LogEvent.SERIALIZATION_ERROR,
                message="Failed to encode occupancy message",
                exc_info=e,
                metadata={'zone_id': zone, 'address': self.address}
            )
            raise

    def broadcast(self, zone: Optional[int]) -> bool:
        """
        Send the occupancy signal.

        This is the main public API; the tracker calls it on every transition.

        Args:
            zone: Zone index, or None / -1 for idle

        Returns:
            True if sent, False otherwise (never raises on network errors)
        """
        zone_id = -1 if zone is None else zone
        try:
            dgram = self.format_message(zone)
        except ValueError:
            return False

        success = self.publish(dgram)
        if success:
            self.logger.info(
                event=LogEvent.OSC_SEND_SUCCESS,
                message=f"Position: {zone_id}",
                metadata={
                    'zone_id': zone_id,
                    'address': self.address,
                    'endpoint': self.endpoint_label
                }
            )
        else:
            self.logger.warning(
                event=LogEvent.OSC_SEND_FAILED,
                message=f"Broadcast of zone {zone_id} not delivered",
                metadata={'zone_id': zone_id, 'endpoint': self.endpoint_label}
            )
        return success
