"""
Occupancy Message Schema
========================

Bounded Context: Wire Format

One OSC message per occupancy change:

    address pattern: "/test"
    arguments:       one int32, the zone id (-1 when no zone is occupied)

Design:
- Frozen dataclass (immutability)
- Encoding/decoding delegated to python-osc
- Validation in __post_init__ (int32 range, -1 sentinel)
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from pythonosc.osc_message import OscMessage, ParseError
from pythonosc.osc_message_builder import OscMessageBuilder, BuildError

DEFAULT_ADDRESS = "/test"
NO_ZONE = -1

_INT32_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class OccupancyMessage:
    """
    Immutable occupancy broadcast.

    Attributes:
        zone_id: Occupied zone index, or -1 for idle
        address: OSC address pattern

    Example:
        >>> msg = OccupancyMessage.for_zone(None)
        >>> msg.zone_id
        -1
        >>> OccupancyMessage.from_dgram(msg.to_dgram()) == msg
        True
    """
    zone_id: int
    address: str = DEFAULT_ADDRESS

    def __post_init__(self):
        """Validate invariants."""
        if isinstance(self.zone_id, bool) or not isinstance(self.zone_id, int):
            raise ValueError(f"zone_id must be an int, got {self.zone_id!r}")
        if not NO_ZONE <= self.zone_id <= _INT32_MAX:
            raise ValueError(
                f"zone_id must be in [{NO_ZONE}, {_INT32_MAX}], got {self.zone_id}"
            )
        if not self.address.startswith("/"):
            raise ValueError(f"OSC address must start with '/', got {self.address!r}")

    @classmethod
    def for_zone(cls, zone: Optional[int], address: str = DEFAULT_ADDRESS) -> 'OccupancyMessage':
        """Build a message from a tracker zone value (None -> -1)."""
        return cls(zone_id=NO_ZONE if zone is None else zone, address=address)

    @property
    def is_idle(self) -> bool:
        return self.zone_id == NO_ZONE

    @property
    def zone(self) -> Optional[int]:
        """Zone id as the tracker sees it (-1 -> None)."""
        return None if self.is_idle else self.zone_id

    def to_dgram(self) -> bytes:
        """
        Encode as an OSC datagram.

        Raises:
            ValueError: If python-osc refuses the message
        """
        builder = OscMessageBuilder(address=self.address)
        builder.add_arg(self.zone_id, arg_type=OscMessageBuilder.ARG_TYPE_INT)
        try:
            return builder.build().dgram
        except BuildError as e:
            raise ValueError(f"Failed to build OSC message: {e}") from e

    @classmethod
    def from_dgram(cls, dgram: bytes) -> 'OccupancyMessage':
        """
        Decode an OSC datagram.

        Raises:
            ValueError: If the datagram is not a single-int OSC message
        """
        if not OscMessage.dgram_is_message(dgram):
            raise ValueError("Datagram is not an OSC message")
        try:
            osc = OscMessage(dgram)
        except ParseError as e:
            raise ValueError(f"Invalid OSC datagram: {e}") from e

        params = list(osc.params)
        if len(params) != 1 or isinstance(params[0], bool) or not isinstance(params[0], int):
            raise ValueError(
                f"Expected a single int argument on {osc.address}, got {params!r}"
            )
        return cls(zone_id=params[0], address=osc.address)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JSON-compatible dict (for logs)."""
        return asdict(self)
