"""
Geometric Shapes Module
========================

Pure geometric representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Inclusive-bounds containment (edges belong to the zone)
- Thread-safe by design (immutability)

A Rect carries no notion of which coordinate space it lives in; callers keep
model-space and display-space rectangles apart by where they come from.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Tuple


@dataclass(frozen=True)
class Rect:
    """
    Immutable axis-aligned rectangle.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent (>= 0)
        height: Vertical extent (>= 0)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        """Validate extents."""
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rect extents must be >= 0, got width={self.width}, height={self.height}"
            )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def bottom_center(self) -> Tuple[float, float]:
        """Horizontal center of the bottom edge (where a person stands)."""
        return (self.x + self.width / 2, self.y + self.height)

    def contains(self, px: float, py: float) -> bool:
        """
        Inclusive point containment.

        Args:
            px: Point x-coordinate
            py: Point y-coordinate

        Returns:
            True if x <= px <= x+width and y <= py <= y+height
        """
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def to_dict(self) -> Dict[str, float]:
        """Serialize to JSON-compatible dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> 'Rect':
        """
        Deserialize from dict.

        Raises:
            ValueError: If required keys missing or invalid values
        """
        try:
            return cls(
                x=float(data['x']),
                y=float(data['y']),
                width=float(data['width']),
                height=float(data['height'])
            )
        except KeyError as e:
            raise ValueError(f"Missing required Rect field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid Rect data: {e}")


@dataclass(frozen=True)
class Zone:
    """
    A rectangle tagged with its position in the ordered zone list.

    Order defines match priority; overlapping zones are expected.

    Attributes:
        zone_id: Index in the ordered sequence (0-based)
        rect: Zone bounds in display space
    """

    zone_id: int
    rect: Rect

    def __post_init__(self):
        if self.zone_id < 0:
            raise ValueError(f"zone_id must be >= 0, got {self.zone_id}")

    def contains(self, px: float, py: float) -> bool:
        return self.rect.contains(px, py)
