"""
Zone Classifier Module
======================

Stateless point-in-zone classification over an ordered zone list.

Design:
- First match wins (declaration order is the priority)
- Total function: any point, any zone list (including empty) is valid
- Thread-safe (zones are an immutable tuple)
"""

import math
from typing import Iterable, Optional, Tuple

from marquee_zone.geometry.shapes import Rect, Zone


def anchor_point(box: Rect) -> Tuple[int, int]:
    """
    Representative point of a display-space box.

    Horizontal center and bottom edge, truncated to whole pixels.
    """
    cx, bottom = box.bottom_center
    return (math.trunc(cx), math.trunc(bottom))


class ZoneClassifier:
    """
    Classifies points against an ordered sequence of rectangular zones.

    Attributes:
        zones: Tuple of Zone, zone_id == position
    """

    def __init__(self, zones: Iterable[Rect]):
        self.zones: Tuple[Zone, ...] = tuple(
            Zone(zone_id=index, rect=rect) for index, rect in enumerate(zones)
        )

    def __len__(self) -> int:
        return len(self.zones)

    def classify(self, point: Tuple[float, float]) -> Optional[int]:
        """
        Find the first zone containing the point.

        Args:
            point: (x, y) in display space

        Returns:
            Lowest matching zone index, or None if no zone contains the point
        """
        px, py = point
        for zone in self.zones:
            if zone.contains(px, py):
                return zone.zone_id
        return None

    def classify_box(self, box: Rect) -> Optional[int]:
        """Classify the anchor point of a display-space box."""
        return self.classify(anchor_point(box))
