"""
Geometry Layer
==============

Bounded Context: Pure geometric shapes and spatial queries.

Responsibilities:
- Shape representation (immutable)
- Model-space to display-space mapping
- Ordered point-in-zone classification
- NO state, NO timers, NO networking
"""

from marquee_zone.geometry.shapes import Rect, Zone
from marquee_zone.geometry.mapper import CoordinateMapper, ConfigurationError
from marquee_zone.geometry.classifier import ZoneClassifier, anchor_point

__all__ = [
    "Rect",
    "Zone",
    "CoordinateMapper",
    "ConfigurationError",
    "ZoneClassifier",
    "anchor_point",
]
