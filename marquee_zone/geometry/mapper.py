"""
Coordinate Mapper Module
========================

Rescales detector boxes from model space to display space.

The detector works on a fixed input resolution (e.g. 416x416) while the
canvas the zones are drawn on follows the window size. Boxes are clamped to
the visible area in model space first and scaled afterwards, so a box that
hangs off the frame never produces a negative or oversized display rect.
"""

from typing import Tuple

from marquee_zone.geometry.shapes import Rect


class ConfigurationError(ValueError):
    """Raised for unusable mapper/tracker configuration."""


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class CoordinateMapper:
    """
    Model-space to display-space box mapping.

    Attributes:
        model_resolution_wh: (width, height) of the detector input
    """

    def __init__(self, model_resolution_wh: Tuple[int, int] = (416, 416)):
        """
        Args:
            model_resolution_wh: Detector input size in pixels

        Raises:
            ConfigurationError: If either dimension is not positive
        """
        model_w, model_h = model_resolution_wh
        if model_w <= 0 or model_h <= 0:
            raise ConfigurationError(
                f"model_resolution_wh must be positive, got {model_resolution_wh}"
            )
        self.model_resolution_wh = (model_w, model_h)

    def map_box(self, box: Rect, display_wh: Tuple[float, float]) -> Rect:
        """
        Map a model-space box onto the display canvas.

        Clamp (model space):
            x0 = clamp(x, 0, Wd), w0 = clamp(width, 0, Wd - x0)
        Scale:
            x' = x0 * Wd / Wm,   width' = w0 * Wd / Wm
        (same for y/height with Hd/Hm)

        Args:
            box: Detection box in model space
            display_wh: Current canvas (width, height); zero gives a
                zero-area rect

        Returns:
            Display-space Rect (never raises on per-frame data)
        """
        model_w, model_h = self.model_resolution_wh
        display_w = max(float(display_wh[0]), 0.0)
        display_h = max(float(display_wh[1]), 0.0)

        x = _clamp(box.x, 0.0, display_w)
        y = _clamp(box.y, 0.0, display_h)
        width = _clamp(box.width, 0.0, display_w - x)
        height = _clamp(box.height, 0.0, display_h - y)

        return Rect(
            x=display_w * x / model_w,
            y=display_h * y / model_h,
            width=display_w * width / model_w,
            height=display_h * height / model_h,
        )
