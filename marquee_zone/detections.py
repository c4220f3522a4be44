"""
Detection Input Module
======================

What the external detector hands the tracker each frame: a label and a box
in model space. Inference, NMS and confidence filtering happen upstream.

The supervision adapter lets an ultralytics/supervision pipeline feed the
tracker without an intermediate format.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import supervision as sv

from marquee_zone.geometry.shapes import Rect


@dataclass(frozen=True)
class Detection:
    """
    One detected object.

    Attributes:
        label: Class name (e.g. "person")
        box: Bounding box in model space
    """

    label: str
    box: Rect

    @classmethod
    def from_dict(cls, data: Dict) -> "Detection":
        """
        Build from {"label": str, "box": [x, y, w, h] | {x, y, width, height}}.

        Raises:
            ValueError: If label or box is missing or malformed
        """
        try:
            label = str(data["label"])
            box = data["box"]
        except KeyError as e:
            raise ValueError(f"Missing required Detection field: {e}")

        if isinstance(box, dict):
            return cls(label=label, box=Rect.from_dict(box))
        if len(box) != 4:
            raise ValueError(f"box must have 4 values, got {box!r}")
        x, y, w, h = (float(v) for v in box)
        return cls(label=label, box=Rect(x=x, y=y, width=w, height=h))


def detections_from_supervision(
    detections: sv.Detections,
    class_names: Optional[Dict[int, str]] = None
) -> List[Detection]:
    """
    Convert supervision detections (xyxy, model space) into Detection objects.

    Labels come from the "class_name" data field when the detector provides
    it, otherwise from class_names[class_id], otherwise "class_<id>".

    Args:
        detections: supervision Detections for one frame
        class_names: Optional mapping {class_id: name}

    Returns:
        List of Detection, in detector order
    """
    if len(detections) == 0:
        return []

    xyxy = np.asarray(detections.xyxy, dtype=float)
    widths = np.clip(xyxy[:, 2] - xyxy[:, 0], 0.0, None)
    heights = np.clip(xyxy[:, 3] - xyxy[:, 1], 0.0, None)

    names = detections.data.get("class_name") if detections.data else None
    class_ids = detections.class_id

    result = []
    for idx in range(len(detections)):
        if names is not None:
            label = str(names[idx])
        elif class_ids is not None:
            class_id = int(class_ids[idx])
            label = class_names.get(class_id, f"class_{class_id}") if class_names else f"class_{class_id}"
        else:
            label = "unknown"

        result.append(Detection(
            label=label,
            box=Rect(
                x=float(xyxy[idx, 0]),
                y=float(xyxy[idx, 1]),
                width=float(widths[idx]),
                height=float(heights[idx]),
            ),
        ))
    return result
