"""
Occupancy Pipeline Module
=========================

Bounded Context: Per-frame orchestration.

    detections (model space) ─► CoordinateMapper ─► anchor point
        ─► ZoneClassifier ─► OccupancyTracker ─► broadcast

Design:
- Orchestration only; every computation is delegated
- Called once per frame, sequentially, by the external capture loop
- Never raises on frame data (empty or None detections are a valid frame)
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import supervision as sv

from marquee_osc.logging import StructuredLogger, LogEvent, create_logger
from marquee_zone.analytics.occupancy import OccupancyTracker
from marquee_zone.detections import Detection, detections_from_supervision
from marquee_zone.geometry.classifier import ZoneClassifier, anchor_point
from marquee_zone.geometry.mapper import CoordinateMapper
from marquee_zone.geometry.shapes import Rect


@dataclass(frozen=True)
class ZoneHit:
    """
    Classification of one detection, for overlays.

    Attributes:
        label: Detection label
        box: Box in display space
        anchor: (x, y) point used for classification
        zone: Matching zone index, None if outside every zone
    """

    label: str
    box: Rect
    anchor: Tuple[int, int]
    zone: Optional[int]

    @property
    def caption(self) -> str:
        """Overlay text, e.g. "person=>640x700"."""
        return f"{self.label}=>{self.anchor[0]}x{self.anchor[1]}"


class OccupancyPipeline:
    """
    Wires mapper, classifier and tracker together for one pipeline run.

    Usage:
        pipeline = OccupancyPipeline(mapper, classifier, tracker)
        hits = pipeline.process_frame(detections, canvas_wh=(1280, 720))
    """

    def __init__(
        self,
        mapper: CoordinateMapper,
        classifier: ZoneClassifier,
        tracker: OccupancyTracker,
        logger: Optional[StructuredLogger] = None
    ):
        self.mapper = mapper
        self.classifier = classifier
        self.tracker = tracker
        self.logger = logger or create_logger("pipeline")
        self._frame_count = 0

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def classify(
        self,
        detections: Optional[Iterable[Detection]],
        canvas_wh: Tuple[float, float]
    ) -> List[ZoneHit]:
        """Map and classify detections without touching the tracker."""
        hits = []
        for det in detections or ():
            box = self.mapper.map_box(det.box, canvas_wh)
            anchor = anchor_point(box)
            hits.append(ZoneHit(
                label=det.label,
                box=box,
                anchor=anchor,
                zone=self.classifier.classify(anchor),
            ))
        return hits

    def process_frame(
        self,
        detections: Optional[Iterable[Detection]],
        canvas_wh: Tuple[float, float],
        now: Optional[float] = None
    ) -> List[ZoneHit]:
        """
        Classify one frame and feed the tracker.

        Args:
            detections: Detections in model space (None/empty allowed)
            canvas_wh: Current display canvas (width, height)
            now: Clock override for deterministic replays

        Returns:
            One ZoneHit per detection, in detector order
        """
        hits = self.classify(detections, canvas_wh)
        self._frame_count += 1

        transitions = self.tracker.update(
            [(hit.label, hit.zone) for hit in hits],
            now=now
        )

        self.logger.debug(
            event=LogEvent.FRAME_PROCESSED,
            message=f"Classified {len(hits)} detections",
            metadata={
                'frame': self._frame_count,
                'hits': [hit.caption for hit in hits],
                'transitions': transitions
            }
        )
        return hits

    def process_supervision(
        self,
        detections: sv.Detections,
        canvas_wh: Tuple[float, float],
        class_names: Optional[Dict[int, str]] = None,
        now: Optional[float] = None
    ) -> List[ZoneHit]:
        """process_frame() for supervision Detections in model space."""
        return self.process_frame(
            detections_from_supervision(detections, class_names),
            canvas_wh,
            now=now
        )
