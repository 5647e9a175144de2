"""
CPU segmentation backend.

Uses Ultralytics segmentation models if installed. Instance masks are painted
into a dense label buffer so the rest of the pipeline only sees per-pixel
class labels, the same shape a semantic-segmentation model would produce.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import cv2
import numpy as np

from .backend import BACKGROUND_LABEL, SegmentationBackend


@dataclass(frozen=True)
class CpuSegmentationConfig:
    model: str
    conf_threshold: float = 0.25
    classes: Optional[Sequence[int]] = None
    # Added to every model class id so labels can match an external scheme
    label_offset: int = 0


class UltralyticsSegmentationBackend(SegmentationBackend):
    def __init__(self, cfg: CpuSegmentationConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or pass a different segmentation backend."
            ) from e

        self._model = YOLO(cfg.model)

    def segment(self, frame: np.ndarray) -> np.ndarray:
        h, w = frame.shape[:2]
        labels = np.full((h, w), BACKGROUND_LABEL, dtype=np.int32)

        results = self._model.predict(
            source=frame,
            conf=self.cfg.conf_threshold,
            classes=list(self.cfg.classes) if self.cfg.classes is not None else None,
            verbose=False,
        )
        if not results:
            return labels

        r0 = results[0]
        masks = getattr(r0, "masks", None)
        boxes = getattr(r0, "boxes", None)
        if masks is None or boxes is None:
            return labels

        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)
        cls = boxes.cls.cpu().numpy() if hasattr(boxes.cls, "cpu") else np.asarray(boxes.cls)

        # Paint low-confidence masks first so confident ones win overlaps
        for i in np.argsort(conf):
            polygon = masks.xy[i]
            if polygon is None or len(polygon) < 3:
                continue
            label = int(cls[i]) + self.cfg.label_offset
            cv2.fillPoly(labels, [np.asarray(polygon, dtype=np.int32)], label)

        return labels
