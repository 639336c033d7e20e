"""
Ultralytics YOLO person detector.

Uses Ultralytics if installed. Pixel boxes from the model are converted to
normalized bottom-left origin boxes before they leave this module.
"""

from __future__ import annotations

from typing import List

import numpy as np

from models.config import YoloConfig
from models.detection import BoundingBox, Detection
from .base import Detector


class UltralyticsPersonDetector(Detector):
    def __init__(self, cfg: YoloConfig):
        self.cfg = cfg
        try:
            from ultralytics import YOLO  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "Ultralytics is not installed. Install with `pip install ultralytics` "
                "or pass your own Detector to the pipeline."
            ) from e

        self._model = YOLO(cfg.model)

    def detect(self, frame: np.ndarray) -> List[Detection]:
        results = self._model.predict(
            source=frame,
            conf=self.cfg.conf_threshold,
            iou=self.cfg.iou_threshold,
            classes=list(self.cfg.classes) if self.cfg.classes is not None else None,
            verbose=False,
        )
        if not results:
            return []

        r0 = results[0]
        names = getattr(r0, "names", None) or {}
        boxes = getattr(r0, "boxes", None)
        if boxes is None:
            return []

        xyxy = boxes.xyxy.cpu().numpy() if hasattr(boxes.xyxy, "cpu") else np.asarray(boxes.xyxy)
        conf = boxes.conf.cpu().numpy() if hasattr(boxes.conf, "cpu") else np.asarray(boxes.conf)
        cls = boxes.cls.cpu().numpy() if hasattr(boxes.cls, "cpu") else np.asarray(boxes.cls)

        frame_h, frame_w = frame.shape[:2]
        out: List[Detection] = []
        for (x1, y1, x2, y2), c, k in zip(xyxy, conf, cls):
            class_id = int(k)
            out.append(
                Detection(
                    bbox=BoundingBox.from_pixels(
                        float(x1), float(y1), float(x2), float(y2), frame_w, frame_h
                    ),
                    confidence=float(c),
                    class_id=class_id,
                    class_name=names.get(class_id) or str(class_id),
                )
            )

        return out
