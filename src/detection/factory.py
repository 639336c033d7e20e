"""
Detector factory.

This is the single entrypoint the rest of the project should use to create a
detector from config.
"""

from __future__ import annotations

from typing import Any, Dict

from models.config import YoloConfig
from .base import Detector
from .yolo_detector import UltralyticsPersonDetector


def create_detector(detection_cfg: Dict[str, Any]) -> Detector:
    backend = detection_cfg.get("backend", "yolo")
    if backend != "yolo":
        raise ValueError(f"Unsupported detection backend: {backend}")

    return UltralyticsPersonDetector(YoloConfig.from_dict(detection_cfg.get("yolo") or {}))
