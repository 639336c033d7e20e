"""
Per-frame classification of detections against the tracking region.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from models.detection import BoundingBox, ClassifiedDetection, Detection
from models.region import TrackingRegion

# Adults are taken to be at least this much taller than the median subject
ADULT_HEIGHT_RATIO = 1.25
# Median height assumed when a frame has no detections
DEFAULT_MEDIAN_HEIGHT = 0.2

# Referee stripe check
REF_MIN_TRANSITIONS = 3
STRIPE_SAMPLE_STEP = 3
STRIPE_MIN_SPAN = 10
STRIPE_LIGHT_BRIGHTNESS = 140
# Percent; below this a pixel counts as black, white or gray
STRIPE_MAX_SATURATION = 25


def is_in_region(detection: Detection, region: TrackingRegion) -> bool:
    """A detection is IN when its box center lies inside the region (edges inclusive)."""
    return region.contains(detection.bbox.mid_x, detection.bbox.mid_y)


def median_height(detections: Sequence[Detection]) -> float:
    heights = sorted(d.bbox.height for d in detections)
    if not heights:
        return DEFAULT_MEDIAN_HEIGHT
    return heights[len(heights) // 2]


def is_likely_ref(
    frame: np.ndarray,
    bbox: BoundingBox,
    min_transitions: int = REF_MIN_TRANSITIONS,
) -> bool:
    """
    Look for a black and white striped jersey on the torso.

    Samples every third pixel down the centre column of the torso (30% to 70%
    of the box height, measured from the top) and counts light/dark flips
    between low-saturation pixels. Colored pixels are ignored so a plain team
    shirt with a logo does not count.

    Args:
        frame: BGR raster, top-left origin.
        bbox: Normalized box of the subject.
        min_transitions: Flips needed to call it a referee.
    """
    h, w = frame.shape[:2]
    if frame.ndim != 3 or h == 0 or w == 0:
        return False

    box_h = bbox.height * h
    torso_top = (1.0 - bbox.max_y) * h + box_h * 0.3
    torso_bottom = torso_top + box_h * 0.4

    x = min(max(int(bbox.mid_x * w), 0), w - 1)
    start = max(0, int(torso_top))
    end = min(h - 1, int(torso_bottom))
    if end <= start + STRIPE_MIN_SPAN:
        return False

    column = frame[start:end:STRIPE_SAMPLE_STEP, x, :3].astype(np.int32)
    brightness = column.sum(axis=1) // 3
    max_c = column.max(axis=1)
    min_c = column.min(axis=1)
    saturation = np.where(max_c > 0, (max_c - min_c) * 100 // np.maximum(max_c, 1), 0)

    light = brightness[saturation < STRIPE_MAX_SATURATION] > STRIPE_LIGHT_BRIGHTNESS
    transitions = int(np.count_nonzero(light[1:] != light[:-1]))
    return transitions >= min_transitions


def classify_detections(
    detections: Sequence[Detection],
    region: TrackingRegion,
    adult_ratio: float = ADULT_HEIGHT_RATIO,
    frame: Optional[np.ndarray] = None,
) -> List[ClassifiedDetection]:
    """
    Tag each detection IN/OUT of the region and flag unusually tall subjects.

    Args:
        detections: Detections from one frame.
        region: The frozen tracking region for the run.
        adult_ratio: Height multiple of the frame median above which a subject
            is flagged as a likely adult.
        frame: The frame the detections came from. Enables the referee check.
    """
    adult_threshold = median_height(detections) * adult_ratio
    return [
        ClassifiedDetection(
            detection=d,
            in_region=is_in_region(d, region),
            is_likely_adult=d.bbox.height >= adult_threshold,
            is_likely_ref=frame is not None and is_likely_ref(frame, d.bbox),
        )
        for d in detections
    ]
