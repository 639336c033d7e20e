"""
Action center tracking for zoom-in-post output.

The action center is the area-weighted mean center of the in-region subjects
and any referees, wherever they stand. Larger boxes are closer to the camera and pull harder. It is eased toward
each new target so the crop window does not jump between frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from models.detection import ClassifiedDetection


@dataclass(frozen=True)
class ActionCenter:
    """Normalized point, bottom-left origin."""
    x: float = 0.5
    y: float = 0.5


def calculate_action_center(
    people: Sequence[ClassifiedDetection],
    fallback: ActionCenter = ActionCenter(),
) -> ActionCenter:
    """
    Area-weighted center of the subjects inside the tracking region, plus
    referees. Referees follow the play even from the sideline.

    Returns the fallback when nobody qualifies.
    """
    total_weight = 0.0
    weighted_x = 0.0
    weighted_y = 0.0
    for person in people:
        if not (person.in_region or person.is_likely_ref):
            continue
        weight = person.bbox.area
        weighted_x += person.bbox.mid_x * weight
        weighted_y += person.bbox.mid_y * weight
        total_weight += weight

    if total_weight <= 0:
        return fallback
    return ActionCenter(x=weighted_x / total_weight, y=weighted_y / total_weight)


def smooth_action_center(
    current: ActionCenter,
    target: ActionCenter,
    smoothing: float = 0.2,
) -> ActionCenter:
    """Move a fraction of the way from current toward target."""
    return ActionCenter(
        x=current.x + (target.x - current.x) * smoothing,
        y=current.y + (target.y - current.y) * smoothing,
    )


def crop_window(
    frame_width: int,
    frame_height: int,
    center: ActionCenter,
    zoom_factor: float,
) -> Tuple[int, int, int, int]:
    """
    Pixel crop window (x1, y1, x2, y2), top-left origin, centered on the action
    center and shifted to stay inside the frame.
    """
    crop_w = int(frame_width / zoom_factor)
    crop_h = int(frame_height / zoom_factor)
    x1 = int(center.x * frame_width - crop_w / 2)
    y1 = int((1.0 - center.y) * frame_height - crop_h / 2)
    x1 = int(np.clip(x1, 0, frame_width - crop_w))
    y1 = int(np.clip(y1, 0, frame_height - crop_h))
    return (x1, y1, x1 + crop_w, y1 + crop_h)


def crop_around_action_center(
    frame: np.ndarray,
    center: ActionCenter,
    zoom_factor: float,
) -> np.ndarray:
    """Crop a frame around the action center. zoom_factor 2.0 keeps half of each axis."""
    if zoom_factor < 1.0:
        raise ValueError(f"zoom_factor must be >= 1.0, got {zoom_factor}")
    h, w = frame.shape[:2]
    x1, y1, x2, y2 = crop_window(w, h, center, zoom_factor)
    return frame[y1:y2, x1:x2]
