"""
Algorithms for the region export pipeline.

- heatmap: Activity grid accumulation from detected boxes
- region: Tracking region estimation from a populated grid
- classify: IN/OUT classification of detections against the region, referee check
- action: Action center tracking for zoomed output
"""

from .heatmap import ActivityGrid, accumulate, build_activity_grid
from .region import estimate_tracking_region
from .classify import classify_detections, is_in_region, is_likely_ref
from .action import (
    ActionCenter,
    calculate_action_center,
    smooth_action_center,
    crop_around_action_center,
)

__all__ = [
    "ActivityGrid",
    "accumulate",
    "build_activity_grid",
    "estimate_tracking_region",
    "classify_detections",
    "is_in_region",
    "is_likely_ref",
    "ActionCenter",
    "calculate_action_center",
    "smooth_action_center",
    "crop_around_action_center",
]
