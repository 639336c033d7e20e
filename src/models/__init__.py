"""
Typed models for the region export pipeline.

These models are shared by the source, detection, estimation, rendering and
encoding layers. Use the adapter methods to convert from pixel coordinates
and raw config dicts.
"""

from .frame import FrameData
from .detection import BoundingBox, Detection, ClassifiedDetection
from .region import TrackingRegion, WIDE_DEFAULT_REGION, TIGHT_DEFAULT_REGION
from .video import VideoProperties
from .config import (
    Config,
    SourceConfig,
    DetectionConfig,
    YoloConfig,
    HeatmapConfig,
    RegionConfig,
    ExportConfig,
)

__all__ = [
    # Frame
    "FrameData",
    "VideoProperties",
    # Detection
    "BoundingBox",
    "Detection",
    "ClassifiedDetection",
    # Region
    "TrackingRegion",
    "WIDE_DEFAULT_REGION",
    "TIGHT_DEFAULT_REGION",
    # Config
    "Config",
    "SourceConfig",
    "DetectionConfig",
    "YoloConfig",
    "HeatmapConfig",
    "RegionConfig",
    "ExportConfig",
]
