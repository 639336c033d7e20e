"""
Observation layer for seekable video sources.

This layer abstracts where frames come from (a local file today) from the
export pipeline. Each source implements the FrameSource interface and returns
FrameData objects for requested media times.
"""

from .base import FrameSource, FrameSourceConfig, FrameSourceError
from .opencv_source import OpenCVFrameSource, OpenCVFrameSourceConfig

__all__ = [
    "FrameSource",
    "FrameSourceConfig",
    "FrameSourceError",
    "OpenCVFrameSource",
    "OpenCVFrameSourceConfig",
]
