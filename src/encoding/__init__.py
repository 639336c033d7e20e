"""
Encoding layer for the rendered output video.

Sinks implement the VideoSink interface: a readiness signal, ordered pushes
with presentation timestamps, and an explicit finish or abandon.
"""

from .base import SinkError, VideoSink
from .opencv_sink import OpenCVSinkConfig, OpenCVVideoSink

__all__ = [
    "SinkError",
    "VideoSink",
    "OpenCVSinkConfig",
    "OpenCVVideoSink",
]
