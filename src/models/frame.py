"""
FrameData model for decoded video frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True, eq=False)
class FrameData:
    """
    One decoded frame of a video asset.

    Attributes:
        frame: BGR raster, top-left origin.
        timestamp: Media time of the frame in seconds, as reported by the decoder.
        frame_index: Index of the frame in the source video.
        source: Identifier for the video source.
    """
    frame: np.ndarray
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Wrap a decoded raster. Rejects anything that is not a non-empty 2D or 3D image."""
        if frame.ndim not in (2, 3) or frame.size == 0:
            raise ValueError(f"Not an image raster: shape {frame.shape}")
        return cls(frame=frame, timestamp=float(timestamp), frame_index=frame_index, source=source)

    @property
    def width(self) -> int:
        return self.frame.shape[1]

    @property
    def height(self) -> int:
        return self.frame.shape[0]
