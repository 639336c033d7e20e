"""
Video track properties.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class VideoProperties:
    """
    Properties of a source video track.

    Attributes:
        width: Natural width in pixels.
        height: Natural height in pixels.
        fps: Nominal frame rate.
    """
    width: int
    height: int
    fps: float

    @property
    def natural_size(self) -> Tuple[int, int]:
        """Return (width, height)."""
        return (self.width, self.height)
