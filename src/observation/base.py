"""
FrameSource interface for seekable video sources.

This defines the contract the export pipeline needs from a video asset:
- its duration
- its video track properties (natural size, frame rate)
- a decoded frame at a requested media time, within a tolerance

Sources are opened once per run and may be reopened; the sampler and the
export loop both seek by time rather than reading sequentially.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from models.frame import FrameData
from models.video import VideoProperties


class FrameSourceError(RuntimeError):
    """Raised when a source cannot be opened, probed, or decoded."""


@dataclass
class FrameSourceConfig:
    """
    Base configuration for frame sources.

    Attributes:
        path: Path (or URL) of the video asset.
        source_id: Identifier for this source, used in logs and FrameData.
        tolerance: Max allowed difference in seconds between the requested
            and the decoded frame time.
    """
    path: str = ""
    source_id: str = "default"
    tolerance: float = 0.1


class FrameSource(ABC):
    """
    Abstract base class for frame sources.

    Lifecycle:
        1. Create instance with config
        2. Call open() to initialize the source
        3. Call duration(), track_properties(), frame_at() as needed
        4. Call close() to release resources

    Can also be used as a context manager:
        with OpenCVFrameSource(config) as source:
            frame_data = source.frame_at(12.5)
    """

    def __init__(self, config: FrameSourceConfig):
        self._config = config
        self._is_open = False

    @property
    def source_id(self) -> str:
        """Unique identifier for this source."""
        return self._config.source_id

    @property
    def path(self) -> str:
        return self._config.path

    @property
    def tolerance(self) -> float:
        """Default timestamp tolerance in seconds."""
        return self._config.tolerance

    @property
    def is_open(self) -> bool:
        """Whether the source is currently open."""
        return self._is_open

    @abstractmethod
    def open(self) -> None:
        """
        Open the source.

        Raises:
            FrameSourceError: If the asset cannot be opened.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Release the source. Safe to call multiple times.
        """
        pass

    @abstractmethod
    def duration(self) -> float:
        """
        Length of the asset in seconds.

        Raises:
            FrameSourceError: If the duration cannot be determined.
        """
        pass

    @abstractmethod
    def track_properties(self) -> VideoProperties:
        """
        Properties of the video track.

        Raises:
            FrameSourceError: If there is no video track or it cannot be probed.
        """
        pass

    @abstractmethod
    def frame_at(self, time_seconds: float, tolerance: Optional[float] = None) -> FrameData:
        """
        Decode the frame at a media time.

        Args:
            time_seconds: Requested media time.
            tolerance: Allowed drift in seconds; defaults to the configured one.

        Raises:
            FrameSourceError: If no frame within tolerance can be decoded.
        """
        pass

    def __enter__(self) -> "FrameSource":
        """Context manager entry - opens the source."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the source."""
        self.close()
