"""
OpenCV-based frame source for video files.

Wraps cv2.VideoCapture and resolves media times to frame indices. Short
forward jumps are served by grabbing frames sequentially, which is much
cheaper than a decoder seek; everything else seeks by frame index.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import cv2

from models.frame import FrameData
from models.video import VideoProperties
from .base import FrameSource, FrameSourceConfig, FrameSourceError


@dataclass
class OpenCVFrameSourceConfig(FrameSourceConfig):
    """
    Configuration for OpenCV-based frame sources.

    Attributes:
        max_grab_ahead: Largest forward jump, in frames, served by grabbing
            instead of seeking.
    """
    max_grab_ahead: int = 30

    @classmethod
    def from_source_config(
        cls,
        path: str,
        source_cfg: Dict[str, Any],
        source_id: str = "video",
    ) -> "OpenCVFrameSourceConfig":
        """
        Adapter: Create OpenCVFrameSourceConfig from the `source` config dict.

        Args:
            path: Path of the video file.
            source_cfg: Source configuration dict (from config.yaml).
            source_id: Identifier for this source.
        """
        return cls(
            path=path,
            source_id=source_id,
            tolerance=float(source_cfg.get("tolerance", 0.1)),
            max_grab_ahead=int(source_cfg.get("max_grab_ahead", 30)),
        )


class OpenCVFrameSource(FrameSource):
    """
    Seekable frame source backed by cv2.VideoCapture.

    Example:
        config = OpenCVFrameSourceConfig(path="game.mp4", tolerance=0.1)
        with OpenCVFrameSource(config) as source:
            print(source.duration())
            frame_data = source.frame_at(30.0)
    """

    def __init__(self, config: OpenCVFrameSourceConfig):
        super().__init__(config)
        self._opencv_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._next_index = 0

    def open(self) -> None:
        """Open the video file."""
        if self._is_open:
            return

        if not os.path.exists(self.path):
            raise FrameSourceError(f"Video not found: {self.path}")

        self._cap = cv2.VideoCapture(self.path)
        if not self._cap.isOpened():
            self._cap.release()
            self._cap = None
            raise FrameSourceError(f"Failed to open video {self.path}")

        self._is_open = True
        self._next_index = 0
        logging.info(f"OpenCVFrameSource opened: source_id={self.source_id}, path={self.path}")

    def close(self) -> None:
        """Close the video and release resources."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        if self._is_open:
            logging.info(f"OpenCVFrameSource closed: source_id={self.source_id}")
        self._is_open = False

    def _require_cap(self) -> cv2.VideoCapture:
        if not self._is_open or self._cap is None:
            raise FrameSourceError(f"Source {self.source_id} is not open")
        return self._cap

    def _fps(self) -> float:
        fps = self._require_cap().get(cv2.CAP_PROP_FPS)
        if not fps or fps <= 0:
            raise FrameSourceError(f"Unreadable frame rate for {self.path}")
        return float(fps)

    def duration(self) -> float:
        cap = self._require_cap()
        frame_count = cap.get(cv2.CAP_PROP_FRAME_COUNT)
        if not frame_count or frame_count <= 0:
            raise FrameSourceError(f"Unreadable duration for {self.path}")
        return float(frame_count) / self._fps()

    def track_properties(self) -> VideoProperties:
        cap = self._require_cap()
        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if width <= 0 or height <= 0:
            raise FrameSourceError(f"No video track found in {self.path}")
        return VideoProperties(width=width, height=height, fps=self._fps())

    @staticmethod
    def _decoded_time(cap: cv2.VideoCapture, index: int, fps: float) -> float:
        """Media time of the frame just read, as reported by the decoder."""
        pos_msec = cap.get(cv2.CAP_PROP_POS_MSEC)
        # Streams without timestamps report 0 (or -1) past the first frame
        if pos_msec is None or pos_msec < 0 or (pos_msec == 0 and index > 0):
            return index / fps
        return pos_msec / 1000.0

    def frame_at(self, time_seconds: float, tolerance: Optional[float] = None) -> FrameData:
        cap = self._require_cap()
        if tolerance is None:
            tolerance = self.tolerance

        fps = self._fps()
        index = max(0, int(round(time_seconds * fps)))

        gap = index - self._next_index
        if self._next_index >= 0 and 0 <= gap <= self._opencv_config.max_grab_ahead:
            for _ in range(gap):
                if not cap.grab():
                    self._next_index = -1
                    raise FrameSourceError(f"Failed to decode frame {index} at {time_seconds:.3f}s")
        else:
            cap.set(cv2.CAP_PROP_POS_FRAMES, index)

        ret, frame = cap.read()
        if not ret or frame is None:
            # Position is unknown after a failed read; force a seek next time
            self._next_index = -1
            raise FrameSourceError(f"Failed to decode frame {index} at {time_seconds:.3f}s")

        self._next_index = index + 1
        actual_time = self._decoded_time(cap, index, fps)
        if abs(actual_time - time_seconds) > tolerance:
            raise FrameSourceError(
                f"No frame within {tolerance:.3f}s of {time_seconds:.3f}s "
                f"(decoder landed on {actual_time:.3f}s)"
            )

        return FrameData.from_numpy(
            frame,
            timestamp=actual_time,
            frame_index=index,
            source=self.source_id,
        )
