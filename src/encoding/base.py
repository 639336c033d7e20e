"""
VideoSink interface for encoded video output.

A sink accepts frames in strictly increasing presentation-time order and
exposes a readiness signal; producers must poll is_ready() before each push
instead of buffering without bound.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Tuple

import cv2
import numpy as np


class SinkError(RuntimeError):
    """Raised when a sink cannot be opened, written, or finalized."""


class VideoSink(ABC):
    """
    Abstract base class for video sinks.

    Lifecycle:
        1. open(path, size, fps)
        2. For each frame: wait for is_ready(), then push(prepare(frame), ts)
        3. finish() to flush and finalize, or abandon() on a fatal error
    """

    def __init__(self):
        self._path: Optional[str] = None
        self._size: Optional[Tuple[int, int]] = None
        self._fps: float = 0.0
        self._last_timestamp: Optional[float] = None
        self._frames_pushed = 0

    @property
    def path(self) -> Optional[str]:
        return self._path

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        """Output (width, height)."""
        return self._size

    @property
    def frames_pushed(self) -> int:
        return self._frames_pushed

    @abstractmethod
    def open(self, path: str, size: Tuple[int, int], fps: float) -> None:
        """
        Create the output file.

        Raises:
            SinkError: If the output cannot be created.
        """
        pass

    @abstractmethod
    def is_ready(self) -> bool:
        """Whether push() may be called now."""
        pass

    @abstractmethod
    def _enqueue(self, buffer: np.ndarray, timestamp: float) -> None:
        """Hand a validated buffer to the encoder."""
        pass

    @abstractmethod
    def finish(self) -> None:
        """
        Signal end of input and block until the file is durable.

        Raises:
            SinkError: If encoding failed.
        """
        pass

    @abstractmethod
    def abandon(self) -> None:
        """Stop encoding and discard the partial output. Safe to call multiple times."""
        pass

    def prepare(self, frame: np.ndarray) -> np.ndarray:
        """
        Convert a rendered frame into the buffer format push() expects:
        contiguous uint8 BGR at the sink's output size.
        """
        if self._size is None:
            raise SinkError("Sink is not open")

        if frame.dtype != np.uint8:
            frame = np.clip(frame, 0, 255).astype(np.uint8)
        if frame.ndim == 2:
            frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
        elif frame.shape[2] == 4:
            frame = cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)

        width, height = self._size
        if frame.shape[1] != width or frame.shape[0] != height:
            frame = cv2.resize(frame, (width, height), interpolation=cv2.INTER_AREA)
        return np.ascontiguousarray(frame)

    def push(self, buffer: np.ndarray, timestamp: float) -> None:
        """
        Append a prepared buffer at a presentation time.

        Raises:
            SinkError: If the sink is not ready.
            ValueError: If timestamp does not increase.
        """
        if not self.is_ready():
            raise SinkError("push() called while sink is not ready")
        if self._last_timestamp is not None and timestamp <= self._last_timestamp:
            raise ValueError(
                f"Timestamps must increase: {timestamp:.3f}s after {self._last_timestamp:.3f}s"
            )
        self._enqueue(buffer, timestamp)
        self._last_timestamp = timestamp
        self._frames_pushed += 1
