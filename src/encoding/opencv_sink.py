"""
OpenCV-based video sink.

Frames are encoded by cv2.VideoWriter on a background thread fed by a bounded
queue. The sink reports not-ready while the queue is full, which is the
backpressure signal the export loop waits on.

cv2.VideoWriter has no per-frame timestamps, so the writer maps each
presentation time onto the fixed output rate and repeats the previous frame
to fill gaps left by skipped steps.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import cv2
import numpy as np

from .base import SinkError, VideoSink

_STOP = object()


@dataclass
class OpenCVSinkConfig:
    """
    Configuration for the OpenCV sink.

    Attributes:
        codec: Preferred FourCC (H.264 as "avc1").
        fallback_codec: FourCC tried when the preferred one is unavailable.
        queue_size: Frames buffered ahead of the encoder.
        join_timeout: Seconds to wait for the writer thread when abandoning.
    """
    codec: str = "avc1"
    fallback_codec: Optional[str] = "mp4v"
    queue_size: int = 8
    join_timeout: float = 10.0

    @classmethod
    def from_export_config(cls, export_cfg: Dict[str, Any]) -> "OpenCVSinkConfig":
        """Adapter: Create from the `export` config dict."""
        return cls(
            codec=export_cfg.get("codec", "avc1"),
            fallback_codec=export_cfg.get("fallback_codec", "mp4v"),
            queue_size=int(export_cfg.get("queue_size", 8)),
        )


class OpenCVVideoSink(VideoSink):
    """
    Threaded cv2.VideoWriter sink.

    Example:
        sink = OpenCVVideoSink(OpenCVSinkConfig())
        sink.open("out.mp4", (1920, 1080), fps=2.0)
        for ts, frame in frames:
            while not sink.is_ready():
                time.sleep(0.01)
            sink.push(sink.prepare(frame), ts)
        sink.finish()
    """

    def __init__(self, config: Optional[OpenCVSinkConfig] = None):
        super().__init__()
        self.config = config or OpenCVSinkConfig()
        self._writer: Optional[cv2.VideoWriter] = None
        self._queue: Optional[queue.Queue] = None
        self._thread: Optional[threading.Thread] = None
        self._abort = threading.Event()
        self._error: Optional[BaseException] = None
        self._frames_written = 0
        self._codec: Optional[str] = None

    @property
    def frames_written(self) -> int:
        """Frames encoded so far, including repeated gap fillers."""
        return self._frames_written

    @property
    def codec(self) -> Optional[str]:
        return self._codec

    def open(self, path: str, size: Tuple[int, int], fps: float) -> None:
        if self._writer is not None:
            raise SinkError(f"Sink already open: {self._path}")
        if fps <= 0:
            raise SinkError(f"Output fps must be positive, got {fps}")

        out_dir = os.path.dirname(path)
        if out_dir and not os.path.exists(out_dir):
            os.makedirs(out_dir)

        codecs = [self.config.codec]
        if self.config.fallback_codec and self.config.fallback_codec != self.config.codec:
            codecs.append(self.config.fallback_codec)

        for codec in codecs:
            writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*codec), fps, tuple(size), True)
            if writer.isOpened():
                self._writer = writer
                self._codec = codec
                break
            writer.release()
            logging.warning(f"Codec {codec} unavailable for {path}")

        if self._writer is None:
            raise SinkError(f"Could not create video writer for {path} (codecs: {codecs})")

        self._path = path
        self._size = (int(size[0]), int(size[1]))
        self._fps = float(fps)
        self._last_timestamp = None
        self._frames_pushed = 0
        self._frames_written = 0
        self._error = None
        self._abort.clear()
        self._queue = queue.Queue(maxsize=max(1, self.config.queue_size))
        self._thread = threading.Thread(target=self._writer_worker, name="video-sink")
        self._thread.daemon = True
        self._thread.start()
        logging.info(
            f"Video sink opened: {path} size={self._size[0]}x{self._size[1]} "
            f"fps={self._fps:g} codec={self._codec}"
        )

    def is_ready(self) -> bool:
        """
        Whether the encoder can take another frame.

        Raises:
            SinkError: If the writer thread has failed.
        """
        if self._error is not None:
            raise SinkError(f"Encoder failed: {self._error}") from self._error
        if self._queue is None or self._thread is None or not self._thread.is_alive():
            return False
        return not self._queue.full()

    def _enqueue(self, buffer: np.ndarray, timestamp: float) -> None:
        self._queue.put_nowait((buffer, timestamp))

    def _writer_worker(self) -> None:
        """Drain the queue into cv2.VideoWriter."""
        first_ts: Optional[float] = None
        last: Optional[np.ndarray] = None
        try:
            while not self._abort.is_set():
                item = self._queue.get()
                if item is _STOP:
                    break
                buffer, ts = item
                if first_ts is None:
                    first_ts = ts
                target = int(round((ts - first_ts) * self._fps))
                while last is not None and self._frames_written < target:
                    self._writer.write(last)
                    self._frames_written += 1
                self._writer.write(buffer)
                self._frames_written += 1
                last = buffer
        except Exception as e:
            logging.error(f"Video sink writer failed: {e}")
            self._error = e

    def _stop_worker(self, timeout: Optional[float]) -> None:
        if self._thread is None:
            return
        while self._thread.is_alive():
            try:
                self._queue.put(_STOP, timeout=0.1)
                break
            except queue.Full:
                continue
        self._thread.join(timeout=timeout)

    def finish(self) -> None:
        if self._writer is None:
            raise SinkError("Sink is not open")

        self._stop_worker(timeout=None)
        self._writer.release()
        self._writer = None
        self._thread = None

        if self._error is not None:
            if os.path.exists(self._path):
                os.remove(self._path)
            raise SinkError(f"Encoder failed: {self._error}") from self._error
        logging.info(f"Video saved: {self._path} ({self._frames_written} frames)")

    def abandon(self) -> None:
        if self._writer is None:
            return

        self._abort.set()
        if self._queue is not None:
            try:
                self._queue.put_nowait(_STOP)
            except queue.Full:
                pass
        if self._thread is not None:
            self._thread.join(timeout=self.config.join_timeout)
        if self._thread is not None and self._thread.is_alive():
            # Releasing under a write() in flight can crash the native encoder
            logging.warning(f"Video sink writer still busy after {self.config.join_timeout:g}s, writer not released")
        else:
            self._writer.release()
        self._writer = None
        self._thread = None

        if self._path and os.path.exists(self._path):
            os.remove(self._path)
        logging.warning(f"Video sink abandoned: {self._path}")
