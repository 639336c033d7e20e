"""
Fixed-interval frame sampling.

Used by pass 1 of an export to build the activity grid from a handful of
frames spread across the whole video, and to pull demo frames to disk.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterator, List

import cv2

from models.frame import FrameData
from observation.base import FrameSource, FrameSourceError


@dataclass
class SamplerStats:
    """Outcome of the most recent sampling run."""
    produced: int = 0
    skipped: int = 0


class FrameSampler:
    """
    Pulls frames at times 0, interval, 2*interval, ... up to a cap.

    Each call to sample() starts again from time 0. A frame that fails to
    decode is skipped and the cursor still advances.

    Example:
        sampler = FrameSampler()
        for frame_data in sampler.sample(source, interval=10.0, max_count=20):
            grid.add_all(d.bbox for d in detector.detect(frame_data.frame))
    """

    def __init__(self):
        self.stats = SamplerStats()

    def sample(
        self,
        source: FrameSource,
        interval: float,
        max_count: int,
    ) -> Iterator[FrameData]:
        """
        Yield sampled frames lazily.

        The source is opened if needed and closed again afterwards when this
        call opened it. An unreadable duration yields nothing.

        Args:
            source: Frame source to sample.
            interval: Seconds between samples.
            max_count: Maximum number of frames to yield.
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self.stats = SamplerStats()
        opened_here = not source.is_open
        if opened_here:
            source.open()

        try:
            try:
                duration = source.duration()
            except FrameSourceError as e:
                logging.warning(f"Sampling skipped for {source.source_id}: {e}")
                return

            index = 0
            while self.stats.produced < max_count:
                t = index * interval
                if t >= duration:
                    break
                index += 1
                try:
                    frame_data = source.frame_at(t)
                except FrameSourceError as e:
                    self.stats.skipped += 1
                    logging.debug(f"Sample at {t:.2f}s skipped: {e}")
                    continue
                self.stats.produced += 1
                yield frame_data
        finally:
            if opened_here:
                source.close()

        logging.info(
            f"Sampled {self.stats.produced} frames from {source.source_id} "
            f"(every {interval:g}s, skipped {self.stats.skipped})"
        )


def extract_frames(
    source: FrameSource,
    output_dir: str,
    interval: float = 10.0,
    max_count: int = 20,
    prefix: str = "frame",
) -> List[str]:
    """
    Write sampled frames to disk as JPEG files.

    Returns:
        Paths of the written files, in time order.
    """
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    paths: List[str] = []
    for frame_data in FrameSampler().sample(source, interval, max_count):
        path = os.path.join(output_dir, f"{prefix}_{frame_data.timestamp:08.2f}s.jpg")
        if not cv2.imwrite(path, frame_data.frame):
            logging.warning(f"Failed to write {path}")
            continue
        paths.append(path)

    logging.info(f"Extracted {len(paths)} frames to {output_dir}")
    return paths
