"""
Activity grid (heat map) accumulation.

Detected subject boxes are mapped onto an N x N grid over normalized frame
space. Every cell a box touches is incremented, so partially visible or
overlapping subjects contribute to all the cells they cover.

The grid is indexed [row, col] = [y, x] with row 0 at the bottom of the frame,
matching the bottom-left origin of the normalized boxes.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Tuple

import numpy as np

from models.detection import BoundingBox
from models.frame import FrameData

# Max edges closer than this to a cell boundary are treated as on it
_EDGE_EPS = 1e-9


def _cell_range(lo: float, hi: float, grid_size: int) -> Tuple[int, int]:
    """
    Inclusive cell index range covered by the interval [lo, hi].

    The start edge uses floor(lo * n). The end edge uses floor(hi * n) unless hi
    lands exactly on a cell boundary, in which case the next cell is not touched.
    """
    last = grid_size - 1
    start = min(max(int(math.floor(lo * grid_size)), 0), last)
    end = int(math.ceil(hi * grid_size - _EDGE_EPS)) - 1
    end = min(max(end, 0), last)
    return start, max(start, end)


def accumulate(grid: np.ndarray, box: BoundingBox) -> None:
    """
    Increment every grid cell overlapped by a box, in place.

    Boxes partly or fully outside [0, 1] are clamped onto the edge cells.

    Args:
        grid: Square integer array of shape (N, N).
        box: Normalized bounding box.
    """
    grid_size = grid.shape[0]
    if grid_size == 0:
        return
    start_x, end_x = _cell_range(box.min_x, box.max_x, grid_size)
    start_y, end_y = _cell_range(box.min_y, box.max_y, grid_size)
    grid[start_y:end_y + 1, start_x:end_x + 1] += 1


class ActivityGrid:
    """
    Square counter grid owned by pass 1 of an export run.

    Example:
        grid = ActivityGrid(20)
        grid.add_all(d.bbox for d in detections)
        region = estimate_tracking_region(grid)
    """

    def __init__(self, grid_size: int = 20):
        if grid_size < 0:
            raise ValueError(f"grid_size must be non-negative, got {grid_size}")
        self._cells = np.zeros((grid_size, grid_size), dtype=np.int64)

    @property
    def size(self) -> int:
        return self._cells.shape[0]

    @property
    def max_value(self) -> int:
        if self._cells.size == 0:
            return 0
        return int(self._cells.max())

    @property
    def total(self) -> int:
        return int(self._cells.sum())

    def add(self, box: BoundingBox) -> None:
        accumulate(self._cells, box)

    def add_all(self, boxes: Iterable[BoundingBox]) -> int:
        """Accumulate several boxes. Returns how many were added."""
        count = 0
        for box in boxes:
            accumulate(self._cells, box)
            count += 1
        return count

    def as_array(self) -> np.ndarray:
        """Read-only view of the counts."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActivityGrid):
            return NotImplemented
        return np.array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return f"ActivityGrid(size={self.size}, max={self.max_value}, total={self.total})"


def build_activity_grid(
    frames: Iterable[FrameData],
    detector,
    grid_size: int = 20,
) -> ActivityGrid:
    """
    Run detection on sampled frames and accumulate every box.

    A detector failure on a single frame is logged and that frame skipped.

    Args:
        frames: Sampled frames (consumed lazily, one at a time).
        detector: Object with detect(frame) -> List[Detection].
        grid_size: Side length of the grid.
    """
    grid = ActivityGrid(grid_size)
    frame_count = 0
    box_count = 0
    for frame_data in frames:
        try:
            detections = detector.detect(frame_data.frame)
        except Exception as e:
            logging.warning(f"Detection failed on sample at {frame_data.timestamp:.2f}s: {e}")
            continue
        frame_count += 1
        box_count += grid.add_all(d.bbox for d in detections)

    logging.info(
        f"Activity grid built: frames={frame_count}, boxes={box_count}, "
        f"max_cell={grid.max_value}"
    )
    return grid
