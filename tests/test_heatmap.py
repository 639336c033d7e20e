"""
Tests for activity grid accumulation.
"""

import random

import numpy as np
import pytest

from algorithms.heatmap import ActivityGrid, accumulate, build_activity_grid
from models.detection import BoundingBox, Detection
from models.frame import FrameData


def _box(min_x, min_y, max_x, max_y):
    return BoundingBox(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)


class TestAccumulate:
    def test_quarter_box_on_grid_of_four(self):
        """A box covering the bottom-left quarter touches exactly 2x2 cells."""
        grid = ActivityGrid(4)
        grid.add(_box(0.0, 0.0, 0.5, 0.5))

        expected = np.zeros((4, 4), dtype=np.int64)
        expected[0:2, 0:2] = 1
        np.testing.assert_array_equal(grid.as_array(), expected)

    def test_partial_overlap_counts_touched_cells(self):
        """Box [0.1, 0.25] on a grid of 10 touches cells 1..2 on each axis."""
        grid = ActivityGrid(10)
        grid.add(_box(0.1, 0.1, 0.25, 0.25))

        cells = grid.as_array()
        assert cells[1:3, 1:3].sum() == 4
        assert cells.sum() == 4

    def test_box_over_cells_one_to_three_on_grid_of_twenty(self):
        grid = ActivityGrid(20)
        grid.add(_box(0.05, 0.05, 0.2, 0.2))

        cells = grid.as_array()
        assert (cells[1:4, 1:4] == 1).all()
        assert cells.sum() == 9

    def test_box_spanning_three_cells(self):
        grid = ActivityGrid(10)
        grid.add(_box(0.15, 0.15, 0.35, 0.35))

        cells = grid.as_array()
        assert (cells[1:4, 1:4] == 1).all()
        assert cells.sum() == 9

    def test_rows_are_bottom_up(self):
        """y near 0 is the bottom of the frame and maps to row 0."""
        grid = ActivityGrid(4)
        grid.add(_box(0.8, 0.0, 0.9, 0.1))

        assert grid.as_array()[0, 3] == 1
        assert grid.max_value == 1

    def test_out_of_range_box_is_clamped(self):
        grid = ActivityGrid(4)
        grid.add(_box(-0.5, -0.5, 1.5, 1.5))

        assert (grid.as_array() == 1).all()

    def test_box_fully_outside_hits_edge_cell(self):
        grid = ActivityGrid(4)
        grid.add(_box(1.2, 1.2, 1.4, 1.4))

        assert grid.as_array()[3, 3] == 1
        assert grid.total == 1

    def test_zero_size_grid_is_noop(self):
        cells = np.zeros((0, 0), dtype=np.int64)
        accumulate(cells, _box(0.1, 0.1, 0.2, 0.2))

        assert cells.size == 0

    def test_order_independence(self):
        rng = random.Random(7)
        boxes = []
        for _ in range(50):
            x, y = rng.random(), rng.random()
            boxes.append(_box(x, y, x + rng.random() * 0.3, y + rng.random() * 0.3))

        forward = ActivityGrid(20)
        forward.add_all(boxes)
        shuffled_boxes = list(boxes)
        rng.shuffle(shuffled_boxes)
        shuffled = ActivityGrid(20)
        shuffled.add_all(shuffled_boxes)

        assert forward == shuffled


class TestActivityGrid:
    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            ActivityGrid(-1)

    def test_empty_grid_stats(self):
        grid = ActivityGrid(0)

        assert grid.size == 0
        assert grid.max_value == 0
        assert grid.total == 0

    def test_add_all_returns_count(self):
        grid = ActivityGrid(5)

        assert grid.add_all([_box(0, 0, 0.1, 0.1), _box(0.5, 0.5, 0.6, 0.6)]) == 2

    def test_as_array_is_read_only(self):
        grid = ActivityGrid(3)

        with pytest.raises(ValueError):
            grid.as_array()[0, 0] = 5


class StaticDetector:
    def __init__(self, detections, fail_on=()):
        self._detections = detections
        self._fail_on = set(fail_on)
        self.calls = 0

    def detect(self, frame):
        self.calls += 1
        if self.calls in self._fail_on:
            raise RuntimeError("model crashed")
        return self._detections


class TestBuildActivityGrid:
    def _frames(self, count):
        frame = np.zeros((4, 4, 3), dtype=np.uint8)
        return [FrameData.from_numpy(frame, timestamp=i * 10.0) for i in range(count)]

    def test_accumulates_across_frames(self):
        detector = StaticDetector([Detection.from_bounds(0.0, 0.0, 0.5, 0.5)])

        grid = build_activity_grid(self._frames(3), detector, grid_size=4)

        assert grid.as_array()[0, 0] == 3
        assert grid.as_array()[3, 3] == 0

    def test_detector_failure_skips_frame(self):
        detector = StaticDetector([Detection.from_bounds(0.0, 0.0, 0.5, 0.5)], fail_on=[2])

        grid = build_activity_grid(self._frames(3), detector, grid_size=4)

        assert detector.calls == 3
        assert grid.as_array()[0, 0] == 2

    def test_no_frames(self):
        grid = build_activity_grid([], StaticDetector([]), grid_size=4)

        assert grid.total == 0
