"""
Tests for tracking region estimation.
"""

import numpy as np
import pytest

from algorithms.heatmap import ActivityGrid
from algorithms.region import estimate_tracking_region
from models.config import RegionConfig
from models.detection import BoundingBox
from models.region import TIGHT_DEFAULT_REGION, WIDE_DEFAULT_REGION, TrackingRegion

FULL_BAND = RegionConfig(band_min=0.0, band_max=1.0)


def _bounds(region):
    return (region.min_x, region.max_x, region.min_y, region.max_y)


class TestFallbacks:
    def test_empty_grid_gives_wide_default(self):
        region = estimate_tracking_region(ActivityGrid(0))

        assert region == WIDE_DEFAULT_REGION
        assert _bounds(region) == (0.1, 0.9, 0.1, 0.9)

    def test_all_zero_grid_gives_tight_default(self):
        region = estimate_tracking_region(ActivityGrid(20))

        assert region == TIGHT_DEFAULT_REGION
        assert _bounds(region) == (0.15, 0.85, 0.25, 0.70)

    def test_activity_only_outside_band_gives_tight_default(self):
        """Hot cells in the top rows are ignored by the search band."""
        cells = np.zeros((20, 20), dtype=np.int64)
        cells[18, 5] = 10

        region = estimate_tracking_region(cells)

        assert region == TIGHT_DEFAULT_REGION

    def test_threshold_one_gives_tight_default(self):
        """No cell can strictly exceed the max itself."""
        grid = ActivityGrid(10)
        grid.add(BoundingBox(0.2, 0.2, 0.4, 0.4))

        assert estimate_tracking_region(grid, threshold=1.0) == TIGHT_DEFAULT_REGION

    @pytest.mark.parametrize("threshold", [-0.1, 1.1])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ValueError):
            estimate_tracking_region(ActivityGrid(4), threshold=threshold)


class TestEstimate:
    def test_quarter_box_on_grid_of_four(self):
        grid = ActivityGrid(4)
        grid.add(BoundingBox(0.0, 0.0, 0.5, 0.5))

        region = estimate_tracking_region(grid, threshold=0.4, config=FULL_BAND)

        assert region.min_x == 0.0
        assert region.max_x == pytest.approx(0.53)
        assert region.min_y == 0.0
        assert region.max_y == pytest.approx(0.58)

    def test_quarter_box_with_default_band(self):
        """On a grid of four the default band still reaches rows 0 and 1."""
        grid = ActivityGrid(4)
        grid.add(BoundingBox(0.0, 0.0, 0.5, 0.5))

        region = estimate_tracking_region(grid)

        assert _bounds(region) == pytest.approx((0.0, 0.53, 0.0, 0.58))

    def test_padding_applied(self):
        cells = np.zeros((20, 20), dtype=np.int64)
        cells[5:8, 6:12] = 4

        region = estimate_tracking_region(cells)

        assert region.min_x == pytest.approx(6 / 20 - 0.03)
        assert region.max_x == pytest.approx(12 / 20 + 0.03)
        assert region.min_y == pytest.approx(5 / 20 - 0.08)
        assert region.max_y == pytest.approx(8 / 20 + 0.08)

    def test_cutoff_is_strict(self):
        """Cells equal to the cutoff are not hot."""
        cells = np.zeros((10, 10), dtype=np.int64)
        cells[3, 3] = 10
        cells[3, 7] = 4  # cutoff = int(10 * 0.4) = 4

        region = estimate_tracking_region(cells, threshold=0.4, config=FULL_BAND)

        assert region.max_x == pytest.approx(4 / 10 + 0.03)

    def test_result_clamped_to_unit_square(self):
        cells = np.ones((10, 10), dtype=np.int64)

        region = estimate_tracking_region(cells, threshold=0.0, config=FULL_BAND)

        assert _bounds(region) == (0.0, 1.0, 0.0, 1.0)

    def test_accepts_plain_array(self):
        grid = ActivityGrid(4)
        grid.add(BoundingBox(0.0, 0.0, 0.5, 0.5))

        from_grid = estimate_tracking_region(grid)
        from_array = estimate_tracking_region(np.array(grid.as_array()))

        assert from_grid == from_array

    def test_threshold_monotonicity(self):
        """Raising the threshold never grows the region."""
        rng = np.random.default_rng(3)
        cells = rng.integers(0, 30, size=(20, 20))

        previous = None
        for threshold in np.linspace(0.0, 0.95, 12):
            region = estimate_tracking_region(cells, threshold=float(threshold))
            if previous is not None and region != TIGHT_DEFAULT_REGION:
                assert region.min_x >= previous.min_x
                assert region.max_x <= previous.max_x
                assert region.min_y >= previous.min_y
                assert region.max_y <= previous.max_y
            previous = region


class TestTrackingRegion:
    def test_contains_is_inclusive(self):
        region = TrackingRegion(0.2, 0.8, 0.1, 0.6)

        assert region.contains(0.2, 0.1)
        assert region.contains(0.8, 0.6)
        assert not region.contains(0.81, 0.5)

    def test_clamped(self):
        region = TrackingRegion(-0.1, 1.2, -0.3, 0.5).clamped()

        assert _bounds(region) == (0.0, 1.0, 0.0, 0.5)
