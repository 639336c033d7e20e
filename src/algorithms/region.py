"""
Tracking region estimation from an activity grid.

The hottest cells inside a vertical search band bound the region. The band
skips the rows nearest the camera (bottom of frame) and the rows above the
playing surface (top of frame). The result is padded more vertically than
horizontally since feet and heads are undercounted by the detector.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import numpy as np

from models.config import RegionConfig
from models.region import TIGHT_DEFAULT_REGION, WIDE_DEFAULT_REGION, TrackingRegion
from .heatmap import ActivityGrid


def estimate_tracking_region(
    grid: Union[ActivityGrid, np.ndarray],
    threshold: Optional[float] = None,
    config: Optional[RegionConfig] = None,
) -> TrackingRegion:
    """
    Convert an activity grid into a single normalized tracking region.

    Never fails: an empty grid yields WIDE_DEFAULT_REGION, and a grid with no
    cell above the cutoff yields TIGHT_DEFAULT_REGION.

    Args:
        grid: Populated ActivityGrid or square count array.
        threshold: Fraction of the max cell value a cell must exceed. Overrides
            config.threshold when given.
        config: Search band and padding settings.

    Returns:
        TrackingRegion clamped to [0, 1].
    """
    config = config or RegionConfig()
    if threshold is None:
        threshold = config.threshold
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")

    cells = grid.as_array() if isinstance(grid, ActivityGrid) else np.asarray(grid)
    grid_size = cells.shape[0] if cells.ndim == 2 else 0
    if grid_size == 0:
        return WIDE_DEFAULT_REGION

    max_val = int(cells.max())
    cutoff = int(max_val * threshold)

    row_start = max(0, int(grid_size * config.band_min))
    row_end = min(grid_size, int(grid_size * config.band_max))

    band = cells[row_start:row_end, :]
    hot_rows, hot_cols = np.nonzero(band > cutoff)
    if hot_rows.size == 0:
        logging.info(f"No cell above cutoff {cutoff} (max={max_val}), using default region")
        return TIGHT_DEFAULT_REGION

    min_x = int(hot_cols.min())
    max_x = int(hot_cols.max())
    min_y = int(hot_rows.min()) + row_start
    max_y = int(hot_rows.max()) + row_start

    region = TrackingRegion(
        min_x=min_x / grid_size - config.h_pad,
        max_x=(max_x + 1) / grid_size + config.h_pad,
        min_y=min_y / grid_size - config.v_pad,
        max_y=(max_y + 1) / grid_size + config.v_pad,
    ).clamped()

    logging.debug(
        f"Hot cells x[{min_x}-{max_x}] y[{min_y}-{max_y}] cutoff={cutoff} max={max_val}"
    )
    return region
