"""
Detection interfaces.

We keep this lightweight so the project can support multiple backends. Every
backend returns normalized, bottom-left origin boxes so the grid, region and
classification code never sees pixel coordinates.
"""

from __future__ import annotations

from typing import List

import numpy as np

from models.detection import Detection


class Detector:
    """Detector interface returning normalized detections."""

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """
        Detect subjects in a frame.

        Returns an empty list when nothing is found; zero detections is not
        an error.
        """
        raise NotImplementedError
