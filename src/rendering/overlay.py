"""
Overlay rendering for exported frames.

Draws the tracking region, shades the ignored side bands, and marks every
subject with its IN/OUT classification. Presentation only; nothing here feeds
back into the estimation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from models.detection import ClassifiedDetection
from models.region import TrackingRegion

Color = Tuple[int, int, int]

# Colors (BGR)
COLOR_REGION: Color = (0, 255, 0)  # Green
COLOR_IGNORE: Color = (0, 0, 255)  # Red
COLOR_IN: Color = (255, 255, 0)  # Cyan
COLOR_OUT: Color = (0, 165, 255)  # Orange
COLOR_ADULT_IN: Color = (255, 0, 255)  # Magenta
COLOR_ADULT_OUT: Color = (0, 0, 255)  # Red
COLOR_REF: Color = (0, 255, 255)  # Yellow
COLOR_ZOOM: Color = (0, 255, 255)  # Yellow


@dataclass
class OverlayStyle:
    """Line widths and shading for the overlay."""
    region_thickness: int = 3
    box_thickness: int = 4
    ignore_alpha: float = 0.12
    # Side bands narrower than this fraction are not shaded
    min_band: float = 0.02
    font_scale: float = 0.6


class OverlayRenderer:
    """
    Renders the tracking region and classified subjects onto a frame.

    The input frame is never modified; a new frame is returned.
    """

    def __init__(self, style: Optional[OverlayStyle] = None):
        self.style = style or OverlayStyle()

    def render(
        self,
        frame: np.ndarray,
        region: TrackingRegion,
        people: Sequence[ClassifiedDetection],
    ) -> np.ndarray:
        out = frame.copy()
        h, w = out.shape[:2]

        rx1 = int(region.min_x * w)
        rx2 = int(region.max_x * w)
        ry1 = int((1.0 - region.max_y) * h)
        ry2 = int((1.0 - region.min_y) * h)

        # Shade outside areas (ignore zones)
        shade = out.copy()
        if region.min_x > self.style.min_band:
            cv2.rectangle(shade, (0, 0), (rx1, h), COLOR_IGNORE, -1)
        if region.max_x < 1.0 - self.style.min_band:
            cv2.rectangle(shade, (rx2, 0), (w, h), COLOR_IGNORE, -1)
        alpha = self.style.ignore_alpha
        out = cv2.addWeighted(shade, alpha, out, 1.0 - alpha, 0)

        cv2.rectangle(out, (rx1, ry1), (rx2, ry2), COLOR_REGION, self.style.region_thickness)

        for person in people:
            x1, y1, x2, y2 = person.bbox.to_pixels(w, h)
            color = self._color_for(person)
            cv2.rectangle(out, (x1, y1), (x2, y2), color, self.style.box_thickness)
            self._draw_label(out, person.label, (x1, y1), color)

        return out

    @staticmethod
    def _color_for(person: ClassifiedDetection) -> Color:
        if person.is_likely_ref:
            return COLOR_REF
        if person.in_region:
            return COLOR_ADULT_IN if person.is_likely_adult else COLOR_IN
        return COLOR_ADULT_OUT if person.is_likely_adult else COLOR_OUT

    def _draw_label(self, frame: np.ndarray, label: str, origin: Tuple[int, int], color: Color) -> None:
        """Label with background, above the box."""
        x1, y1 = origin
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, th), _ = cv2.getTextSize(label, font, self.style.font_scale, 2)
        top = max(0, y1 - th - 6)
        cv2.rectangle(frame, (x1, top), (x1 + tw + 4, top + th + 6), (0, 0, 0), -1)
        cv2.putText(frame, label, (x1 + 2, top + th + 2), font, self.style.font_scale, color, 2)

    def render_zoom_preview(
        self,
        frame: np.ndarray,
        window: Tuple[int, int, int, int],
    ) -> np.ndarray:
        """
        Dim everything outside a pixel crop window and outline it.

        Args:
            frame: Source frame.
            window: (x1, y1, x2, y2) crop window, top-left origin.
        """
        x1, y1, x2, y2 = window
        dimmed = (frame * 0.5).astype(frame.dtype)
        dimmed[y1:y2, x1:x2] = frame[y1:y2, x1:x2]
        cv2.rectangle(dimmed, (x1, y1), (x2, y2), COLOR_ZOOM, 4)

        cx, cy = (x1 + x2) // 2, (y1 + y2) // 2
        cv2.line(dimmed, (cx - 20, cy), (cx + 20, cy), COLOR_ZOOM, 2)
        cv2.line(dimmed, (cx, cy - 20), (cx, cy + 20), COLOR_ZOOM, 2)
        return dimmed
