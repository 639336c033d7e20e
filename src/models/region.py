"""
Tracking region model.
"""

from __future__ import annotations

from dataclasses import dataclass


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class TrackingRegion:
    """
    Normalized rectangle (bottom-left origin) that holds the subject activity
    for one export run.
    """
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, x: float, y: float) -> bool:
        """Point containment. Edges count as inside."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def clamped(self) -> "TrackingRegion":
        return TrackingRegion(
            min_x=_clamp01(self.min_x),
            max_x=_clamp01(self.max_x),
            min_y=_clamp01(self.min_y),
            max_y=_clamp01(self.max_y),
        )


# Returned for a grid with no cells at all
WIDE_DEFAULT_REGION = TrackingRegion(min_x=0.1, max_x=0.9, min_y=0.1, max_y=0.9)

# Returned when no cell beats the cutoff
TIGHT_DEFAULT_REGION = TrackingRegion(min_x=0.15, max_x=0.85, min_y=0.25, max_y=0.70)
